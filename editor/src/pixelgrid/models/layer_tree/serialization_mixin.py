"""
Layer Tree Serialization Mixin

Provides snapshot methods for the LayerTree model:
- get_snapshot: structural clone of the whole tree (JSON types only)
- load_snapshot: validate and replace the whole tree

Snapshot format:
    {
        "nodes": [ {node dict}, ... ],
        "activeItemId": int | None,
        "nextId": int
    }

The older "layers" key is accepted in place of "nodes" when loading.
"""

from typing import Any, Dict, List, Optional

from ._internal.node import LayerNode, SnapshotError


class LayerSnapshotMixin:
    """Mixin providing snapshot methods for LayerTree"""

    def get_snapshot(self) -> Dict[str, Any]:
        """Deep copy of the tree state, safe to store in history

        Returns:
            Snapshot dict sharing no list with the live tree
        """
        return {
            'nodes': [node.to_dict() for node in self._nodes],
            'activeItemId': self._active_item_id,
            'nextId': self._next_id,
        }

    def load_snapshot(self, snapshot: Dict[str, Any]):
        """Replace the whole tree with the snapshot's content

        Validation happens before anything is replaced, so a rejected
        snapshot leaves the live tree untouched.

        Args:
            snapshot: Dict as produced by get_snapshot()

        Raises:
            SnapshotError: If the snapshot cannot describe a valid tree
        """
        if not isinstance(snapshot, dict):
            raise SnapshotError(f"Snapshot must be an object, got {type(snapshot).__name__}")

        raw_nodes = snapshot.get('nodes', snapshot.get('layers'))
        if not isinstance(raw_nodes, list):
            raise SnapshotError("Snapshot is missing its 'nodes' list")
        if 'activeItemId' not in snapshot:
            raise SnapshotError("Snapshot is missing 'activeItemId'")

        nodes = [LayerNode.from_dict(data) for data in raw_nodes]
        size = self._validate_nodes(nodes)

        ids = [node.id for node in self._walk(nodes)]
        active_id = snapshot['activeItemId']
        if active_id is not None and active_id not in ids:
            raise SnapshotError(f"activeItemId {active_id} names no node")

        max_id = max(ids)
        next_id = snapshot.get('nextId')
        if not isinstance(next_id, int) or isinstance(next_id, bool) or next_id <= max_id:
            if next_id is not None:
                self._logger.warning(f"Snapshot nextId {next_id!r} would reuse ids, using {max_id + 1}")
            next_id = max_id + 1

        self._nodes = nodes
        self._active_item_id = active_id
        self._next_id = next_id
        self._size = size
        self.mark_dirty()

        self._logger.debug(f"Loaded snapshot: {len(ids)} nodes, {size}x{size}, active {active_id}")
        self._notify_listeners()

    @staticmethod
    def _walk(nodes: List[LayerNode]):
        for node in nodes:
            yield node
            if node.is_group:
                yield from node.iter_descendants()

    def _validate_nodes(self, nodes: List[LayerNode]) -> int:
        """Check id uniqueness and buffer sizes

        Returns:
            Grid side length implied by the layer buffers
        """
        seen = set()
        data_length: Optional[int] = None
        for node in self._walk(nodes):
            if node.id in seen:
                raise SnapshotError(f"Duplicate node id {node.id}")
            seen.add(node.id)
            if node.is_group:
                continue
            if data_length is None:
                data_length = len(node.data)
            elif len(node.data) != data_length:
                raise SnapshotError(
                    f"Layer {node.id} has {len(node.data)} pixels, expected {data_length}")

        if data_length is None:
            raise SnapshotError("Snapshot contains no layer")

        size = int(round(data_length ** 0.5))
        if size <= 0 or size * size != data_length:
            raise SnapshotError(f"Layer data length {data_length} is not a square grid")
        return size
