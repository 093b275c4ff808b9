"""
Layer Tree Query Mixin

Read-only lookups over the node tree. Nothing here mutates state or
notifies listeners.
"""

from typing import Dict, Iterator, List, Optional, Tuple, Any

from ._internal.node import LayerNode, Layer, Group, ItemLocation


class LayerQueryMixin:
    """Mixin providing tree queries for LayerTree

    This mixin assumes the parent class has:
        - self._nodes: top-level node list
        - self._active_item_id: active node id or None
        - self._size: grid side length
    """

    # ========================================
    # Properties
    # ========================================

    @property
    def nodes(self) -> List[LayerNode]:
        """Top-level nodes (live objects, first = drawn on top)"""
        return self._nodes

    @property
    def active_item_id(self) -> Optional[int]:
        return self._active_item_id

    @property
    def size(self) -> int:
        """Grid side length"""
        return self._size

    @property
    def next_id(self) -> int:
        return self._next_id

    # ========================================
    # Lookup
    # ========================================

    def find_item(self, item_id: Optional[int]) -> Optional[ItemLocation]:
        """Depth-first search for a node by id

        Args:
            item_id: Node id

        Returns:
            ItemLocation(item, parent, siblings, index), or None if not found
        """
        if item_id is None:
            return None
        return self._find_item_recursive(item_id, self._nodes, None)

    def _find_item_recursive(self, item_id: int, items: List[LayerNode],
                             parent: Optional[Group]) -> Optional[ItemLocation]:
        for index, item in enumerate(items):
            if item.id == item_id:
                return ItemLocation(item, parent, items, index)
            if item.is_group:
                found = self._find_item_recursive(item_id, item.children, item)
                if found:
                    return found
        return None

    def get_item(self, item_id: Optional[int]) -> Optional[LayerNode]:
        found = self.find_item(item_id)
        return found.item if found else None

    def get_active_item(self) -> Optional[LayerNode]:
        return self.get_item(self._active_item_id)

    def get_active_layer(self) -> Optional[Layer]:
        """Active node if it is a paintable Layer, else None"""
        item = self.get_active_item()
        if item is not None and not item.is_group:
            return item
        return None

    # ========================================
    # Traversal
    # ========================================

    def iter_nodes(self) -> Iterator[Tuple[LayerNode, Optional[Group]]]:
        """Every node with its parent group, depth-first pre-order"""
        stack = [(node, None) for node in reversed(self._nodes)]
        while stack:
            node, parent = stack.pop()
            yield node, parent
            if node.is_group:
                stack.extend((child, node) for child in reversed(node.children))

    def iter_layers(self) -> Iterator[Layer]:
        """Every Layer node, depth-first pre-order"""
        for node, _ in self.iter_nodes():
            if not node.is_group:
                yield node

    def first_layer(self) -> Optional[Layer]:
        return next(self.iter_layers(), None)

    def get_layer_count(self) -> int:
        return sum(1 for _ in self.iter_layers())

    def get_node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def get_all_ids(self) -> List[int]:
        return [node.id for node, _ in self.iter_nodes()]

    def is_descendant(self, node_id: int, ancestor: LayerNode) -> bool:
        """True if node_id is ancestor itself or lies anywhere below it"""
        if ancestor.id == node_id:
            return True
        if not ancestor.is_group:
            return False
        return any(child.id == node_id for child in ancestor.iter_descendants())

    # ========================================
    # UI State
    # ========================================

    def get_ui_state(self) -> Dict[str, Any]:
        """Summary handed to listeners: live node tree plus active id"""
        return {'nodes': self._nodes, 'active_item_id': self._active_item_id}
