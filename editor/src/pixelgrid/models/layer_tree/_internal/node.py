"""
Pixel Grid Editor - Layer Node Data Model

Tagged tree nodes owned by LayerTree:
- Layer: a paintable buffer of color tokens (size * size, row-major)
- Group: an ordered list of child nodes, owned exclusively

Nodes convert to and from plain dicts (JSON types only) for snapshots.
The dict form is a structural clone: no list is shared with the live node.

This is part of the MODEL layer - pure data, no UI logic.
"""

from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Any

from pixelgrid.constants import TRANSPARENT, DEFAULT_OPACITY, MIN_OPACITY, MAX_OPACITY


class SnapshotError(ValueError):
    """Raised when snapshot data cannot describe a valid layer tree"""


def clamp_opacity(value: float) -> float:
    return max(MIN_OPACITY, min(MAX_OPACITY, float(value)))


class LayerNode:
    """Common fields of Layer and Group"""

    type = ''

    def __init__(self, node_id: int, name: str, visible: bool = True, opacity: float = DEFAULT_OPACITY):
        self.id = node_id
        self.name = name
        self.visible = visible
        self.opacity = clamp_opacity(opacity)

    @property
    def is_group(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'name': self.name,
            'visible': self.visible,
            'opacity': self.opacity,
        }

    def clone(self, next_id: Callable[[], int]) -> 'LayerNode':
        """Deep copy with fresh ids drawn from next_id"""
        raise NotImplementedError

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'LayerNode':
        """Build a node (recursively for groups) from its dict form

        Raises:
            SnapshotError: If the dict is missing fields or has wrong types
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Node must be an object, got {type(data).__name__}")

        node_type = data.get('type')
        if node_type == Layer.type:
            return Layer._from_dict(data)
        if node_type == Group.type:
            return Group._from_dict(data)
        raise SnapshotError(f"Unknown node type: {node_type!r}")

    @staticmethod
    def _common_fields(data: Dict[str, Any]):
        for key in ('id', 'name', 'visible', 'opacity'):
            if key not in data:
                raise SnapshotError(f"Node is missing required field '{key}'")

        node_id = data['id']
        if not isinstance(node_id, int) or isinstance(node_id, bool):
            raise SnapshotError(f"Node id must be an integer, got {node_id!r}")
        if not isinstance(data['name'], str):
            raise SnapshotError(f"Node {node_id} name must be a string")
        if not isinstance(data['visible'], bool):
            raise SnapshotError(f"Node {node_id} visible must be a boolean")
        opacity = data['opacity']
        if not isinstance(opacity, (int, float)) or isinstance(opacity, bool):
            raise SnapshotError(f"Node {node_id} opacity must be a number")
        return node_id, data['name'], data['visible'], opacity

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, name='{self.name}', visible={self.visible}, opacity={self.opacity:.2f})"


class Layer(LayerNode):
    """Paintable node holding one color token per grid cell"""

    type = 'layer'

    def __init__(self, node_id: int, name: str, size: int = 0, data: Optional[List[str]] = None,
                 visible: bool = True, opacity: float = DEFAULT_OPACITY):
        super().__init__(node_id, name, visible, opacity)
        self.data: List[str] = list(data) if data is not None else [TRANSPARENT] * (size * size)

    def clear(self):
        self.data = [TRANSPARENT] * len(self.data)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['data'] = list(self.data)
        return result

    def clone(self, next_id: Callable[[], int]) -> 'Layer':
        return Layer(next_id(), self.name, data=self.data, visible=self.visible, opacity=self.opacity)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'Layer':
        node_id, name, visible, opacity = cls._common_fields(data)
        pixels = data.get('data')
        if not isinstance(pixels, list):
            raise SnapshotError(f"Layer {node_id} is missing its pixel data")
        for token in pixels:
            if not isinstance(token, str):
                raise SnapshotError(f"Layer {node_id} holds a non-string color token: {token!r}")
        return cls(node_id, name, data=pixels, visible=visible, opacity=opacity)


class Group(LayerNode):
    """Container node; its children are composited as part of the group"""

    type = 'group'

    def __init__(self, node_id: int, name: str, children: Optional[List[LayerNode]] = None,
                 visible: bool = True, opacity: float = DEFAULT_OPACITY, expanded: bool = True):
        super().__init__(node_id, name, visible, opacity)
        self.children: List[LayerNode] = children if children is not None else []
        self.expanded = expanded

    @property
    def is_group(self) -> bool:
        return True

    def iter_descendants(self) -> Iterator[LayerNode]:
        """All nodes below this group, depth-first pre-order"""
        for child in self.children:
            yield child
            if child.is_group:
                yield from child.iter_descendants()

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['expanded'] = self.expanded
        result['children'] = [child.to_dict() for child in self.children]
        return result

    def clone(self, next_id: Callable[[], int]) -> 'Group':
        group = Group(next_id(), self.name, visible=self.visible, opacity=self.opacity, expanded=self.expanded)
        group.children = [child.clone(next_id) for child in self.children]
        return group

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'Group':
        node_id, name, visible, opacity = cls._common_fields(data)
        children = data.get('children')
        if not isinstance(children, list):
            raise SnapshotError(f"Group {node_id} is missing its children list")
        expanded = data.get('expanded', True)
        if not isinstance(expanded, bool):
            raise SnapshotError(f"Group {node_id} expanded must be a boolean")
        return cls(node_id, name, children=[LayerNode.from_dict(child) for child in children],
                   visible=visible, opacity=opacity, expanded=expanded)


class ItemLocation(NamedTuple):
    """Where a node lives: its owning group (None at top level), the sibling
    list that holds it, and its index in that list"""
    item: LayerNode
    parent: Optional[Group]
    siblings: List[LayerNode]
    index: int
