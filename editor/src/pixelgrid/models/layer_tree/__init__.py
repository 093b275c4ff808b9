"""LayerTree model mixins package"""

from .query_mixin import LayerQueryMixin
from .layer_mixin import LayerStructureMixin
from .pixel_mixin import LayerPixelMixin
from .serialization_mixin import LayerSnapshotMixin
from .core import LayerTree
from ._internal.node import LayerNode, Layer, Group, ItemLocation, SnapshotError

__all__ = [
    'LayerTree',
    'LayerNode',
    'Layer',
    'Group',
    'ItemLocation',
    'SnapshotError',
    'LayerQueryMixin',
    'LayerStructureMixin',
    'LayerPixelMixin',
    'LayerSnapshotMixin',
]
