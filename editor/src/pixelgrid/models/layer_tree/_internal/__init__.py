"""Internal node classes for the layer tree - import from models.layer_tree instead"""

from .node import LayerNode, Layer, Group, ItemLocation, SnapshotError, clamp_opacity

__all__ = ['LayerNode', 'Layer', 'Group', 'ItemLocation', 'SnapshotError', 'clamp_opacity']
