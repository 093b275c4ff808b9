"""
Pixel Grid Editor - Layer Tree Model

THE MODEL of the editor. Owns the ordered tree of Layers and Groups, the
active node, and the id counter.

This class handles:
- Tree lifecycle (init with a seeded layer)
- Structural edits (add, delete, duplicate, move, merge)
- Node properties (name, visibility, opacity, expanded)
- Pixel writes into the active layer
- Snapshot API (for undo/redo support)
- Composite access (lazily created CompositeEngine)

The LayerTree is INDEPENDENT of UI and of history:
- No Qt imports
- No rendering logic
- No undo stack (HistoryManager stores its snapshots)

Usage:
    tree = LayerTree(16)
    tree.write(0, '#FF0000')
    group_id = tree.add_group()
    tree.add_layer()
    pixels = tree.get_composite()

    snapshot = tree.get_snapshot()
    tree.load_snapshot(snapshot)
"""

import logging
from typing import Callable, Dict, List, Optional, Any

from .query_mixin import LayerQueryMixin
from .layer_mixin import LayerStructureMixin
from .pixel_mixin import LayerPixelMixin
from .serialization_mixin import LayerSnapshotMixin
from ._internal.node import LayerNode
from pixelgrid.models.region import DirtyRegion


class LayerTree(LayerStructureMixin, LayerPixelMixin, LayerSnapshotMixin, LayerQueryMixin):
    """Layer/group tree with an active node

    Top-level `nodes[0]` and, within a group, `children[0]` are drawn on
    top of their later siblings.

    Listeners (add_listener) receive get_ui_state() after structural,
    property, clear and snapshot changes. Dirty listeners
    (add_dirty_listener) receive the invalidated DirtyRegion, or None for a
    full invalidation, after every change that alters visible pixels.
    """

    def __init__(self, size: Optional[int] = None):
        """Create a tree; with a size, seed it via init(size)"""
        self._logger = logging.getLogger('LayerTree')

        self._nodes: List[LayerNode] = []
        self._active_item_id: Optional[int] = None
        self._next_id = 1
        self._size = 0

        self._listeners: List[Callable[[Dict[str, Any]], None]] = []
        self._dirty_listeners: List[Callable[[Optional[DirtyRegion]], None]] = []
        self._compositor = None

        if size is not None:
            self.init(size)

    # ========================================
    # Composite
    # ========================================

    @property
    def compositor(self):
        """CompositeEngine bound to this tree (created on first use)"""
        if self._compositor is None:
            from pixelgrid.services.compositor import CompositeEngine
            self._compositor = CompositeEngine(self)
        return self._compositor

    def get_composite(self) -> List[str]:
        """Flattened visible image, size*size color tokens"""
        return self.compositor.get_composite()

    def mark_dirty(self, region: Optional[DirtyRegion] = None):
        """Invalidate the composite (a region, or everything when None)"""
        for callback in list(self._dirty_listeners):
            callback(region)

    def add_dirty_listener(self, callback: Callable[[Optional[DirtyRegion]], None]):
        self._dirty_listeners.append(callback)

    def remove_dirty_listener(self, callback: Callable[[Optional[DirtyRegion]], None]):
        if callback in self._dirty_listeners:
            self._dirty_listeners.remove(callback)

    # ========================================
    # Listeners
    # ========================================

    def add_listener(self, callback: Callable[[Dict[str, Any]], None]):
        """Add a callback notified with get_ui_state() after tree changes

        Args:
            callback: Function receiving the UI state dict
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Dict[str, Any]], None]):
        """Remove a listener"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self):
        state = self.get_ui_state()
        for callback in list(self._listeners):
            try:
                callback(state)
            except Exception as e:
                self._logger.error(f"Error notifying listener: {e}", exc_info=True)

    def __repr__(self) -> str:
        return (f"LayerTree(size={self._size}, nodes={self.get_node_count()}, "
                f"active={self._active_item_id})")
