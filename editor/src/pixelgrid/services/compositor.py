"""
Composite Engine - flattens a LayerTree into the visible image

The composite buffer is cached. LayerTree reports invalidations through its
dirty listeners: a DirtyRegion when only known pixels changed, None when
anything structural, visibility or opacity changed. When only a region is
pending and a cache exists, just that region is recomputed.

Draw order: the tree is flattened depth-first pre-order (parents before
children, earlier siblings first) into visible layers, then reversed so the
node nearest the top of the tree is drawn last.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from pixelgrid.constants import TRANSPARENT
from pixelgrid.models.color import ColorBlend
from pixelgrid.models.region import DirtyRegion


class CompositeEngine:
    """Cached flattening of one LayerTree"""

    def __init__(self, tree):
        """
        Args:
            tree: LayerTree to composite; the engine subscribes to its
                invalidations
        """
        self._logger = logging.getLogger('Compositor')
        self._tree = tree
        self._cache: Optional[List[str]] = None
        self._full_dirty = True
        self._dirty_region: Optional[DirtyRegion] = None
        self.recompute_count = 0
        tree.add_dirty_listener(self.invalidate)

    # ========================================
    # Invalidation
    # ========================================

    def invalidate(self, region: Optional[DirtyRegion] = None):
        """Mark the cache stale

        Args:
            region: Changed pixel bounds, or None to invalidate everything.
                Regions accumulate by union; a full invalidation wins.
        """
        if region is None:
            self._full_dirty = True
            self._dirty_region = None
        elif not self._full_dirty:
            self._dirty_region = region.union(self._dirty_region)

    @property
    def is_dirty(self) -> bool:
        return self._full_dirty or self._dirty_region is not None

    # ========================================
    # Compositing
    # ========================================

    def get_composite(self) -> List[str]:
        """Flattened visible image

        Returns:
            The cached buffer when nothing changed since the last call.
            Treat it as read-only.
        """
        if self._cache is not None and not self.is_dirty:
            return self._cache

        layers = self.flatten()
        first = self._tree.first_layer()
        length = len(first.data) if first is not None else 0

        region = self._dirty_region
        if (not self._full_dirty and region is not None
                and self._cache is not None and len(self._cache) == length):
            buffer = list(self._cache)
            indices = region.indices(self._tree.size)
            for index in indices:
                buffer[index] = TRANSPARENT
            self._blend(buffer, layers, indices)
            self._logger.debug(f"Recomposited region {tuple(region)} ({len(indices)} px)")
        else:
            buffer = [TRANSPARENT] * length
            self._blend(buffer, layers, range(length))
            self._logger.debug(f"Recomposited {length} px from {len(layers)} layers")

        self._cache = buffer
        self._full_dirty = False
        self._dirty_region = None
        self.recompute_count += 1
        return buffer

    def flatten(self) -> List[Tuple[object, float]]:
        """Visible layers with effective opacity, in drawing order

        An invisible node prunes its whole subtree. Effective opacity is the
        product of the layer's opacity and all its ancestors' opacities.

        Returns:
            [(Layer, effective_opacity), ...] bottom-most first
        """
        result = []
        stack = [(node, 1.0) for node in reversed(self._tree.nodes)]
        while stack:
            node, inherited = stack.pop()
            if not node.visible:
                continue
            opacity = inherited * node.opacity
            if node.is_group:
                stack.extend((child, opacity) for child in reversed(node.children))
            else:
                result.append((node, opacity))
        result.reverse()
        return result

    @staticmethod
    def _blend(buffer: List[str], layers, indices: Sequence[int]):
        for layer, opacity in layers:
            data = layer.data
            for index in indices:
                if index >= len(data):
                    continue
                token = data[index]
                if token == TRANSPARENT:
                    continue
                if opacity >= 1:
                    buffer[index] = token
                else:
                    buffer[index] = ColorBlend.composite(token, buffer[index], opacity)
