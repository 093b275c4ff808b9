"""
Layer Tree Pixel Mixin

Writes into the active Layer's buffer. Writes are silently ignored when the
active node is a Group, nothing is active, or the index is off the grid.
Single-pixel writes only mark the composite dirty; they do not notify
listeners since the node tree itself is unchanged.
"""

from typing import Iterable, List

from pixelgrid.constants import TRANSPARENT
from pixelgrid.models.region import DirtyRegion


class LayerPixelMixin:
    """Mixin providing pixel writes for LayerTree

    This mixin assumes the parent class has:
        - self._size, self._logger
        - self.get_active_layer(), self.mark_dirty(), self._notify_listeners()
    """

    def _pixel_region(self, pixel_index: int) -> DirtyRegion:
        x = pixel_index % self._size
        y = pixel_index // self._size
        return DirtyRegion(x, y, x, y)

    def write(self, pixel_index: int, color: str) -> bool:
        """Write one pixel of the active layer

        Returns:
            True if the pixel was written
        """
        layer = self.get_active_layer()
        if layer is None or not 0 <= pixel_index < len(layer.data):
            return False

        layer.data[pixel_index] = color
        self.mark_dirty(self._pixel_region(pixel_index))
        return True

    def write_indices(self, indices: Iterable[int], color: str) -> int:
        """Write one color to many pixels of the active layer

        Off-grid indices are skipped. Only the bounding box of the written
        pixels is invalidated.

        Returns:
            Number of pixels written
        """
        layer = self.get_active_layer()
        if layer is None:
            return 0

        limit = len(layer.data)
        written = [index for index in indices if 0 <= index < limit]
        for index in written:
            layer.data[index] = color

        if written:
            self.mark_dirty(DirtyRegion.from_indices(written, self._size))
        return len(written)

    def set_layer_data(self, data: List[str]) -> bool:
        """Replace the active layer's whole buffer (e.g. a flood fill result)

        Returns:
            True if replaced; False if no active layer or the length is wrong
        """
        layer = self.get_active_layer()
        if layer is None:
            return False
        if len(data) != len(layer.data):
            self._logger.warning(f"set_layer_data: expected {len(layer.data)} pixels, got {len(data)}")
            return False

        layer.data = list(data)
        self.mark_dirty()
        return True

    def clear_active(self) -> bool:
        """Reset every pixel of the active layer to transparent"""
        layer = self.get_active_layer()
        if layer is None:
            return False

        layer.clear()
        self.mark_dirty()
        self._logger.debug(f"Cleared layer {layer.id}")
        self._notify_listeners()
        return True

    def get_pixel(self, pixel_index: int) -> str:
        """Active layer's color at pixel_index (transparent if unavailable)"""
        layer = self.get_active_layer()
        if layer is None or not 0 <= pixel_index < len(layer.data):
            return TRANSPARENT
        return layer.data[pixel_index]
