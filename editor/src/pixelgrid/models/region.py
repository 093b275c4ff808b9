"""Rectangular pixel regions used for dirty tracking and selections"""

from typing import Iterable, List, NamedTuple, Optional

import numpy as np


class DirtyRegion(NamedTuple):
    """Inclusive cell bounds: min_x <= x <= max_x, min_y <= y <= max_y"""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def from_indices(cls, indices: Iterable[int], size: int) -> Optional['DirtyRegion']:
        """Bounding box of a collection of pixel indices

        Args:
            indices: Pixel indices (index = y * size + x)
            size: Grid side length

        Returns:
            DirtyRegion, or None when indices is empty
        """
        arr = np.fromiter(indices, dtype=np.int64)
        if arr.size == 0:
            return None
        xs = arr % size
        ys = arr // size
        return cls(int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max()))

    def union(self, other: Optional['DirtyRegion']) -> 'DirtyRegion':
        if other is None:
            return self
        return DirtyRegion(min(self.min_x, other.min_x), min(self.min_y, other.min_y),
                           max(self.max_x, other.max_x), max(self.max_y, other.max_y))

    def clip(self, size: int) -> Optional['DirtyRegion']:
        """Intersect with the grid, None if nothing is left"""
        min_x, min_y = max(self.min_x, 0), max(self.min_y, 0)
        max_x, max_y = min(self.max_x, size - 1), min(self.max_y, size - 1)
        if min_x > max_x or min_y > max_y:
            return None
        return DirtyRegion(min_x, min_y, max_x, max_y)

    def indices(self, size: int) -> List[int]:
        """Row-major pixel indices covered on a grid of side `size`"""
        clipped = self.clip(size)
        if clipped is None:
            return []
        return [y * size + x
                for y in range(clipped.min_y, clipped.max_y + 1)
                for x in range(clipped.min_x, clipped.max_x + 1)]

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1
