"""
Rectangular selection and clipboard helpers

A Selection is a marquee over grid cells (from a drag or the magic wand's
bounding box). A Clipboard holds a width x height block of color tokens
copied out of a layer buffer; pasting places it at the grid origin.
"""

from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from pixelgrid.constants import TRANSPARENT
from pixelgrid.models.region import DirtyRegion


class Selection(NamedTuple):
    """Normalized, inclusive marquee bounds"""
    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_points(cls, x1: int, y1: int, x2: int, y2: int) -> 'Selection':
        """Selection spanning two corners given in any order"""
        return cls(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))

    @classmethod
    def from_region(cls, region: DirtyRegion) -> 'Selection':
        return cls(region.min_x, region.min_y, region.max_x, region.max_y)

    @property
    def width(self) -> int:
        return self.x2 - self.x1 + 1

    @property
    def height(self) -> int:
        return self.y2 - self.y1 + 1


class Clipboard(NamedTuple):
    """Copied block, row-major: data[y * width + x]"""
    width: int
    height: int
    data: List[str]


def region_indices(selection: Selection, size: int) -> List[int]:
    """Row-major indices of the selected cells that lie on the grid"""
    return DirtyRegion(selection.x1, selection.y1, selection.x2, selection.y2).indices(size)


def copy_region(data: Sequence[str], selection: Selection, size: int) -> Clipboard:
    """Copy the selected block out of a layer buffer

    Cells outside the grid copy as transparent, so the clipboard is always
    selection.width x selection.height.
    """
    block = []
    for y in range(selection.y1, selection.y2 + 1):
        for x in range(selection.x1, selection.x2 + 1):
            if 0 <= x < size and 0 <= y < size:
                block.append(data[y * size + x])
            else:
                block.append(TRANSPARENT)
    return Clipboard(selection.width, selection.height, block)


def paste_indices(clipboard: Optional[Clipboard], size: int) -> Iterator[Tuple[int, str]]:
    """(target_index, token) pairs placing the clipboard at the grid origin

    Cells that would fall outside the grid are dropped.
    """
    if clipboard is None:
        return
    for y in range(min(clipboard.height, size)):
        for x in range(min(clipboard.width, size)):
            yield y * size + x, clipboard.data[y * clipboard.width + x]
