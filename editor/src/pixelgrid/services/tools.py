"""
Pixel Grid Editor - Raster Tool Algorithms

This module produces the pixel indices touched by each drawing tool.
Functions are pure: they take grid-local integer coordinates plus the grid
side length and return indices (index = y * size + x). Callers clip
coordinates; only circle_filled clips for itself since its footprint can
leave the grid.

Functions:
    Shapes:
        - line
        - rectangle
        - rectangle_filled
        - circle_points
        - circle
        - circle_filled
        - dither
    Region tools:
        - flood_fill
        - magic_wand
        - eyedropper
        - bounding_box
"""

import math
from collections import deque
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from pixelgrid.constants import TRANSPARENT
from pixelgrid.models.region import DirtyRegion


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize(x1: int, y1: int, x2: int, y2: int):
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


def _circle_params(x1: int, y1: int, x2: int, y2: int):
    """Center and radius from a bounding box drag"""
    rx = abs(x2 - x1) / 2
    ry = abs(y2 - y1) / 2
    cx = _round_half_up(min(x1, x2) + rx)
    cy = _round_half_up(min(y1, y2) + ry)
    r = _round_half_up(max(rx, ry))
    return cx, cy, r


# ========================================
# Shapes
# ========================================

def line(x1: int, y1: int, x2: int, y2: int, size: int) -> List[int]:
    """Bresenham line, both endpoints inclusive

    Args:
        x1, y1: Start cell
        x2, y2: End cell
        size: Grid side length

    Returns:
        Indices in drawing order, one per visited cell
    """
    indices = []
    dx = abs(x2 - x1)
    dy = -abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx + dy

    while True:
        indices.append(y1 * size + x1)
        if x1 == x2 and y1 == y2:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x1 += sx
        if e2 <= dx:
            err += dx
            y1 += sy
    return indices


def rectangle(x1: int, y1: int, x2: int, y2: int, size: int) -> List[int]:
    """Rectangle outline over the normalized bounds, without duplicates"""
    start_x, start_y, end_x, end_y = _normalize(x1, y1, x2, y2)
    indices = {}
    for x in range(start_x, end_x + 1):
        indices[start_y * size + x] = None
        indices[end_y * size + x] = None
    for y in range(start_y, end_y + 1):
        indices[y * size + start_x] = None
        indices[y * size + end_x] = None
    return list(indices)


def rectangle_filled(x1: int, y1: int, x2: int, y2: int, size: int) -> List[int]:
    """Every cell of the normalized box, row-major"""
    start_x, start_y, end_x, end_y = _normalize(x1, y1, x2, y2)
    return [y * size + x
            for y in range(start_y, end_y + 1)
            for x in range(start_x, end_x + 1)]


def circle_points(x1: int, y1: int, x2: int, y2: int) -> List[Tuple[int, int]]:
    """Midpoint circle outline cells inscribed in the drag box

    The radius is the larger half-extent of the box, so a non-square drag
    still produces a circle. Points are de-duplicated, in generation order,
    and may lie off the grid.
    """
    cx, cy, r = _circle_params(x1, y1, x2, y2)
    points = {}
    x, y = r, 0
    err = 1 - r

    while x >= y:
        for point in ((cx + x, cy + y), (cx + y, cy + x),
                      (cx + x, cy - y), (cx + y, cy - x),
                      (cx - x, cy + y), (cx - y, cy + x),
                      (cx - x, cy - y), (cx - y, cy - x)):
            points[point] = None
        y += 1
        if err < 0:
            err += 2 * y + 1
        else:
            x -= 1
            err += 2 * (y - x) + 1
    return list(points)


def circle(x1: int, y1: int, x2: int, y2: int, size: int) -> List[int]:
    """Circle outline as indices (see circle_points); not clipped to the grid"""
    indices = {}
    for x, y in circle_points(x1, y1, x2, y2):
        indices[y * size + x] = None
    return list(indices)


def circle_filled(x1: int, y1: int, x2: int, y2: int, size: int) -> List[int]:
    """Filled circle, clipped to the grid, row-major"""
    cx, cy, r = _circle_params(x1, y1, x2, y2)
    ys, xs = np.mgrid[cy - r:cy + r + 1, cx - r:cx + r + 1]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= r * r
    mask &= (xs >= 0) & (xs < size) & (ys >= 0) & (ys < size)
    return (ys[mask] * size + xs[mask]).tolist()


def dither(indices: Iterable[int], size: int) -> List[int]:
    """Keep the checkerboard cells ((x + y) even) of a stroke"""
    return [i for i in indices if (i % size + i // size) % 2 == 0]


# ========================================
# Region Tools
# ========================================

def _neighbors(index: int, size: int):
    """4-connected neighbors inside the grid: up, down, left, right"""
    x = index % size
    y = index // size
    if y > 0:
        yield index - size
    if y < size - 1:
        yield index + size
    if x > 0:
        yield index - 1
    if x < size - 1:
        yield index + 1


def _contiguous(start_index: int, data: Sequence[str], size: int) -> List[int]:
    """Breadth-first visit of the 4-connected region sharing the start color.

    The target color is captured once before traversal, so callers that
    write while iterating the result still compare against the unmodified values.
    """
    target = data[start_index]
    visited = {start_index}
    order = []
    queue = deque([start_index])

    while queue:
        current = queue.popleft()
        order.append(current)
        for neighbor in _neighbors(current, size):
            if neighbor not in visited and data[neighbor] == target:
                visited.add(neighbor)
                queue.append(neighbor)
    return order


def flood_fill(start_index: int, new_color: str, data: List[str], size: int) -> List[str]:
    """Fill the contiguous region under start_index with new_color

    Args:
        start_index: Seed pixel index
        new_color: Color token to write
        data: Layer buffer (not modified)
        size: Grid side length

    Returns:
        A new filled buffer, or `data` itself when there is nothing to do
        (seed already has new_color, or seed is off the grid)
    """
    if not 0 <= start_index < min(len(data), size * size):
        return data
    if data[start_index] == new_color:
        return data

    filled = list(data)
    for index in _contiguous(start_index, data, size):
        filled[index] = new_color
    return filled


def magic_wand(start_index: int, data: Sequence[str], size: int) -> Set[int]:
    """Indices of the contiguous region under start_index (no writes)"""
    if not 0 <= start_index < min(len(data), size * size):
        return set()
    return set(_contiguous(start_index, data, size))


def eyedropper(index: int, composite: Sequence[str]) -> Optional[str]:
    """Color at index in the composite buffer, None when transparent"""
    if not 0 <= index < len(composite):
        return None
    color = composite[index]
    return color if color != TRANSPARENT else None


def bounding_box(indices: Iterable[int], size: int) -> Optional[DirtyRegion]:
    """Smallest region covering all indices, None for an empty collection

    Used for the magic wand marquee.
    """
    return DirtyRegion.from_indices(indices, size)
