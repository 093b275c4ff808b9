"""
Pixel Grid Editor - Color Blending

Canonical color token handling for the engine.
Color tokens are opaque strings ('#RGB', '#RRGGBB', 'rgb()', 'rgba()', or the
empty transparent sentinel). This module turns them into channels and
composites two of them with the straight-alpha "over" operator.
"""

import math
import re
from typing import Dict, NamedTuple, Optional

from pixelgrid.constants import TRANSPARENT, COLOR_CACHE_SIZE


_HEX6_RE = re.compile(r'^#([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$', re.IGNORECASE)
_HEX3_RE = re.compile(r'^#([a-f\d])([a-f\d])([a-f\d])$', re.IGNORECASE)
_RGBA_RE = re.compile(r'^rgba?\((\d+),\s*(\d+),\s*(\d+)(?:,\s*([\d.]+))?\)$')


class RGBA(NamedTuple):
    """Parsed color: uint8 channels plus straight alpha in [0, 1]"""
    r: int
    g: int
    b: int
    a: float


CLEAR = RGBA(0, 0, 0, 0)


def _round_half_up(value: float) -> int:
    """Round .5 upward (Python's round() is banker's rounding)"""
    return int(math.floor(value + 0.5))


def _format_alpha(alpha: float) -> str:
    """Shortest textual form of an alpha value ('1', '0.5', '0.25')"""
    if alpha == int(alpha):
        return str(int(alpha))
    return repr(alpha)


class ColorBlend:
    """Color token parsing and alpha compositing.

    Parsing is memoized in a class-level FIFO cache limited to
    COLOR_CACHE_SIZE entries; the oldest inserted token is evicted first.
    """

    _cache: Dict[str, RGBA] = {}
    _max_cache_size = COLOR_CACHE_SIZE

    # ========================================
    # Parsing
    # ========================================

    @classmethod
    def parse(cls, token: Optional[str]) -> RGBA:
        """Parse a color token into channels.

        Args:
            token: Color token string

        Returns:
            RGBA tuple. Empty, malformed or non-string input yields fully
            transparent RGBA(0, 0, 0, 0).
        """
        if not token or not isinstance(token, str):
            return CLEAR

        cached = cls._cache.get(token)
        if cached is not None:
            return cached

        match = _HEX6_RE.match(token)
        if match:
            result = RGBA(int(match.group(1), 16), int(match.group(2), 16), int(match.group(3), 16), 1)
        else:
            match = _HEX3_RE.match(token)
            if match:
                result = RGBA(int(match.group(1) * 2, 16), int(match.group(2) * 2, 16), int(match.group(3) * 2, 16), 1)
            else:
                match = _RGBA_RE.match(token)
                if match:
                    alpha = match.group(4)
                    try:
                        a = float(alpha) if alpha is not None else 1
                        result = RGBA(int(match.group(1)), int(match.group(2)), int(match.group(3)), a)
                    except ValueError:
                        # '1.2.3' style alpha
                        result = CLEAR
                else:
                    result = CLEAR

        cls._cache_color(token, result)
        return result

    @classmethod
    def _cache_color(cls, token: str, value: RGBA):
        if len(cls._cache) >= cls._max_cache_size:
            oldest = next(iter(cls._cache))
            del cls._cache[oldest]
        cls._cache[token] = value

    @classmethod
    def clear_cache(cls):
        """Empty the parse cache"""
        cls._cache.clear()

    @classmethod
    def cache_size(cls) -> int:
        return len(cls._cache)

    # ========================================
    # Compositing
    # ========================================

    @classmethod
    def composite(cls, top: str, bottom: str, top_opacity: float) -> str:
        """Composite top over bottom (Porter-Duff "over", straight alpha).

        Args:
            top: Color token drawn on top
            bottom: Color token underneath
            top_opacity: Extra opacity multiplier for the top color [0-1]

        Returns:
            'rgba(r, g, b, a)' token, or TRANSPARENT when nothing is covered
        """
        top_rgba = cls.parse(top)
        bottom_rgba = cls.parse(bottom)
        top_a = top_rgba.a * top_opacity

        # Full coverage: skip the division so no float error creeps in
        if top_a >= 1:
            return f"rgba({top_rgba.r}, {top_rgba.g}, {top_rgba.b}, 1)"

        out_a = top_a + bottom_rgba.a * (1 - top_a)
        if out_a == 0:
            return TRANSPARENT

        bottom_weight = bottom_rgba.a * (1 - top_a)
        out_r = _round_half_up((top_rgba.r * top_a + bottom_rgba.r * bottom_weight) / out_a)
        out_g = _round_half_up((top_rgba.g * top_a + bottom_rgba.g * bottom_weight) / out_a)
        out_b = _round_half_up((top_rgba.b * top_a + bottom_rgba.b * bottom_weight) / out_a)

        return f"rgba({out_r}, {out_g}, {out_b}, {_format_alpha(out_a)})"

    # ========================================
    # Conversions
    # ========================================

    @staticmethod
    def rgb_to_hex(r: int, g: int, b: int) -> str:
        """Convert uint8 channels to '#RRGGBB' (uppercase)"""
        return f"#{r:02X}{g:02X}{b:02X}"
