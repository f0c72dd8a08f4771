"""
Escape-count coloring for Mandelbrot renders.

Points that never escape are painted with the inside color (black). Every
other escape count is mapped linearly onto the hue wheel and converted from
HSL at fixed saturation and lightness. The scalar and vectorized conversions
perform the same floating-point operations, so they agree bit for bit.
"""

import math
import numpy as np
from typing import Tuple
from dataclasses import dataclass
import logging

from ..core.math_functions import IterationResult

logger = logging.getLogger(__name__)

DEFAULT_SATURATION = 0.8
DEFAULT_LIGHTNESS = 0.5
OPAQUE = 255


@dataclass(frozen=True)
class ColorRGB:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        """Validate RGB values."""
        for component in (self.r, self.g, self.b):
            if not 0 <= component <= 255:
                raise ValueError("RGB components must be between 0 and 255")

    def to_tuple(self) -> Tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_rgba(self, alpha: int = OPAQUE) -> Tuple[int, int, int, int]:
        """Convert to RGBA tuple."""
        return (self.r, self.g, self.b, alpha)


BLACK = ColorRGB(0, 0, 0)


def _to_byte(value: float) -> int:
    # Halves round up
    return int(math.floor(value * 255 + 0.5))


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> ColorRGB:
    """
    Convert an HSL color to 8-bit RGB with the six-sector formula.

    Args:
        hue: Hue in degrees, [0, 360)
        saturation: Saturation in [0, 1]
        lightness: Lightness in [0, 1]
    """
    chroma = (1 - abs(2 * lightness - 1)) * saturation
    sector_pos = hue / 60
    x = chroma * (1 - abs(sector_pos % 2 - 1))
    m = lightness - chroma / 2

    sector = min(max(int(math.floor(sector_pos)), 0), 5)
    if sector == 0:
        r, g, b = chroma, x, 0.0
    elif sector == 1:
        r, g, b = x, chroma, 0.0
    elif sector == 2:
        r, g, b = 0.0, chroma, x
    elif sector == 3:
        r, g, b = 0.0, x, chroma
    elif sector == 4:
        r, g, b = x, 0.0, chroma
    else:
        r, g, b = chroma, 0.0, x

    return ColorRGB(_to_byte(r + m), _to_byte(g + m), _to_byte(b + m))


def hsl_to_rgb_array(hue: np.ndarray, saturation: float, lightness: float) -> np.ndarray:
    """
    Vectorized :func:`hsl_to_rgb`.

    Args:
        hue: Array of hues in degrees
        saturation, lightness: Scalars shared by all entries

    Returns:
        uint8 array of shape ``hue.shape + (3,)``
    """
    hue = np.asarray(hue, dtype=np.float64)
    chroma = (1 - abs(2 * lightness - 1)) * saturation
    sector_pos = hue / 60
    x = chroma * (1 - np.abs(np.mod(sector_pos, 2) - 1))
    m = lightness - chroma / 2

    sector = np.clip(np.floor(sector_pos), 0, 5).astype(np.int8)
    zero = np.zeros_like(hue)
    full = np.full_like(hue, chroma)

    conditions = [sector == k for k in range(6)]
    r = np.select(conditions, [full, x, zero, zero, x, full])
    g = np.select(conditions, [x, full, full, x, zero, zero])
    b = np.select(conditions, [zero, zero, x, full, full, x])

    rgb = np.stack([r, g, b], axis=-1)
    return np.floor((rgb + m) * 255 + 0.5).astype(np.uint8)


class HueColoring:
    """Maps escape counts onto the hue wheel; bounded points get the inside color."""

    def __init__(self, saturation: float = DEFAULT_SATURATION,
                 lightness: float = DEFAULT_LIGHTNESS,
                 inside_color: ColorRGB = BLACK):
        """
        Initialize the coloring.

        Args:
            saturation: HSL saturation for escaped points
            lightness: HSL lightness for escaped points
            inside_color: Color of points that reached the iteration limit
        """
        if not 0.0 <= saturation <= 1.0:
            raise ValueError("saturation must be between 0 and 1")
        if not 0.0 <= lightness <= 1.0:
            raise ValueError("lightness must be between 0 and 1")
        self.saturation = saturation
        self.lightness = lightness
        self.inside_color = inside_color

    def color_for(self, iterations: int, max_iter: int) -> ColorRGB:
        """Color of a single escape count."""
        if iterations >= max_iter:
            return self.inside_color
        normalized = iterations / max_iter
        return hsl_to_rgb(normalized * 360, self.saturation, self.lightness)

    def apply(self, result: IterationResult) -> np.ndarray:
        """
        Color an entire iteration result.

        Returns:
            uint8 RGBA array of shape ``result.shape + (4,)``
        """
        iterations = result.iterations
        hue = iterations.astype(np.float64) / result.max_iter * 360

        rgba = np.empty(iterations.shape + (4,), dtype=np.uint8)
        rgba[..., :3] = hsl_to_rgb_array(hue, self.saturation, self.lightness)
        rgba[~result.escaped, :3] = self.inside_color.to_tuple()
        rgba[..., 3] = OPAQUE
        return rgba
