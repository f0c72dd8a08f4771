"""
Double-precision limits for deep zooms.

Coordinates are plain float64, which resolves roughly 15-16 significant
digits. Once neighbouring pixels differ only in the last few of those digits
the image degrades into blocks. These helpers estimate how close a view is to
that point so callers can warn the user; nothing here changes the arithmetic.
"""

import math
import numpy as np
import logging

from .bounds import ViewBounds, DEFAULT_BOUNDS, require_positive_int

logger = logging.getLogger(__name__)

# Digits of float64 that can be spent on pixel spacing before visible degradation.
PRECISION_LIMIT_DIGITS = 13
FLOAT64_DIGITS = np.finfo(np.float64).precision


def zoom_level(bounds: ViewBounds, reference: ViewBounds = DEFAULT_BOUNDS) -> float:
    """Magnification of ``bounds`` relative to ``reference`` along the real axis."""
    return reference.real_range / bounds.real_range


def pixel_step(bounds: ViewBounds, width: int, height: int) -> float:
    """Smaller of the horizontal and vertical plane distance between adjacent pixels."""
    width = require_positive_int(width, "pixel_width")
    height = require_positive_int(height, "pixel_height")
    return min(bounds.real_range / width, bounds.imag_range / height)


def digits_in_use(bounds: ViewBounds, width: int, height: int) -> float:
    """
    Significant digits needed to tell adjacent pixels apart.

    Args:
        bounds: View being rendered
        width, height: Pixel grid size

    Returns:
        ``log10(magnitude / pixel_step)`` where magnitude is the largest
        coordinate in the view, at least 1
    """
    magnitude = max(abs(bounds.real_min), abs(bounds.real_max),
                    abs(bounds.imag_min), abs(bounds.imag_max), 1.0)
    return math.log10(magnitude / pixel_step(bounds, width, height))


def precision_exhausted(bounds: ViewBounds, width: int, height: int) -> bool:
    """True when the view needs more digits than float64 can reliably spend."""
    return digits_in_use(bounds, width, height) > PRECISION_LIMIT_DIGITS


def format_number(value: float, digits: int = 12) -> str:
    """Format a coordinate with enough digits to distinguish deep-zoom bounds."""
    digits = min(digits, FLOAT64_DIGITS + 2)
    return f"{value:.{digits}g}"
