"""
Complex-plane view rectangles and the aspect-ratio correction shared by the
renderer and the zoom controller.

The renderer never maps the caller's bounds straight onto the pixel grid: it
first widens one axis so that a pixel covers the same distance horizontally
and vertically. Anything that later converts pixels back into plane
coordinates must apply :func:`adjust_to_aspect` with the same pixel size,
otherwise the inverse mapping lands on the wrong region.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Tuple
import logging

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def require_positive_int(value, name: str) -> int:
    """Return ``value`` as an int, raising InvalidArgumentError unless it is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be positive, got {value}")
    return int(value)


@dataclass(frozen=True)
class ViewBounds:
    """
    Rectangle in the complex plane.

    Instances are immutable; every zoom produces a new value.
    """

    real_min: float
    real_max: float
    imag_min: float
    imag_max: float

    def __post_init__(self):
        """Validate ordering and finiteness of the four edges."""
        for name in ('real_min', 'real_max', 'imag_min', 'imag_max'):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise InvalidArgumentError(f"{name} must be a finite number, got {value!r}")
            object.__setattr__(self, name, float(value))

        if self.real_min >= self.real_max or self.imag_min >= self.imag_max:
            raise InvalidArgumentError(
                "Invalid bounds: min values must be less than max values "
                f"(got {self.as_tuple()})"
            )

    @property
    def real_range(self) -> float:
        return self.real_max - self.real_min

    @property
    def imag_range(self) -> float:
        return self.imag_max - self.imag_min

    @property
    def center(self) -> complex:
        return complex((self.real_min + self.real_max) / 2,
                       (self.imag_min + self.imag_max) / 2)

    @property
    def aspect(self) -> float:
        """Width over height of the rectangle in plane units."""
        return self.real_range / self.imag_range

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return ``(real_min, real_max, imag_min, imag_max)``."""
        return (self.real_min, self.real_max, self.imag_min, self.imag_max)

    @classmethod
    def from_tuple(cls, values) -> 'ViewBounds':
        """Create bounds from a 4-sequence ``(real_min, real_max, imag_min, imag_max)``."""
        values = tuple(values)
        if len(values) != 4:
            raise InvalidArgumentError("bounds must be (real_min, real_max, imag_min, imag_max)")
        return cls(*values)

    @classmethod
    def centered(cls, center_real: float, center_imag: float,
                 real_range: float, imag_range: float) -> 'ViewBounds':
        """Create bounds of the given size around a center point."""
        return cls(
            center_real - real_range / 2,
            center_real + real_range / 2,
            center_imag - imag_range / 2,
            center_imag + imag_range / 2,
        )

    def __str__(self) -> str:
        return (f"[{self.real_min:.10g}, {self.real_max:.10g}] x "
                f"[{self.imag_min:.10g}, {self.imag_max:.10g}]i")


# Classic full-set view
DEFAULT_BOUNDS = ViewBounds(-2.5, 1.5, -2.0, 2.0)


def adjust_to_aspect(bounds: ViewBounds, pixel_width: int, pixel_height: int) -> ViewBounds:
    """
    Widen ``bounds`` along one axis so it has the pixel grid's aspect ratio.

    If the canvas is relatively wider than the requested region the real
    range grows to ``imag_range * canvas_aspect`` around the real center;
    otherwise the imaginary range grows to ``real_range / canvas_aspect``
    around the imaginary center. The requested region is always fully
    contained in the result.

    Args:
        bounds: Requested view
        pixel_width, pixel_height: Size of the grid the view is mapped onto

    Returns:
        The rectangle that pixel (0, 0)..(width, height) actually covers
    """
    pixel_width = require_positive_int(pixel_width, "pixel_width")
    pixel_height = require_positive_int(pixel_height, "pixel_height")

    real_range = bounds.real_range
    imag_range = bounds.imag_range
    canvas_aspect = pixel_width / pixel_height
    set_aspect = real_range / imag_range

    if canvas_aspect == set_aspect:
        return bounds

    real_min, real_max = bounds.real_min, bounds.real_max
    imag_min, imag_max = bounds.imag_min, bounds.imag_max

    if canvas_aspect > set_aspect:
        center_real = (bounds.real_min + bounds.real_max) / 2
        adjusted_range = imag_range * canvas_aspect
        real_min = center_real - adjusted_range / 2
        real_max = center_real + adjusted_range / 2
    else:
        center_imag = (bounds.imag_min + bounds.imag_max) / 2
        adjusted_range = real_range / canvas_aspect
        imag_min = center_imag - adjusted_range / 2
        imag_max = center_imag + adjusted_range / 2

    return ViewBounds(real_min, real_max, imag_min, imag_max)
