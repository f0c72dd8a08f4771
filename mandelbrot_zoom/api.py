"""
Main API classes for Mandelbrot rendering.

This module provides the high-level rendering interface: a validated
``RenderRequest`` goes in, a fresh ``PixelBuffer`` comes out. Rendering holds
no state between calls, so disjoint requests may run concurrently.
"""

import numpy as np
from typing import Optional, Tuple
from dataclasses import dataclass, field
import logging
import time

from .core.bounds import ViewBounds, DEFAULT_BOUNDS, require_positive_int
from .core.errors import InvalidArgumentError
from .core.math_functions import ComplexPlane, FractalIterator, IterationResult
from .rendering.coloring import HueColoring
from .acceleration.numba_backend import get_numba_accelerator

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100
BACKENDS = ('numba', 'numpy')


@dataclass(frozen=True)
class RenderRequest:
    """Everything needed to render one frame."""

    pixel_width: int
    pixel_height: int
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    bounds: ViewBounds = DEFAULT_BOUNDS

    def validate(self) -> None:
        """Validate request parameters."""
        require_positive_int(self.pixel_width, "pixel_width")
        require_positive_int(self.pixel_height, "pixel_height")
        require_positive_int(self.max_iterations, "max_iterations")
        if not isinstance(self.bounds, ViewBounds):
            raise InvalidArgumentError(f"bounds must be a ViewBounds, got {type(self.bounds).__name__}")


@dataclass
class PixelBuffer:
    """
    Rendered RGBA pixels.

    ``pixels`` has shape (height, width, 4) in row-major order. ``bounds`` is
    the aspect-corrected rectangle the grid actually covers, which is what a
    caller needs to map pixels back to the plane.
    """

    width: int
    height: int
    pixels: np.ndarray
    bounds: ViewBounds
    max_iterations: int
    iterations: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        """Check the pixel array matches the declared size."""
        if self.pixels.shape != (self.height, self.width, 4) or self.pixels.dtype != np.uint8:
            raise ValueError(
                f"pixels must be uint8 with shape {(self.height, self.width, 4)}, "
                f"got {self.pixels.dtype} {self.pixels.shape}"
            )

    def __len__(self) -> int:
        return self.width * self.height

    def tobytes(self) -> bytes:
        """Flat row-major RGBA bytes, four per pixel."""
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA value of the pixel in column ``x``, row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        return tuple(int(v) for v in self.pixels[y, x])

    def to_image(self):
        """Convert to a Pillow RGBA image."""
        from PIL import Image
        return Image.fromarray(self.pixels)


class MandelbrotRenderer:
    """Escape-time renderer with a selectable computation backend."""

    def __init__(self, backend: str = 'numba', coloring: Optional[HueColoring] = None):
        """
        Initialize renderer.

        Args:
            backend: ``'numba'`` (JIT kernel) or ``'numpy'`` (vectorized arrays)
            coloring: Escape-count coloring (HSL hue ramp by default)
        """
        if backend not in BACKENDS:
            raise InvalidArgumentError(f"Unknown backend '{backend}'. Available: {', '.join(BACKENDS)}")
        self.backend = backend
        self.coloring = coloring or HueColoring()

        logger.debug(f"MandelbrotRenderer initialized: backend={backend}")

    def compute(self, request: RenderRequest) -> Tuple[ComplexPlane, IterationResult]:
        """
        Run the escape-time iteration without coloring.

        Returns:
            The aspect-corrected plane and the escape counts for every pixel
        """
        request.validate()
        plane = ComplexPlane(request.bounds, request.pixel_width, request.pixel_height)

        if self.backend == 'numba':
            result = get_numba_accelerator().mandelbrot_iteration(plane, request.max_iterations)
        else:
            result = FractalIterator(request.max_iterations).iterate_plane(plane)

        return plane, result

    def render(self, request: RenderRequest) -> PixelBuffer:
        """
        Render a request into a new pixel buffer.

        Args:
            request: Output size, iteration limit and view bounds

        Returns:
            PixelBuffer owned by the caller
        """
        start_time = time.time()
        logger.info(f"Starting render: {request.pixel_width}x{request.pixel_height}, "
                    f"max_iterations={request.max_iterations}, bounds={request.bounds}")

        plane, result = self.compute(request)
        rgba = self.coloring.apply(result)

        total_time = time.time() - start_time
        logger.info(f"Render complete: {total_time:.2f}s ({self.backend})")

        return PixelBuffer(
            width=plane.width,
            height=plane.height,
            pixels=rgba,
            bounds=plane.bounds,
            max_iterations=request.max_iterations,
            iterations=result.iterations,
        )


# Global renderer instance
_default_renderer = None


def get_default_renderer() -> MandelbrotRenderer:
    """Get the shared renderer used by the module-level helpers."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = MandelbrotRenderer()
    return _default_renderer


def render(request: RenderRequest) -> PixelBuffer:
    """Render a request with the default renderer."""
    return get_default_renderer().render(request)


def render_view(pixel_width: int, pixel_height: int,
                max_iterations: int = DEFAULT_MAX_ITERATIONS,
                bounds: ViewBounds = DEFAULT_BOUNDS) -> PixelBuffer:
    """Render the given view at the given size."""
    return render(RenderRequest(pixel_width, pixel_height, max_iterations, bounds))
