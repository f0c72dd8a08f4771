"""
Core mathematical functions for Mandelbrot iteration.

This module provides the pixel-to-plane coordinate mapping and a vectorized
NumPy escape-time iterator. The Numba kernel in
``mandelbrot_zoom.acceleration.numba_backend`` implements the same iteration
and must produce identical counts.
"""

import numpy as np
from typing import Tuple
import logging

from .bounds import ViewBounds, adjust_to_aspect, require_positive_int

logger = logging.getLogger(__name__)

# Squared escape radius; a point escapes once |z|^2 is strictly greater.
ESCAPE_RADIUS_SQ = 4.0


class ComplexPlane:
    """Maps a pixel grid onto the aspect-corrected region of a view."""

    def __init__(self, bounds: ViewBounds, width: int, height: int):
        """
        Initialize the plane for a view and output resolution.

        Args:
            bounds: Requested view; it is widened to the grid's aspect ratio
            width, height: Image resolution in pixels
        """
        self.width = require_positive_int(width, "pixel_width")
        self.height = require_positive_int(height, "pixel_height")
        self.requested_bounds = bounds
        self.bounds = adjust_to_aspect(bounds, self.width, self.height)

        self.x_scale = self.bounds.real_range / self.width
        self.y_scale = self.bounds.imag_range / self.height

    def create_coordinate_axes(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create the real coordinate of every column and imaginary coordinate of every row.

        Column ``x`` maps to ``real_min + (x / width) * real_range``; the right
        edge ``real_max`` itself is never sampled.

        Returns:
            Tuple of (real_axis, imag_axis) float64 arrays
        """
        real_axis = (self.bounds.real_min
                     + (np.arange(self.width, dtype=np.float64) / self.width)
                     * self.bounds.real_range)
        imag_axis = (self.bounds.imag_min
                     + (np.arange(self.height, dtype=np.float64) / self.height)
                     * self.bounds.imag_range)
        return real_axis, imag_axis

    def create_coordinate_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Create 2D (height, width) arrays of real and imaginary coordinates."""
        real_axis, imag_axis = self.create_coordinate_axes()
        return np.meshgrid(real_axis, imag_axis)

    def pixel_to_complex(self, px: float, py: float) -> complex:
        """Convert pixel coordinates to a complex number."""
        real = self.bounds.real_min + (px / self.width) * self.bounds.real_range
        imag = self.bounds.imag_min + (py / self.height) * self.bounds.imag_range
        return complex(real, imag)

    def complex_to_pixel(self, c: complex) -> Tuple[int, int]:
        """Convert a complex number to the pixel containing it."""
        px = int(np.floor((c.real - self.bounds.real_min) / self.x_scale))
        py = int(np.floor((c.imag - self.bounds.imag_min) / self.y_scale))
        return px, py


class IterationResult:
    """Container for escape-time results."""

    def __init__(self, iterations: np.ndarray, max_iter: int):
        """
        Initialize iteration result.

        Args:
            iterations: Array of escape counts, ``max_iter`` for points that never escaped
            max_iter: Iteration limit used to produce the counts
        """
        self.iterations = iterations
        self.max_iter = max_iter
        self.shape = iterations.shape

    @property
    def escaped(self) -> np.ndarray:
        """Boolean mask of points that left the escape radius."""
        return self.iterations < self.max_iter

    def get_normalized_iterations(self) -> np.ndarray:
        """Escape counts divided by the iteration limit, in [0, 1]."""
        return self.iterations.astype(np.float64) / self.max_iter


class FractalIterator:
    """Vectorized NumPy escape-time iteration."""

    def __init__(self, max_iter: int = 100):
        """
        Initialize the iterator.

        Args:
            max_iter: Maximum number of iterations per point
        """
        self.max_iter = require_positive_int(max_iter, "max_iterations")

    def mandelbrot_iteration(self, c_real: np.ndarray, c_imag: np.ndarray) -> IterationResult:
        """
        Compute escape counts for arrays of ``c`` values.

        Only points still inside the radius are advanced, so escaped orbits
        never overflow.

        Args:
            c_real: Real parts of c
            c_imag: Imaginary parts of c (same shape as ``c_real``)

        Returns:
            IterationResult with int32 escape counts
        """
        c_real = np.asarray(c_real, dtype=np.float64)
        c_imag = np.asarray(c_imag, dtype=np.float64)
        if c_real.shape != c_imag.shape:
            raise ValueError("c_real and c_imag must have the same shape")

        zr = np.zeros_like(c_real)
        zi = np.zeros_like(c_imag)
        iterations = np.full(c_real.shape, self.max_iter, dtype=np.int32)
        active = np.ones(c_real.shape, dtype=bool)

        for i in range(self.max_iter):
            zr_sq = zr * zr
            zi_sq = zi * zi

            escaping = active & (zr_sq + zi_sq > ESCAPE_RADIUS_SQ)
            iterations[escaping] = i
            active &= ~escaping

            if not np.any(active):
                break

            # z = z^2 + c
            zr_active = zr[active]
            zi_active = zi[active]
            zr[active] = zr_sq[active] - zi_sq[active] + c_real[active]
            zi[active] = 2.0 * zr_active * zi_active + c_imag[active]

        return IterationResult(iterations, self.max_iter)

    def iterate_plane(self, plane: ComplexPlane) -> IterationResult:
        """Compute escape counts for every pixel of a plane."""
        c_real, c_imag = plane.create_coordinate_arrays()
        return self.mandelbrot_iteration(c_real, c_imag)


def escape_time(real: float, imag: float, max_iter: int = 100) -> int:
    """
    Number of iterations before ``z -> z^2 + c`` leaves radius 2.

    The check runs before each update and uses a strict ``> 4`` on the squared
    magnitude, so ``c = 2`` escapes at iteration 2 (|z|^2 is exactly 4 at
    iteration 1).

    Returns:
        Escape iteration, or ``max_iter`` if the orbit stayed bounded
    """
    zr = 0.0
    zi = 0.0
    for i in range(max_iter):
        zr_sq = zr * zr
        zi_sq = zi * zi
        if zr_sq + zi_sq > ESCAPE_RADIUS_SQ:
            return i
        zi = 2.0 * zr * zi + imag
        zr = zr_sq - zi_sq + real
    return max_iter
