"""
Numba JIT compilation backend for escape-time computation.

This module provides JIT-compiled versions of the Mandelbrot iteration. The
kernels run single-threaded and produce exactly the counts of the NumPy
iterator in ``mandelbrot_zoom.core.math_functions``.
"""

import numpy as np
import logging

import numba
from numba import jit

from ..core.math_functions import ComplexPlane, IterationResult, ESCAPE_RADIUS_SQ
from ..core.bounds import require_positive_int

logger = logging.getLogger(__name__)


@jit(nopython=True, cache=True)
def escape_time_kernel(cr, ci, max_iter, escape_radius_sq):
    """
    JIT-compiled escape time of a single point.

    Args:
        cr, ci: Real and imaginary parts of c
        max_iter: Maximum iterations
        escape_radius_sq: Squared escape radius

    Returns:
        Escape iteration, or max_iter if the orbit stayed bounded
    """
    zr = 0.0
    zi = 0.0

    for n in range(max_iter):
        zr_sq = zr * zr
        zi_sq = zi * zi

        if zr_sq + zi_sq > escape_radius_sq:
            return n

        # z = z^2 + c
        zi = 2.0 * zr * zi + ci
        zr = zr_sq - zi_sq + cr

    return max_iter


@jit(nopython=True, cache=True)
def mandelbrot_kernel(real_axis, imag_axis, max_iter, escape_radius_sq):
    """
    JIT-compiled Mandelbrot kernel over a rectangular grid.

    Args:
        real_axis: Real coordinate of each column
        imag_axis: Imaginary coordinate of each row
        max_iter: Maximum iterations
        escape_radius_sq: Squared escape radius

    Returns:
        (height, width) int32 array of escape counts
    """
    height = imag_axis.shape[0]
    width = real_axis.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        ci = imag_axis[i]
        for j in range(width):
            iterations[i, j] = escape_time_kernel(real_axis[j], ci, max_iter, escape_radius_sq)

    return iterations


class NumbaAccelerator:
    """Numba-accelerated escape-time backend."""

    def __init__(self):
        """Initialize Numba accelerator."""
        self.version = numba.__version__
        logger.debug(f"Numba accelerator using numba {self.version}")

    def mandelbrot_iteration(self, plane: ComplexPlane, max_iter: int) -> IterationResult:
        """
        Accelerated Mandelbrot computation for every pixel of a plane.

        Args:
            plane: Pixel grid and its aspect-corrected bounds
            max_iter: Maximum iterations

        Returns:
            IterationResult
        """
        max_iter = require_positive_int(max_iter, "max_iterations")
        real_axis, imag_axis = plane.create_coordinate_axes()

        iterations = mandelbrot_kernel(real_axis, imag_axis, max_iter, ESCAPE_RADIUS_SQ)
        return IterationResult(iterations, max_iter)

    def escape_time(self, real: float, imag: float, max_iter: int) -> int:
        """Escape time of a single point through the compiled kernel."""
        max_iter = require_positive_int(max_iter, "max_iterations")
        return int(escape_time_kernel(float(real), float(imag), max_iter, ESCAPE_RADIUS_SQ))


# Global accelerator instance
_numba_accelerator = None


def get_numba_accelerator() -> NumbaAccelerator:
    """Get the global Numba accelerator instance."""
    global _numba_accelerator
    if _numba_accelerator is None:
        _numba_accelerator = NumbaAccelerator()
    return _numba_accelerator
