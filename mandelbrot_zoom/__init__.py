"""
Mandelbrot set rendering with square-selection zoom navigation.

This library renders the Mandelbrot set into RGBA pixel buffers for any
rectangular view of the complex plane and tracks a stack of views so that
zooms can be undone in order.

Key Features:
- Aspect-ratio correction shared by rendering and zoom selection
- Numba JIT escape-time kernel with an identical NumPy fallback backend
- HSL hue-ramp coloring
- Zoom history with LIFO undo
- PNG export with embedded render metadata

Example usage:
    >>> from mandelbrot_zoom import ViewportController, SelectionRect, DisplayPlacement, render
    >>> controller = ViewportController()
    >>> buffer = render(controller.render_request(400, 300))
    >>> placement = DisplayPlacement(buffer.width, buffer.height)
    >>> controller.zoom_in(SelectionRect(150, 100, 100), placement)
    >>> controller.zoom_out()
"""

__version__ = "1.0.0"
__author__ = "Mandelbrot Zoom Team"

from mandelbrot_zoom.core.bounds import ViewBounds, DEFAULT_BOUNDS, adjust_to_aspect
from mandelbrot_zoom.core.errors import (
    MandelbrotZoomError,
    InvalidArgumentError,
    InvalidSelectionError,
    ConfigError,
)
from mandelbrot_zoom.core.math_functions import ComplexPlane, FractalIterator, escape_time
from mandelbrot_zoom.rendering.coloring import HueColoring, hsl_to_rgb

# Main API classes
from mandelbrot_zoom.api import MandelbrotRenderer, RenderRequest, PixelBuffer, render, render_view
from mandelbrot_zoom.viewport import ViewportController, ZoomHistory, SelectionRect, DisplayPlacement

__all__ = [
    "ViewBounds",
    "DEFAULT_BOUNDS",
    "adjust_to_aspect",
    "MandelbrotZoomError",
    "InvalidArgumentError",
    "InvalidSelectionError",
    "ConfigError",
    "ComplexPlane",
    "FractalIterator",
    "escape_time",
    "HueColoring",
    "hsl_to_rgb",
    "MandelbrotRenderer",
    "RenderRequest",
    "PixelBuffer",
    "render",
    "render_view",
    "ViewportController",
    "ZoomHistory",
    "SelectionRect",
    "DisplayPlacement",
]
