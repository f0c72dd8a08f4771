"""
Interactive navigation of the complex plane.

The ``ViewportController`` owns the current view and a stack of previous
views. Zooming in converts a square drawn on screen into new bounds, going
through the same aspect-ratio correction the renderer applied to the buffer
on display; zooming out pops the stack.

A controller belongs to one session and is not thread-safe: callers must
serialize ``zoom_in``/``zoom_out``.
"""

import math
from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass
import logging

from .core.bounds import ViewBounds, DEFAULT_BOUNDS, adjust_to_aspect, require_positive_int
from .core.errors import InvalidArgumentError, InvalidSelectionError
from .core.precision import zoom_level, precision_exhausted, digits_in_use
from .api import RenderRequest, DEFAULT_MAX_ITERATIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionRect:
    """Square drawn on screen: upper-left corner and side length in screen pixels."""

    screen_x: float
    screen_y: float
    size_pixels: float

    @classmethod
    def from_drag(cls, start_x: float, start_y: float,
                  current_x: float, current_y: float) -> 'SelectionRect':
        """
        Build the square for a drag from the press point to the pointer.

        The side is the smaller of the horizontal and vertical drag distance.
        The square stays anchored at the press point and grows in the
        direction of the drag, so dragging left or up moves the corner.
        """
        dx = current_x - start_x
        dy = current_y - start_y
        size = min(abs(dx), abs(dy))

        x = start_x - size if dx < 0 else start_x
        y = start_y - size if dy < 0 else start_y
        return cls(x, y, size)


@dataclass(frozen=True)
class DisplayPlacement:
    """Where the displayed buffer sits on screen."""

    width_pixels: int
    height_pixels: int
    origin_x: float = 0.0
    origin_y: float = 0.0

    @classmethod
    def centered(cls, center_x: float, center_y: float,
                 width_pixels: int, height_pixels: int) -> 'DisplayPlacement':
        """Placement of a buffer drawn centered on ``(center_x, center_y)``."""
        return cls(width_pixels, height_pixels,
                   center_x - width_pixels / 2, center_y - height_pixels / 2)


class ZoomHistory:
    """Stack of the views that preceded each zoom-in."""

    def __init__(self):
        self._stack: List[ViewBounds] = []

    def push(self, bounds: ViewBounds) -> None:
        self._stack.append(bounds)

    def pop(self) -> Optional[ViewBounds]:
        """Remove and return the most recent view, or None when empty."""
        if not self._stack:
            return None
        return self._stack.pop()

    def peek(self) -> Optional[ViewBounds]:
        return self._stack[-1] if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)

    def __iter__(self) -> Iterator[ViewBounds]:
        """Iterate oldest to newest."""
        return iter(list(self._stack))


class ViewportController:
    """Current view plus zoom history for one exploration session."""

    def __init__(self, initial_bounds: ViewBounds = DEFAULT_BOUNDS):
        """
        Initialize the controller at the root view.

        Args:
            initial_bounds: View shown before any zoom (the full set by default)
        """
        if not isinstance(initial_bounds, ViewBounds):
            raise InvalidArgumentError("initial_bounds must be a ViewBounds")
        self.initial_bounds = initial_bounds
        self.current_bounds = initial_bounds
        self.history = ZoomHistory()

    @property
    def is_at_root(self) -> bool:
        return not self.history

    @property
    def depth(self) -> int:
        return len(self.history)

    def get_current_bounds(self) -> ViewBounds:
        """Current view; ViewBounds is immutable so the value is safe to keep."""
        return self.current_bounds

    def zoom_in(self, selection: SelectionRect, placement: DisplayPlacement) -> ViewBounds:
        """
        Zoom into a square selected on the displayed buffer.

        Args:
            selection: Square in screen pixels
            placement: Size and screen position of the buffer the user drew on

        Returns:
            The new current bounds
        """
        width = require_positive_int(placement.width_pixels, "width_pixels")
        height = require_positive_int(placement.height_pixels, "height_pixels")

        # Buffer-local, normalized to the buffer size
        norm_x = (selection.screen_x - placement.origin_x) / width
        norm_y = (selection.screen_y - placement.origin_y) / height
        norm_size = selection.size_pixels / width

        if not math.isfinite(norm_size) or norm_size <= 0:
            raise InvalidSelectionError(
                f"Selection size must be positive, got {selection.size_pixels} pixels"
            )
        if not (math.isfinite(norm_x) and math.isfinite(norm_y)):
            raise InvalidSelectionError(f"Selection position is not finite: {selection}")

        # Pixels on screen cover the adjusted rectangle, not current_bounds
        adjusted = adjust_to_aspect(self.current_bounds, width, height)

        center_real = adjusted.real_min + (norm_x + norm_size / 2) * adjusted.real_range
        center_imag = adjusted.imag_min + (norm_y + norm_size / 2) * adjusted.imag_range

        zoom_factor = 1 / norm_size
        new_real_range = adjusted.real_range / zoom_factor
        new_imag_range = adjusted.imag_range / zoom_factor

        try:
            new_bounds = ViewBounds.centered(center_real, center_imag,
                                             new_real_range, new_imag_range)
        except InvalidArgumentError as e:
            raise InvalidSelectionError(f"Selection cannot be represented: {e}") from e

        self.history.push(self.current_bounds)
        self.current_bounds = new_bounds

        logger.info(f"Zoomed in x{zoom_factor:.4g} to {new_bounds} (depth {self.depth})")
        if precision_exhausted(new_bounds, width, height):
            logger.warning(
                f"View needs {digits_in_use(new_bounds, width, height):.1f} significant digits; "
                "double precision will show blocky artifacts"
            )
        return new_bounds

    def zoom_out(self) -> ViewBounds:
        """
        Return to the view before the last zoom-in.

        At the root view this is a no-op that returns the current bounds.
        """
        previous = self.history.pop()
        if previous is None:
            logger.debug("Zoom out at root view ignored")
            return self.current_bounds

        self.current_bounds = previous
        logger.info(f"Zoomed out to {previous} (depth {self.depth})")
        return previous

    def reset(self) -> ViewBounds:
        """Drop the history and return to the initial view."""
        self.history.clear()
        self.current_bounds = self.initial_bounds
        logger.info("Reset to initial view")
        return self.current_bounds

    def render_request(self, pixel_width: int, pixel_height: int,
                       max_iterations: int = DEFAULT_MAX_ITERATIONS) -> RenderRequest:
        """Build a render request for the current view."""
        request = RenderRequest(pixel_width, pixel_height, max_iterations, self.current_bounds)
        request.validate()
        return request

    def describe(self, pixel_width: Optional[int] = None,
                 pixel_height: Optional[int] = None) -> Dict[str, Any]:
        """
        Summarize the exploration state.

        When a pixel size is given the summary also includes the
        aspect-corrected bounds and precision figures for that size.
        """
        bounds = self.current_bounds
        center = bounds.center
        info = {
            'bounds': bounds.as_tuple(),
            'center': (center.real, center.imag),
            'real_range': bounds.real_range,
            'imag_range': bounds.imag_range,
            'zoom_level': zoom_level(bounds, self.initial_bounds),
            'history_depth': self.depth,
        }

        if pixel_width is not None and pixel_height is not None:
            info['adjusted_bounds'] = adjust_to_aspect(bounds, pixel_width, pixel_height).as_tuple()
            info['digits_in_use'] = digits_in_use(bounds, pixel_width, pixel_height)
            info['precision_exhausted'] = precision_exhausted(bounds, pixel_width, pixel_height)

        return info
