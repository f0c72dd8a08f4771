import pytest

from mandelbrot_zoom import (
    DEFAULT_BOUNDS,
    DisplayPlacement,
    MandelbrotRenderer,
    ViewBounds,
    ViewportController,
)


@pytest.fixture
def controller():
    """Controller at the classic full-set view."""
    return ViewportController()


@pytest.fixture(params=["numba", "numpy"])
def renderer(request):
    """Renderer for each computation backend."""
    return MandelbrotRenderer(backend=request.param)


@pytest.fixture
def numpy_renderer():
    return MandelbrotRenderer(backend="numpy")


@pytest.fixture
def wide_bounds():
    """Bounds twice as wide as they are tall."""
    return ViewBounds(-2.0, 2.0, -1.0, 1.0)


@pytest.fixture
def square_placement():
    """A 400x400 buffer drawn at the screen origin."""
    return DisplayPlacement(400, 400)


@pytest.fixture
def default_bounds():
    return DEFAULT_BOUNDS
