import numpy as np
import pytest

from mandelbrot_zoom import (
    DEFAULT_BOUNDS,
    HueColoring,
    InvalidArgumentError,
    MandelbrotRenderer,
    RenderRequest,
    ViewBounds,
    render_view,
)


def test_render_shape_and_alpha(renderer):
    buffer = renderer.render(RenderRequest(40, 30))

    assert buffer.pixels.shape == (30, 40, 4)
    assert len(buffer) == 1200
    assert len(buffer.tobytes()) == 40 * 30 * 4
    assert (buffer.pixels[..., 3] == 255).all()


def test_render_reports_adjusted_bounds(renderer):
    buffer = renderer.render(RenderRequest(40, 30, bounds=DEFAULT_BOUNDS))

    assert buffer.bounds.real_min == pytest.approx(-19.0 / 6.0)
    assert buffer.bounds.real_max == pytest.approx(13.0 / 6.0)
    assert buffer.bounds.imag_min == -2.0
    assert buffer.bounds.imag_max == 2.0


def test_render_pixel_colors(renderer):
    buffer = renderer.render(RenderRequest(40, 30, max_iterations=100))

    # (-0.5, 0) lies in the main cardioid
    assert buffer.pixel(20, 15) == (0, 0, 0, 255)
    # the top-left corner escapes after one iteration
    assert buffer.pixel(0, 0) == HueColoring().color_for(1, 100).to_rgba()


def test_backends_render_identical_pixels():
    request = RenderRequest(48, 36, max_iterations=60,
                            bounds=ViewBounds(-0.8, -0.7, 0.05, 0.15))
    numba_buffer = MandelbrotRenderer('numba').render(request)
    numpy_buffer = MandelbrotRenderer('numpy').render(request)

    np.testing.assert_array_equal(numba_buffer.iterations, numpy_buffer.iterations)
    assert numba_buffer.tobytes() == numpy_buffer.tobytes()


def test_render_view_helper():
    buffer = render_view(16, 16, 20)
    assert (buffer.width, buffer.height) == (16, 16)
    assert buffer.bounds is DEFAULT_BOUNDS


def test_pixel_out_of_range(numpy_renderer):
    buffer = numpy_renderer.render(RenderRequest(4, 4))
    with pytest.raises(IndexError):
        buffer.pixel(4, 0)


def test_to_image(numpy_renderer):
    image = numpy_renderer.render(RenderRequest(8, 6)).to_image()
    assert image.size == (8, 6)
    assert image.mode == "RGBA"


@pytest.mark.parametrize("request_args", [
    (0, 10),
    (10, 0),
    (-1, 10),
    (10, 10, 0),
    (10, 10, -5),
    (10.0, 10),
])
def test_invalid_requests(numpy_renderer, request_args):
    with pytest.raises(InvalidArgumentError):
        numpy_renderer.render(RenderRequest(*request_args))


def test_invalid_bounds_type(numpy_renderer):
    with pytest.raises(InvalidArgumentError):
        numpy_renderer.render(RenderRequest(10, 10, bounds=(-2, 1, -1, 1)))


def test_unknown_backend():
    with pytest.raises(InvalidArgumentError):
        MandelbrotRenderer(backend='cuda')


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        RenderRequest(0, 0).validate()
