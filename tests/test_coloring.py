import numpy as np
import pytest

from mandelbrot_zoom import HueColoring, hsl_to_rgb
from mandelbrot_zoom.core.math_functions import IterationResult
from mandelbrot_zoom.rendering.coloring import BLACK, ColorRGB, hsl_to_rgb_array


@pytest.mark.parametrize("hue,expected", [
    (0, (230, 25, 25)),
    (60, (230, 230, 25)),
    (120, (25, 230, 25)),
    (240, (25, 25, 230)),
])
def test_hsl_primary_hues(hue, expected):
    assert hsl_to_rgb(hue, 0.8, 0.5).to_tuple() == expected


def test_grey_when_unsaturated():
    assert hsl_to_rgb(200, 0.0, 0.5).to_tuple() == (128, 128, 128)


def test_points_at_limit_are_black():
    coloring = HueColoring()
    assert coloring.color_for(100, 100) == BLACK
    assert coloring.color_for(0, 100).to_tuple() == (230, 25, 25)


def test_vectorized_conversion_matches_scalar():
    hues = np.linspace(0, 359.9, 721)
    vectorized = hsl_to_rgb_array(hues, 0.8, 0.5)
    for hue, rgb in zip(hues, vectorized):
        assert tuple(int(v) for v in rgb) == hsl_to_rgb(hue, 0.8, 0.5).to_tuple()


def test_apply_matches_color_for():
    iterations = np.arange(0, 101, dtype=np.int32).reshape(1, -1)
    rgba = HueColoring().apply(IterationResult(iterations, 100))

    assert rgba.shape == (1, 101, 4)
    assert rgba.dtype == np.uint8
    assert (rgba[..., 3] == 255).all()
    for i in range(101):
        assert tuple(rgba[0, i]) == HueColoring().color_for(i, 100).to_rgba()


def test_custom_inside_color():
    coloring = HueColoring(inside_color=ColorRGB(10, 20, 30))
    rgba = coloring.apply(IterationResult(np.array([[5, 5]], dtype=np.int32), 5))
    assert tuple(rgba[0, 0]) == (10, 20, 30, 255)


def test_invalid_parameters():
    with pytest.raises(ValueError):
        HueColoring(saturation=1.5)
    with pytest.raises(ValueError):
        HueColoring(lightness=-0.1)
    with pytest.raises(ValueError):
        ColorRGB(256, 0, 0)
