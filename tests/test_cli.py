import pytest
from click.testing import CliRunner

from mandelbrot_zoom import __version__
from mandelbrot_zoom.cli.main import main, parse_selection
from mandelbrot_zoom.rendering.image_output import ImageExporter


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("MANDELBROT_WIDTH", "MANDELBROT_HEIGHT", "MANDELBROT_MAX_ITER", "MANDELBROT_BACKEND"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_render_with_zoom(runner, tmp_path):
    output = tmp_path / "zoomed.png"
    result = runner.invoke(main, [
        'render', str(output),
        '-w', '32', '-h', '24',
        '--max-iter', '40',
        '--backend', 'numpy',
        '--zoom', '8,6,8',
    ])

    assert result.exit_code == 0, result.output
    assert "Saved:" in result.output

    metadata = ImageExporter().load_metadata(output)
    assert metadata.resolution == (32, 24)
    assert metadata.zoom_depth == 1
    assert metadata.max_iterations == 40
    assert metadata.backend == 'numpy'


def test_render_quiet(runner, tmp_path):
    output = tmp_path / "quiet.png"
    result = runner.invoke(main, ['-q', 'render', str(output), '-w', '16', '-h', '16'])

    assert result.exit_code == 0, result.output
    assert "Saved:" not in result.output
    assert output.exists()


def test_render_rejects_empty_selection(runner, tmp_path):
    output = tmp_path / "never.png"
    result = runner.invoke(main, ['render', str(output), '-w', '32', '-h', '24', '--zoom', '8,6,0'])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert not output.exists()


def test_render_rejects_bad_size(runner, tmp_path):
    result = runner.invoke(main, ['render', str(tmp_path / "x.png"), '-w', '0'])
    assert result.exit_code == 1


def test_malformed_selection_is_usage_error(runner, tmp_path):
    result = runner.invoke(main, ['render', str(tmp_path / "x.png"), '--zoom', '1,2'])
    assert result.exit_code == 2


def test_info_shows_adjusted_bounds(runner):
    result = runner.invoke(main, ['info', '-w', '400', '-h', '300'])

    assert result.exit_code == 0, result.output
    assert "Adjusted bounds: -3.16666666667, 2.16666666667, -2, 2" in result.output
    assert "History depth:   0" in result.output


def test_info_after_zoom_in_and_out(runner):
    result = runner.invoke(main, [
        'info', '-w', '400', '-h', '400',
        '--zoom', '100,100,200', '--zoom', '100,100,200', '--zoom-out', '1',
    ])

    assert result.exit_code == 0, result.output
    assert "Bounds:          -1.5, 0.5, -1, 1" in result.output
    assert "History depth:   1" in result.output


def test_init_config_then_use(runner, tmp_path):
    path = tmp_path / "settings.yaml"
    result = runner.invoke(main, ['init-config', '-o', str(path)])
    assert result.exit_code == 0
    assert path.exists()

    result = runner.invoke(main, ['--config', str(path), 'info'])
    assert result.exit_code == 0, result.output
    assert "Zoom level:      1" in result.output


def test_config_with_null_render_section(runner, tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("render:\n")
    result = runner.invoke(main, ['--config', str(path), 'info'])

    assert result.exit_code == 1
    assert "Error: 'render' section must be a mapping" in result.output


def test_command_line_overrides_environment(runner, tmp_path, monkeypatch):
    monkeypatch.setenv("MANDELBROT_MAX_ITER", "0")
    monkeypatch.setenv("MANDELBROT_BACKEND", "opencl")
    output = tmp_path / "override.png"
    result = runner.invoke(main, [
        'render', str(output), '-w', '16', '-h', '12',
        '--max-iter', '50', '--backend', 'numpy',
    ])

    assert result.exit_code == 0, result.output
    metadata = ImageExporter().load_metadata(output)
    assert metadata.max_iterations == 50
    assert metadata.backend == 'numpy'


def test_parse_selection_drag():
    selection = parse_selection("100,100,40,130")
    assert (selection.screen_x, selection.screen_y, selection.size_pixels) == (70, 100, 30)
