import json

import pytest
import yaml

from mandelbrot_zoom import ConfigError, DEFAULT_BOUNDS, MandelbrotRenderer, ViewBounds
from mandelbrot_zoom.io.config import ConfigManager, DEFAULT_CONFIG


@pytest.fixture
def manager():
    return ConfigManager(environ={})


def test_defaults(manager):
    config = manager.load_config()

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
    assert manager.create_bounds(config) == DEFAULT_BOUNDS


def test_yaml_file_merges_over_defaults(manager, tmp_path):
    path = tmp_path / "render.yaml"
    path.write_text("render:\n  width: 320\n  max_iterations: 50\n")

    config = manager.load_config(path)
    request = manager.create_render_request(config)

    assert (request.pixel_width, request.pixel_height, request.max_iterations) == (320, 800, 50)


def test_json_file(manager, tmp_path):
    path = tmp_path / "render.json"
    path.write_text(json.dumps({"render": {"bounds": [-1, 1, -0.5, 0.5], "backend": "numpy"}}))

    config = manager.load_config(path)

    assert manager.create_bounds(config) == ViewBounds(-1.0, 1.0, -0.5, 0.5)
    assert manager.create_renderer(config).backend == "numpy"


def test_empty_yaml_file(manager, tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert manager.load_config(path) == DEFAULT_CONFIG


def test_environment_overrides(tmp_path):
    path = tmp_path / "render.yaml"
    path.write_text("render:\n  width: 320\n")
    manager = ConfigManager(environ={
        "MANDELBROT_WIDTH": "640",
        "MANDELBROT_MAX_ITER": "250",
        "MANDELBROT_BACKEND": "numpy",
    })

    render = manager.load_config(path)["render"]

    assert render["width"] == 640
    assert render["max_iterations"] == 250
    assert render["backend"] == "numpy"


def test_invalid_environment_value():
    with pytest.raises(ConfigError):
        ConfigManager(environ={"MANDELBROT_HEIGHT": "tall"}).load_config()


def test_unsupported_suffix(manager, tmp_path):
    path = tmp_path / "render.toml"
    path.write_text("width = 1")
    with pytest.raises(ConfigError):
        manager.load_config(path)


def test_missing_file(manager, tmp_path):
    with pytest.raises(ConfigError):
        manager.load_config(tmp_path / "absent.yaml")


def test_malformed_files(manager, tmp_path):
    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("render: [unclosed\n")
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{")
    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- 1\n- 2\n")

    for path in (bad_yaml, bad_json, not_mapping):
        with pytest.raises(ConfigError):
            manager.load_config(path)


@pytest.mark.parametrize("body", ["render:\n", "render: [1, 2]\n", "render: 5\n"])
def test_render_section_must_be_mapping(manager, tmp_path, body):
    path = tmp_path / "render.yaml"
    path.write_text(body)
    with pytest.raises(ConfigError, match="must be a mapping"):
        manager.load_config(path)


def test_validate_config(manager):
    config = manager.load_config()
    assert manager.validate_config(config) == []

    config["render"]["width"] = 0
    config["render"]["backend"] = "cuda"
    errors = manager.validate_config(config)

    assert len(errors) == 2
    assert any("cuda" in message for message in errors)
    assert manager.validate_config({"render": 5}) == ["'render' section must be a mapping"]


def test_invalid_bounds_and_backend(manager):
    config = manager.load_config()
    config["render"]["bounds"] = [1.0, 0.0, -1.0, 1.0]
    with pytest.raises(ConfigError):
        manager.create_controller(config)

    config["render"]["bounds"] = [0.0, 1.0]
    with pytest.raises(ConfigError):
        manager.create_bounds(config)

    config["render"]["backend"] = "opencl"
    with pytest.raises(ConfigError):
        manager.create_renderer(config)


def test_create_controller_and_renderer(manager):
    config = manager.load_config()
    assert manager.create_controller(config).get_current_bounds() == DEFAULT_BOUNDS
    assert isinstance(manager.create_renderer(config), MandelbrotRenderer)


@pytest.mark.parametrize("name", ["template.yaml", "template.json"])
def test_template_round_trip(manager, tmp_path, name):
    path = manager.export_config_template(tmp_path / name)

    assert path.exists()
    assert manager.load_config(path) == DEFAULT_CONFIG


def test_yaml_template_is_readable(manager, tmp_path):
    path = manager.export_config_template(tmp_path / "template.yaml")
    assert yaml.safe_load(path.read_text())["render"]["width"] == 800
