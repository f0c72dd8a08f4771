"""
Configuration loading for the command-line front end.

Settings come from three layers, later ones winning: built-in defaults, a
YAML or JSON file, and ``MANDELBROT_*`` environment variables.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from ..api import RenderRequest, MandelbrotRenderer, BACKENDS, DEFAULT_MAX_ITERATIONS
from ..core.bounds import ViewBounds, DEFAULT_BOUNDS
from ..core.errors import ConfigError, MandelbrotZoomError
from ..viewport import ViewportController

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'render': {
        'width': 800,
        'height': 800,
        'max_iterations': DEFAULT_MAX_ITERATIONS,
        'backend': 'numba',
        'bounds': list(DEFAULT_BOUNDS.as_tuple()),
    },
}

# Environment variable -> (render key, converter)
ENVIRONMENT_OVERRIDES = {
    'MANDELBROT_WIDTH': ('width', int),
    'MANDELBROT_HEIGHT': ('height', int),
    'MANDELBROT_MAX_ITER': ('max_iterations', int),
    'MANDELBROT_BACKEND': ('backend', str),
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Loads and validates render configuration."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        """
        Initialize config manager.

        Args:
            environ: Environment mapping to read overrides from (``os.environ`` by default)
        """
        self.environ = os.environ if environ is None else environ

    def load_config(self, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load configuration, merged over the defaults.

        Args:
            path: Optional ``.yaml``/``.yml``/``.json`` file

        Returns:
            Configuration dictionary with a ``render`` section
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if path is not None:
            file_config = self._read_file(Path(path))
            config = _merge(config, file_config)
            logger.info(f"Loaded configuration from {path}")

        if not isinstance(config.get('render'), dict):
            raise ConfigError("'render' section must be a mapping")

        config['render'] = self._apply_environment(config['render'])
        return config

    def _read_file(self, path: Path) -> Dict[str, Any]:
        suffix = path.suffix.lower()
        try:
            with open(path, 'r') as f:
                if suffix in ('.yaml', '.yml'):
                    data = yaml.safe_load(f)
                elif suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigError(f"Unsupported config format '{suffix}'. Use .yaml, .yml or .json")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot parse config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping at the top level")
        return data

    def _apply_environment(self, render: Dict[str, Any]) -> Dict[str, Any]:
        render = dict(render)
        for variable, (key, convert) in ENVIRONMENT_OVERRIDES.items():
            raw = self.environ.get(variable)
            if raw is None or raw == '':
                continue
            try:
                render[key] = convert(raw)
            except ValueError as e:
                raise ConfigError(f"Invalid value for {variable}: {raw!r}") from e
            logger.debug(f"{variable} overrides render.{key}")
        return render

    def validate_config(self, config: Dict[str, Any]) -> list:
        """
        Check a configuration dictionary.

        Returns:
            List of error messages, empty when valid
        """
        errors = []
        render = config.get('render')
        if not isinstance(render, dict):
            return ["'render' section must be a mapping"]

        try:
            self.create_render_request(config)
        except MandelbrotZoomError as e:
            errors.append(str(e))

        backend = render.get('backend', 'numba')
        if backend not in BACKENDS:
            errors.append(f"Unknown backend '{backend}'. Available: {', '.join(BACKENDS)}")

        return errors

    def create_bounds(self, config: Dict[str, Any]) -> ViewBounds:
        """Initial view bounds from configuration."""
        try:
            return ViewBounds.from_tuple(config['render']['bounds'])
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid bounds in configuration: {e}") from e
        except MandelbrotZoomError as e:
            raise ConfigError(str(e)) from e

    def create_render_request(self, config: Dict[str, Any]) -> RenderRequest:
        """Render request for the configured size, iteration limit and bounds."""
        render = config['render']
        request = RenderRequest(
            pixel_width=render.get('width'),
            pixel_height=render.get('height'),
            max_iterations=render.get('max_iterations', DEFAULT_MAX_ITERATIONS),
            bounds=self.create_bounds(config),
        )
        try:
            request.validate()
        except MandelbrotZoomError as e:
            raise ConfigError(str(e)) from e
        return request

    def create_renderer(self, config: Dict[str, Any]) -> MandelbrotRenderer:
        """Renderer for the configured backend."""
        backend = config['render'].get('backend', 'numba')
        try:
            return MandelbrotRenderer(backend=backend)
        except MandelbrotZoomError as e:
            raise ConfigError(str(e)) from e

    def create_controller(self, config: Dict[str, Any]) -> ViewportController:
        """Viewport controller starting at the configured bounds."""
        return ViewportController(self.create_bounds(config))

    def export_config_template(self, output_path: Union[str, Path]) -> Path:
        """Write the default configuration as YAML or JSON, chosen by suffix."""
        output_path = Path(output_path)
        with open(output_path, 'w') as f:
            if output_path.suffix.lower() == '.json':
                json.dump(DEFAULT_CONFIG, f, indent=2)
            else:
                yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
        logger.info(f"Wrote configuration template: {output_path}")
        return output_path
