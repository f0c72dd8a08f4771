"""
Command-line interface for Mandelbrot rendering and zoom navigation.

Zoom selections are given as screen squares against a buffer of the output
size shown at the screen origin, exactly as an interactive shell would report
them, and applied one after another before the final render.
"""

import click
import sys
from pathlib import Path
from typing import List, Sequence, Tuple
import logging
import time

from .. import __version__
from ..core.errors import MandelbrotZoomError
from ..core.precision import format_number
from ..io.config import ConfigManager
from ..rendering.image_output import ImageExporter, RenderMetadata
from ..viewport import DisplayPlacement, SelectionRect, ViewportController

logger = logging.getLogger(__name__)


def parse_bounds(text: str) -> Tuple[float, float, float, float]:
    """Parse ``"real_min,real_max,imag_min,imag_max"``."""
    try:
        values = tuple(float(x.strip()) for x in text.split(','))
    except ValueError:
        raise click.BadParameter("Use 'real_min,real_max,imag_min,imag_max'")
    if len(values) != 4:
        raise click.BadParameter("Use 'real_min,real_max,imag_min,imag_max'")
    return values


def parse_selection(text: str) -> SelectionRect:
    """
    Parse a zoom selection.

    ``"x,y,size"`` is a square's upper-left corner and side; ``"x0,y0,x1,y1"``
    is a mouse drag from press to release point.
    """
    try:
        values = [float(x.strip()) for x in text.split(',')]
    except ValueError:
        raise click.BadParameter(f"Invalid zoom selection '{text}'")

    if len(values) == 3:
        return SelectionRect(*values)
    if len(values) == 4:
        return SelectionRect.from_drag(*values)
    raise click.BadParameter(f"Zoom selection '{text}' needs 3 (x,y,size) or 4 (x0,y0,x1,y1) numbers")


def apply_zooms(controller: ViewportController, selections: Sequence[SelectionRect],
                width: int, height: int, zoom_outs: int = 0) -> None:
    """Apply selections in order against a buffer centered on a screen of the output size."""
    placement = DisplayPlacement.centered(width / 2, height / 2, width, height)
    for selection in selections:
        controller.zoom_in(selection, placement)
    for _ in range(zoom_outs):
        controller.zoom_out()


def _format_bounds(bounds: Tuple[float, float, float, float]) -> str:
    return ", ".join(format_number(v) for v in bounds)


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path (YAML or JSON)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    mandelbrot-zoom - render the Mandelbrot set and zoom into square selections.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"mandelbrot-zoom v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


def _zoom_options(func):
    func = click.option('--zoom-out', 'zoom_outs', type=int, default=0,
                        help='Number of zoom-outs to apply after the selections')(func)
    func = click.option('--zoom', 'zooms', multiple=True,
                        help='Zoom selection "x,y,size" or drag "x0,y0,x1,y1" in output pixels; repeatable')(func)
    func = click.option('--bounds', type=str, help='Initial bounds: "real_min,real_max,imag_min,imag_max"')(func)
    func = click.option('--height', '-h', type=int, help='Output height in pixels')(func)
    func = click.option('--width', '-w', type=int, help='Output width in pixels')(func)
    return func


def _prepare(ctx, width, height, bounds, zooms, zoom_outs, max_iter=None, backend=None):
    """Load config, apply command-line overrides and zooms; returns (manager, config, controller)."""
    manager = ConfigManager()
    config = manager.load_config(ctx.obj.get('config_file'))
    render_config = config['render']

    if width is not None:
        render_config['width'] = width
    if height is not None:
        render_config['height'] = height
    if bounds:
        render_config['bounds'] = list(parse_bounds(bounds))
    if max_iter is not None:
        render_config['max_iterations'] = max_iter
    if backend is not None:
        render_config['backend'] = backend

    # Validates size and bounds before any zooming
    request = manager.create_render_request(config)
    controller = manager.create_controller(config)

    selections: List[SelectionRect] = [parse_selection(z) for z in zooms]
    if zoom_outs < 0:
        raise click.BadParameter("--zoom-out must not be negative")
    apply_zooms(controller, selections, request.pixel_width, request.pixel_height, zoom_outs)
    return manager, config, controller


@main.command()
@click.argument('output', type=click.Path())
@_zoom_options
@click.option('--max-iter', type=int, help='Maximum iterations')
@click.option('--backend', type=click.Choice(['numba', 'numpy']), help='Computation backend')
@click.pass_context
def render(ctx, output, width, height, bounds, zooms, zoom_outs, max_iter, backend):
    """
    Render the (optionally zoomed) view to an image file.

    OUTPUT: Output image path (.png, .jpg)
    """
    try:
        manager, config, controller = _prepare(ctx, width, height, bounds, zooms, zoom_outs,
                                               max_iter, backend)

        base_request = manager.create_render_request(config)
        request = controller.render_request(base_request.pixel_width, base_request.pixel_height,
                                            base_request.max_iterations)
        renderer = manager.create_renderer(config)

        if not ctx.obj.get('quiet'):
            click.echo(f"Rendering {request.pixel_width}x{request.pixel_height} "
                       f"(zoom depth {controller.depth})...")
        start_time = time.time()
        buffer = renderer.render(request)
        render_time = time.time() - start_time

        metadata = RenderMetadata(
            requested_bounds=request.bounds.as_tuple(),
            adjusted_bounds=buffer.bounds.as_tuple(),
            resolution=(buffer.width, buffer.height),
            max_iterations=buffer.max_iterations,
            backend=renderer.backend,
            render_time_seconds=render_time,
            zoom_depth=controller.depth,
            software_version=__version__,
        )
        ImageExporter().save_image(buffer.pixels, Path(output), metadata)

        if not ctx.obj.get('quiet'):
            click.echo(f"Render complete: {render_time:.2f}s")
            click.echo(f"Saved: {output}")

    except (MandelbrotZoomError, ValueError, OSError) as e:
        _fail(ctx, e)


@main.command()
@_zoom_options
@click.pass_context
def info(ctx, width, height, bounds, zooms, zoom_outs):
    """Show the view reached by the given zooms without rendering."""
    try:
        manager, config, controller = _prepare(ctx, width, height, bounds, zooms, zoom_outs)
        render_config = config['render']
        summary = controller.describe(render_config['width'], render_config['height'])

        click.echo(f"Bounds:          {_format_bounds(summary['bounds'])}")
        click.echo(f"Adjusted bounds: {_format_bounds(summary['adjusted_bounds'])}")
        click.echo(f"Center:          {format_number(summary['center'][0])}, "
                   f"{format_number(summary['center'][1])}")
        click.echo(f"Zoom level:      {summary['zoom_level']:.6g}")
        click.echo(f"History depth:   {summary['history_depth']}")
        click.echo(f"Digits in use:   {summary['digits_in_use']:.1f}")
        if summary['precision_exhausted']:
            click.echo("Warning: view is beyond double precision resolution")

    except (MandelbrotZoomError, ValueError) as e:
        _fail(ctx, e)


@main.command()
@click.option('--output', '-o', type=click.Path(), default='mandelbrot.yaml',
              help='Output file path (.yaml or .json)')
@click.pass_context
def init_config(ctx, output):
    """Create a configuration template file."""
    try:
        path = ConfigManager().export_config_template(output)
        click.echo(f"Configuration template created: {path}")
    except OSError as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
