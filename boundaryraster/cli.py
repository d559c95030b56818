"""Click CLI commands for boundaryraster."""

import logging
import os
import threading

import click
from tqdm import tqdm

from .builder import RasterBuilder
from .constants import (DEFAULT_HEIGHT, DEFAULT_OUTPUT, DEFAULT_WIDTH,
                        DEFAULT_WORKERS, EXCLUDED_REGION_IDS, OUTPUT_DIR)
from .exceptions import BoundaryRasterError
from .loader import load_geojson

logger = logging.getLogger(__name__)


class TqdmProgress:
    """Progress callback rendering a tqdm bar in per-mille steps.

    Worker threads may report out of order; the bar only moves forward.
    """

    def __init__(self, desc: str = "Cells"):
        self._bar = tqdm(total=1000, desc=desc, unit="‰")
        self._done = 0
        self._lock = threading.Lock()

    def __call__(self, fraction: float) -> None:
        step = int(fraction * 1000)
        with self._lock:
            if step > self._done:
                self._bar.update(step - self._done)
                self._done = step

    def close(self) -> None:
        self._bar.close()


@click.group()
def cli():
    """Generate country-boundary lookup rasters from polygon data."""
    pass


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('width', type=click.IntRange(min=1), default=DEFAULT_WIDTH)
@click.argument('height', type=click.IntRange(min=1), default=DEFAULT_HEIGHT)
@click.option('--output', '-o', default=None,
              help=f'Output file (default: output/{DEFAULT_OUTPUT})')
@click.option('--parallel', '-p', is_flag=True, help='Classify cells in a thread pool')
@click.option('--workers', '-w', default=DEFAULT_WORKERS, type=int,
              help='Thread pool size (implies --parallel when > 1)')
@click.option('--exclude', '-x', multiple=True,
              help='Region id to leave out (repeatable, replaces the default list)')
@click.option('--id-property', default='id', help='GeoJSON property holding the region id')
def generate(input_path: str, width: int, height: int, output: str,
             parallel: bool, workers: int, exclude: tuple, id_property: str):
    """Build a WIDTH x HEIGHT raster from a GeoJSON file of boundaries.

    WIDTH and HEIGHT default to a one-degree grid (360 x 180).
    """
    if parallel and workers <= 1:
        workers = os.cpu_count() or 1
    output = output or str(OUTPUT_DIR / DEFAULT_OUTPUT)
    excluded = frozenset(exclude) if exclude else EXCLUDED_REGION_IDS

    progress = TqdmProgress()
    try:
        regions = load_geojson(input_path, id_property=id_property, exclude=excluded)
        builder = RasterBuilder(workers=workers, on_progress=progress)
        path = builder.generate(regions, width, height, output)
    except (BoundaryRasterError, ValueError, OSError) as e:
        logger.error(f"Error generating raster: {e}")
        raise click.ClickException(str(e))
    finally:
        progress.close()

    click.echo(f"Generated {width}x{height} raster: {path}")


if __name__ == '__main__':
    cli()
