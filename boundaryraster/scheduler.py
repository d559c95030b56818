"""Enumerate grid cells and run classification sequentially or in parallel."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterator, Optional

from .classifier import classify_cell
from .index import SpatialIndex
from .models import Cell, CellResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def cell_bounds(x: int, y: int, width: int, height: int) -> tuple:
    """(lon_min, lat_min, lon_max, lat_max) of cell (x, y)."""
    return Cell.at(x, y, width, height).bounds


def iter_cells(width: int, height: int) -> Iterator[Cell]:
    """All cells of the grid in row-major order, north to south."""
    for y in range(height):
        for x in range(width):
            yield Cell.at(x, y, width, height)


class AtomicCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


class GridScheduler:
    """Classify every cell of a width x height raster.

    workers <= 1 runs sequentially; larger values use a thread pool.  Either
    way the returned list is row-major (index ``x + y * width``), and
    *on_progress* receives 1.0 exactly once at the end.  Intermediate
    progress calls from worker threads may arrive out of order.
    """

    def __init__(self, index: SpatialIndex, workers: int = 0,
                 on_progress: Optional[ProgressCallback] = None):
        self.index = index
        self.workers = workers
        self.on_progress = on_progress

    def _report(self, fraction: float) -> None:
        if self.on_progress is not None:
            self.on_progress(fraction)

    def run(self, width: int, height: int) -> list[CellResult]:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid raster size {width}x{height}")

        parallel = self.workers > 1
        logger.info(f"Classifying {width * height} cells ({width}x{height}), "
                    f"{'parallel with ' + str(self.workers) + ' workers' if parallel else 'sequential'}")
        t0 = time.perf_counter()
        if parallel:
            cells = self._run_parallel(width, height)
        else:
            cells = self._run_sequential(width, height)
        self._report(1.0)
        logger.info(f"Classified {len(cells)} cells in {time.perf_counter() - t0:.1f}s")
        return cells

    def _run_sequential(self, width: int, height: int) -> list[CellResult]:
        total = width * height
        cells = [None] * total
        for cell in iter_cells(width, height):
            i = cell.index(width)
            cells[i] = classify_cell(cell, self.index)
            self._report(i / total)
        return cells

    def _run_parallel(self, width: int, height: int) -> list[CellResult]:
        total = width * height
        cells = [None] * total
        counter = AtomicCounter()
        failed = threading.Event()

        def process_row(y: int) -> None:
            for x in range(width):
                if failed.is_set():
                    return
                # every cell owns its slot, so no locking on the list
                cells[x + y * width] = classify_cell(Cell.at(x, y, width, height), self.index)
                done = counter.increment()
                # the final 1.0 is reported once by run()
                if done < total:
                    self._report(done / total)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(process_row, y) for y in range(height)]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                failed.set()
                for future in futures:
                    future.cancel()
                raise
        return cells
