# src/imaging/diff_engine.py
"""Pixel comparison and row highlighting.

For every row of the overlapping region that contains at least one pixel whose
RGBA value differs between the two pages, the whole row of the second page is
blended toward the highlight color. Each pixel is blended at most once per
diff; the ``modified`` mask that enforces this lives only for one call.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from pdfdiff.cache.hasher import hash_file
from pdfdiff.core.errors import StorageIOError
from pdfdiff.imaging.color import HighlightColor
from pdfdiff.imaging.pixel_grid import PixelGrid, decode, encode
from pdfdiff.jobs.models import PageDiffResult

logger = logging.getLogger(__name__)

# Share of the original channel kept when tinting (60% original, 40% highlight).
BLEND_ALPHA = 0.6


@dataclass
class DiffOutcome:
    """Result grid plus what the comparison observed."""

    grid: PixelGrid
    changed_rows: int
    dimension_mismatch: bool = False


def diff(grid_a: PixelGrid, grid_b: PixelGrid, highlight: HighlightColor) -> DiffOutcome:
    """Compare two grids and return grid B with changed rows tinted.

    Grids of different sizes are compared over their overlap only; a warning
    is logged and ``dimension_mismatch`` is set on the outcome. The inputs are
    not modified.
    """
    height = min(grid_a.height, grid_b.height)
    width = min(grid_a.width, grid_b.width)
    mismatch = grid_a.size != grid_b.size
    if mismatch:
        logger.warning(
            "Page dimensions differ (%dx%d vs %dx%d); comparing the %dx%d overlap",
            grid_a.width, grid_a.height, grid_b.width, grid_b.height, width, height,
        )

    result = grid_b.pixels.copy()
    modified = np.zeros((grid_b.height, grid_b.width), dtype=bool)

    overlap_a = grid_a.pixels[:height, :width]
    overlap_b = grid_b.pixels[:height, :width]
    differing = np.any(overlap_a != overlap_b, axis=2)
    rows = np.flatnonzero(differing.any(axis=1))

    for y in rows:
        _tint_row(result[y], modified[y], highlight)

    return DiffOutcome(
        grid=PixelGrid(result),
        changed_rows=int(rows.size),
        dimension_mismatch=mismatch,
    )


def _tint_row(row: np.ndarray, modified: np.ndarray, highlight: HighlightColor) -> None:
    """Blend every not-yet-modified pixel of ``row`` in place."""
    pending = ~modified
    if not pending.any():
        return
    target = np.array(highlight.as_tuple(), dtype=np.float64)
    rgb = row[pending, :3].astype(np.float64)
    blended = np.rint(rgb * BLEND_ALPHA + target * (1.0 - BLEND_ALPHA))
    row[pending, :3] = np.clip(blended, 0, 255).astype(np.uint8)
    modified[pending] = True


def diff_page_files(
    page_a: str | Path,
    page_b: str | Path,
    output_path: str | Path,
    highlight: HighlightColor,
    page_number: int,
) -> PageDiffResult:
    """Diff two rendered page files and write the overlay image.

    Byte-identical pages are detected by digest and copied through unchanged,
    without decoding.
    """
    if hash_file(page_a) == hash_file(page_b):
        logger.info("Page %d is identical in both documents", page_number)
        try:
            shutil.copyfile(page_b, output_path)
        except OSError as exc:
            raise StorageIOError(f"Cannot write {output_path}: {exc}") from exc
        return PageDiffResult(
            page_number=page_number,
            output_path=str(output_path),
            identical=True,
        )

    outcome = diff(decode(page_a), decode(page_b), highlight)
    encode(outcome.grid, output_path)
    logger.debug("Page %d: %d changed rows", page_number, outcome.changed_rows)
    return PageDiffResult(
        page_number=page_number,
        output_path=str(output_path),
        dimension_mismatch=outcome.dimension_mismatch,
        changed_rows=outcome.changed_rows,
    )
