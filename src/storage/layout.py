# src/storage/layout.py
"""On-disk directory structure.

    {data_root}/{doc_hash}/png_gen-{padded_index}.png          raster cache
    {data_root}/generated/{doc_hash_a}-{doc_hash_b}/image-{n}.png   results

Entries additionally hold transient marker files while they are being built
(see storage.markers). Page file names must not change: downstream consumers
list results by file name.
"""

from __future__ import annotations

import re
from pathlib import Path

GENERATED_DIR = "generated"
PAGE_PREFIX = "png_gen"
RESULT_PREFIX = "image"

_RESULT_NAME = re.compile(rf"^{RESULT_PREFIX}-(\d+)\.png$")


def cache_root(data_root: Path) -> Path:
    """Return the directory holding raster cache entries."""
    return data_root


def cache_entry_dir(data_root: Path, doc_hash: str) -> Path:
    """Return the raster cache entry for a document."""
    return cache_root(data_root) / doc_hash


def page_prefix(entry_dir: Path) -> Path:
    """Output prefix handed to the rasterizer (it appends ``-{index}.png``)."""
    return entry_dir / PAGE_PREFIX


def page_file(entry_dir: Path, index: int, padding: int) -> Path:
    """Return the rendered page path for a 1-based index and padding width."""
    return entry_dir / f"{PAGE_PREFIX}-{index:0{padding}d}.png"


def generated_root(data_root: Path) -> Path:
    """Return the directory holding result entries."""
    return data_root / GENERATED_DIR


def result_dir(data_root: Path, job_id: str) -> Path:
    """Return the result entry for a comparison."""
    return generated_root(data_root) / job_id


def result_image(result_path: Path, page_number: int) -> Path:
    """Return the overlay image path for a 1-based page number."""
    return result_path / f"{RESULT_PREFIX}-{page_number}.png"


def result_page_number(filename: str) -> int | None:
    """Parse the page number out of a result image name, or None."""
    match = _RESULT_NAME.match(filename)
    return int(match.group(1)) if match else None


def list_result_images(result_path: Path) -> list[Path]:
    """Result images of an entry, ordered by page number."""
    if not result_path.is_dir():
        return []
    numbered: list[tuple[int, Path]] = []
    for path in result_path.iterdir():
        number = result_page_number(path.name)
        if number is not None:
            numbered.append((number, path))
    return [path for _, path in sorted(numbered)]


def ensure_data_directories(data_root: Path) -> None:
    """Create the cache and result roots if missing."""
    cache_root(data_root).mkdir(parents=True, exist_ok=True)
    generated_root(data_root).mkdir(parents=True, exist_ok=True)
