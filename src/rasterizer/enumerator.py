# src/rasterizer/enumerator.py
"""Page discovery for rasterized documents.

The rasterizer pads page indices to a width that depends on the total page
count and does not report it. The width is found by probing for page 1 with
widths 1, 2, 3, ...; the first hit fixes the width for the whole document.
Pages are then walked from 1 until the first missing file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pdfdiff.storage import layout

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 10


@dataclass(frozen=True)
class PageListing:
    """Ordered rendered pages of one document."""

    entry_dir: Path
    padding: int | None
    pages: list[Path] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.pages)

    def page(self, number: int) -> Path | None:
        """Path of 1-based page ``number``, or None past the end."""
        if 1 <= number <= len(self.pages):
            return self.pages[number - 1]
        return None


@dataclass(frozen=True)
class PagePair:
    """Pages at the same index in both documents."""

    number: int
    page_a: Path
    page_b: Path


def discover_padding(entry_dir: Path, max_width: int = DEFAULT_MAX_WIDTH) -> int | None:
    """Return the zero-padding width used for page 1, or None if no page 1 exists."""
    for width in range(1, max_width + 1):
        if layout.page_file(entry_dir, 1, width).is_file():
            return width
    return None


def enumerate_pages(entry_dir: Path, max_width: int = DEFAULT_MAX_WIDTH) -> PageListing:
    """List rendered pages in index order.

    A directory without a page 1 at any tried width yields an empty listing.
    """
    padding = discover_padding(entry_dir, max_width)
    if padding is None:
        logger.info("No rendered pages found in %s", entry_dir)
        return PageListing(entry_dir=entry_dir, padding=None)

    pages: list[Path] = []
    index = 1
    while True:
        path = layout.page_file(entry_dir, index, padding)
        if not path.is_file():
            break
        pages.append(path)
        index += 1

    logger.debug("%s: %d pages, padding width %d", entry_dir, len(pages), padding)
    return PageListing(entry_dir=entry_dir, padding=padding, pages=pages)


def pair_pages(listing_a: PageListing, listing_b: PageListing) -> list[PagePair]:
    """Pair pages by index; pages present on one side only are left out."""
    common = min(listing_a.count, listing_b.count)
    if listing_a.count != listing_b.count:
        logger.info(
            "Page counts differ (%d vs %d); comparing the first %d pages",
            listing_a.count, listing_b.count, common,
        )
    return [
        PagePair(number=n, page_a=listing_a.pages[n - 1], page_b=listing_b.pages[n - 1])
        for n in range(1, common + 1)
    ]
