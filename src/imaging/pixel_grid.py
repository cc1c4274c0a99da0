# src/imaging/pixel_grid.py
"""In-memory RGBA raster and its PNG decode/encode.

A PixelGrid wraps a ``(height, width, 4)`` uint8 numpy array. Decoding goes
through Pillow and always converts to RGBA; no resizing is performed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from pdfdiff.core.errors import ImageDecodeError, StorageIOError

logger = logging.getLogger(__name__)

Rgba = tuple[int, int, int, int]


@dataclass
class PixelGrid:
    """Rectangular grid of RGBA samples, row-major (``pixels[y, x]``)."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(
                f"PixelGrid expects a (height, width, 4) array, got {self.pixels.shape}"
            )
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height), matching Pillow's convention."""
        return (self.width, self.height)

    def pixel(self, x: int, y: int) -> Rgba:
        r, g, b, a = (int(c) for c in self.pixels[y, x])
        return (r, g, b, a)

    def copy(self) -> PixelGrid:
        return PixelGrid(self.pixels.copy())

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Rgba]]) -> PixelGrid:
        """Build a grid from nested ``[[(r, g, b, a), ...], ...]`` rows."""
        return cls(np.array(rows, dtype=np.uint8).reshape(len(rows), -1, 4))

    @classmethod
    def filled(cls, width: int, height: int, color: Rgba) -> PixelGrid:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)


def decode(path: str | Path) -> PixelGrid:
    """Read a raster image file into a PixelGrid.

    Raises:
        ImageDecodeError: If the file is missing, unreadable, not an image, or
            too large to decode safely.
    """
    try:
        with Image.open(path) as img:
            rgba = img.convert("RGBA")
            pixels = np.asarray(rgba, dtype=np.uint8).copy()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        MemoryError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise ImageDecodeError(f"Cannot decode image {path}: {exc}") from exc
    logger.debug("Decoded %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return PixelGrid(pixels)


def encode(grid: PixelGrid, path: str | Path) -> None:
    """Write a PixelGrid as an RGBA PNG.

    Raises:
        StorageIOError: If the destination cannot be created or written.
    """
    img = Image.fromarray(grid.pixels)
    try:
        img.save(path, format="PNG")
    except OSError as exc:
        raise StorageIOError(f"Cannot write image {path}: {exc}") from exc
