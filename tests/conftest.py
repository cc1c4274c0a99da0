# tests/conftest.py
"""Shared test fixtures.

Provides synthetic page images, fake PDF inputs and a fake rasterizer that
writes pdftoppm-style page files without running any external process.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from PIL import Image

from pdfdiff.config.settings import Settings
from pdfdiff.core.errors import RasterizerError
from pdfdiff.imaging.pixel_grid import PixelGrid, encode
from pdfdiff.rasterizer.base_rasterizer import BaseRasterizer

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


# === Helpers ===


def write_page(path: Path, grid: PixelGrid) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    encode(grid, path)
    return path


def write_rendered_pages(entry_dir: Path, count: int, padding: int | None = None) -> list[Path]:
    """Write ``count`` tiny pages named like pdftoppm output."""
    padding = padding or len(str(count))
    entry_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for index in range(1, count + 1):
        path = entry_dir / f"png_gen-{index:0{padding}d}.png"
        Image.new("RGBA", (1, 1), (index % 256, 0, 0, 255)).save(path)
        paths.append(path)
    return paths


class FakeRasterizer(BaseRasterizer):
    """Writes preset page grids for each known PDF content."""

    def __init__(self, delay: float = 0.0) -> None:
        self.documents: dict[bytes, list[PixelGrid]] = {}
        self.calls: list[Path] = []
        self.delay = delay
        self.fail_with: Exception | None = None

    @property
    def name(self) -> str:
        return "fake"

    def register(self, pdf_path: Path, pages: list[PixelGrid]) -> Path:
        content = f"%PDF-fake {pdf_path.name} {len(self.documents)}".encode()
        pdf_path.parent.mkdir(parents=True, exist_ok=True)
        pdf_path.write_bytes(content)
        self.documents[content] = pages
        return pdf_path

    async def rasterize(self, pdf_path: Path, output_prefix: Path) -> None:
        self.calls.append(pdf_path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        pages = self.documents.get(pdf_path.read_bytes())
        if not pages:
            raise RasterizerError(f"fake rasterizer knows nothing about {pdf_path}")
        padding = len(str(len(pages)))
        for index, grid in enumerate(pages, start=1):
            write_page(
                output_prefix.parent / f"{output_prefix.name}-{index:0{padding}d}.png",
                grid,
            )


# === Fixtures ===


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def settings(data_root: Path) -> Settings:
    return Settings(
        _env_file=None,
        data_root=data_root,
        max_workers=2,
        entry_wait_timeout_seconds=1.0,
        entry_poll_interval_seconds=0.01,
    )


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def write_png():
    return write_page


@pytest.fixture
def rendered_pages():
    return write_rendered_pages


@pytest.fixture
def black_page() -> PixelGrid:
    return PixelGrid.filled(2, 2, BLACK)


@pytest.fixture
def one_white_pixel_page() -> PixelGrid:
    """2x2 black page whose top-left pixel is white."""
    return PixelGrid.from_rows([
        [WHITE, BLACK],
        [BLACK, BLACK],
    ])
