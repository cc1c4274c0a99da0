# src/rasterizer/base_rasterizer.py
"""Abstract rasterizer interface.

A rasterizer renders every page of a PDF to ``{prefix}-{padded_index}.png``.
Only that naming convention is relied upon; the padding width is the
rasterizer's choice and is discovered afterwards by rasterizer.enumerator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class BaseRasterizer(ABC):
    """Unified interface for PDF-to-PNG renderers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs."""

    @abstractmethod
    async def rasterize(self, pdf_path: Path, output_prefix: Path) -> None:
        """Render all pages of ``pdf_path`` next to ``output_prefix``.

        Must be cancellation-safe: on ``asyncio.CancelledError`` any child
        process is terminated before the error propagates.

        Raises:
            RasterizerError: On process failure, timeout or missing output.
        """
