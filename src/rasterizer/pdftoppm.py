# src/rasterizer/pdftoppm.py
"""Poppler ``pdftoppm`` rasterizer run as an asyncio subprocess.

Invocation: ``pdftoppm -png [-r DPI] <pdf> <prefix>``. pdftoppm zero-pads page
indices to the width of the total page count (``-01`` .. ``-12`` for twelve
pages), which is why the page list has to be discovered by probing.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pdfdiff.core.errors import RasterizerError
from pdfdiff.rasterizer.base_rasterizer import BaseRasterizer

logger = logging.getLogger(__name__)


class PdftoppmRasterizer(BaseRasterizer):
    """Render PDFs with the pdftoppm command line tool."""

    def __init__(
        self,
        binary: str = "pdftoppm",
        dpi: int | None = None,
        timeout: float = 300.0,
    ) -> None:
        self._binary = binary
        self._dpi = dpi
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "pdftoppm"

    def build_command(self, pdf_path: Path, output_prefix: Path) -> list[str]:
        cmd = [self._binary, "-png"]
        if self._dpi is not None:
            cmd += ["-r", str(self._dpi)]
        cmd += [str(pdf_path), str(output_prefix)]
        return cmd

    async def rasterize(self, pdf_path: Path, output_prefix: Path) -> None:
        cmd = self.build_command(pdf_path, output_prefix)
        logger.info("Rasterizing %s", pdf_path)
        logger.debug("Running %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise RasterizerError(f"Cannot start {self._binary}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            await _terminate(proc)
            raise RasterizerError(
                f"{self._binary} timed out after {self._timeout:.0f}s on {pdf_path}"
            ) from exc
        except asyncio.CancelledError:
            await _terminate(proc)
            raise

        if stdout:
            logger.debug("%s stdout: %s", self._binary, stdout.decode(errors="replace"))
        if stderr:
            logger.debug("%s stderr: %s", self._binary, stderr.decode(errors="replace"))

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip() if stderr else ""
            raise RasterizerError(
                f"{self._binary} exited with status {proc.returncode} on {pdf_path}"
                + (f": {detail}" if detail else "")
            )

        produced = list(output_prefix.parent.glob(f"{output_prefix.name}-*.png"))
        if not produced:
            raise RasterizerError(f"{self._binary} produced no pages for {pdf_path}")
        logger.info("Rasterized %s into %d pages", pdf_path, len(produced))


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill a still-running child and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            # exited between the check and the kill
            pass
        await proc.wait()
