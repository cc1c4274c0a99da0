# tests/unit/rasterizer/test_unit_pdftoppm.py
"""Tests for rasterizer/pdftoppm.py — subprocess invocation (mocked)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pdfdiff.core.errors import RasterizerError
from pdfdiff.rasterizer.pdftoppm import PdftoppmRasterizer

_EXEC = "pdfdiff.rasterizer.pdftoppm.asyncio.create_subprocess_exec"


def _make_proc(returncode=0, stdout=b"", stderr=b"", on_run=None):
    proc = MagicMock()
    proc.returncode = returncode

    async def communicate():
        if on_run is not None:
            on_run()
        return stdout, stderr

    proc.communicate = communicate
    proc.wait = AsyncMock(return_value=returncode)
    return proc


def _hanging_proc():
    proc = MagicMock()
    proc.returncode = None

    async def communicate():
        await asyncio.sleep(10)
        return b"", b""

    proc.communicate = communicate
    proc.wait = AsyncMock(return_value=-9)
    return proc


class TestBuildCommand:
    def test_default(self):
        cmd = PdftoppmRasterizer().build_command(Path("a.pdf"), Path("out/png_gen"))
        assert cmd == ["pdftoppm", "-png", "a.pdf", str(Path("out/png_gen"))]

    def test_dpi_and_binary(self):
        r = PdftoppmRasterizer(binary="/opt/poppler/pdftoppm", dpi=150)
        cmd = r.build_command(Path("a.pdf"), Path("p"))
        assert cmd[:4] == ["/opt/poppler/pdftoppm", "-png", "-r", "150"]

    def test_name(self):
        assert PdftoppmRasterizer().name == "pdftoppm"


class TestRasterize:
    @pytest.mark.asyncio
    async def test_success(self, tmp_path: Path):
        prefix = tmp_path / "png_gen"
        proc = _make_proc(on_run=lambda: (tmp_path / "png_gen-1.png").write_bytes(b"x"))
        with patch(_EXEC, AsyncMock(return_value=proc)) as exec_mock:
            await PdftoppmRasterizer().rasterize(Path("doc.pdf"), prefix)
        args = exec_mock.call_args.args
        assert args == ("pdftoppm", "-png", "doc.pdf", str(prefix))

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, tmp_path: Path):
        proc = _make_proc(returncode=1, stderr=b"Syntax Error: Couldn't read xref")
        with patch(_EXEC, AsyncMock(return_value=proc)):
            with pytest.raises(RasterizerError, match="status 1.*xref"):
                await PdftoppmRasterizer().rasterize(Path("doc.pdf"), tmp_path / "png_gen")

    @pytest.mark.asyncio
    async def test_no_pages_produced(self, tmp_path: Path):
        with patch(_EXEC, AsyncMock(return_value=_make_proc())):
            with pytest.raises(RasterizerError, match="no pages"):
                await PdftoppmRasterizer().rasterize(Path("doc.pdf"), tmp_path / "png_gen")

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path: Path):
        with patch(_EXEC, AsyncMock(side_effect=FileNotFoundError("pdftoppm"))):
            with pytest.raises(RasterizerError, match="Cannot start"):
                await PdftoppmRasterizer().rasterize(Path("doc.pdf"), tmp_path / "png_gen")

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, tmp_path: Path):
        proc = _hanging_proc()
        with patch(_EXEC, AsyncMock(return_value=proc)):
            with pytest.raises(RasterizerError, match="timed out"):
                await PdftoppmRasterizer(timeout=0.01).rasterize(
                    Path("doc.pdf"), tmp_path / "png_gen",
                )
        proc.kill.assert_called_once()
        proc.wait.assert_awaited()

    @pytest.mark.asyncio
    async def test_cancellation_kills_process(self, tmp_path: Path):
        proc = _hanging_proc()
        with patch(_EXEC, AsyncMock(return_value=proc)):
            task = asyncio.create_task(
                PdftoppmRasterizer().rasterize(Path("doc.pdf"), tmp_path / "png_gen")
            )
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        proc.kill.assert_called_once()
