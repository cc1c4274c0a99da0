# src/jobs/orchestrator.py
"""End-to-end comparison of two PDF documents.

Usage:
    orchestrator = JobOrchestrator(settings)
    result = await orchestrator.compare(Path("a.pdf"), Path("b.pdf"))

A job is identified by the ordered pair of document hashes. A completed result
entry is never recomputed. A failed job keeps its partial pages plus a failure
marker and is retried from scratch on the next compare(); there is no per-page
resume. A cancelled job removes its result entry.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import contextvars
import logging
from collections.abc import Awaitable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import Any

from pdfdiff.cache.hasher import hash_file, is_digest, job_id_for
from pdfdiff.cache.raster_cache import RasterCache
from pdfdiff.config.settings import Settings
from pdfdiff.core.errors import JobFailedError, PdfDiffError, StorageIOError
from pdfdiff.imaging.color import HighlightColor
from pdfdiff.imaging.diff_engine import diff_page_files
from pdfdiff.jobs.models import ComparisonResult, JobError, PageDiffResult
from pdfdiff.logging.context import set_job_context, set_page_context
from pdfdiff.rasterizer.base_rasterizer import BaseRasterizer
from pdfdiff.rasterizer.enumerator import PagePair, enumerate_pages, pair_pages
from pdfdiff.rasterizer.pdftoppm import PdftoppmRasterizer
from pdfdiff.storage import layout, markers
from pdfdiff.storage.locks import KeyedLock

logger = logging.getLogger(__name__)


def parse_job_id(job_id: str) -> tuple[str, str]:
    """Split ``"<hash_a>-<hash_b>"`` into its two document hashes."""
    parts = job_id.strip().split("-")
    if len(parts) != 2 or not all(is_digest(p) for p in parts):
        raise ValueError(f"Invalid job id: {job_id!r}")
    return parts[0], parts[1]


class JobOrchestrator:
    """Drive rasterization, page pairing and page diffs for comparison jobs."""

    def __init__(
        self,
        settings: Settings | None = None,
        rasterizer: BaseRasterizer | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._rasterizer = rasterizer or PdftoppmRasterizer(
            binary=self._settings.rasterizer_binary,
            dpi=self._settings.rasterizer_dpi,
            timeout=self._settings.rasterizer_timeout_seconds,
        )
        self._cache = RasterCache(
            data_root=self._settings.data_root,
            rasterizer=self._rasterizer,
            wait_timeout=self._settings.entry_wait_timeout_seconds,
            poll_interval=self._settings.entry_poll_interval_seconds,
        )
        self._executor = executor
        self._locks = KeyedLock()

    @property
    def cache(self) -> RasterCache:
        return self._cache

    def result_dir(self, job_id: str) -> Path:
        return layout.result_dir(self._settings.data_root, job_id)

    async def compare(
        self,
        pdf_a: str | Path,
        pdf_b: str | Path,
        highlight: HighlightColor | str | None = None,
    ) -> ComparisonResult:
        """Compare two PDFs page by page and write one overlay per page.

        Args:
            pdf_a: Baseline document.
            pdf_b: Revised document; overlays are drawn on its pages.
            highlight: Tint for changed rows. Defaults to the configured color.

        Returns:
            ComparisonResult with status "done".

        Raises:
            StorageIOError: If either PDF cannot be read.
            JobFailedError: If the job aborted after its result entry was created.
        """
        color = self._resolve_highlight(highlight)
        pdf_a, pdf_b = Path(pdf_a), Path(pdf_b)
        loop = asyncio.get_running_loop()
        hash_a, hash_b = await asyncio.gather(
            loop.run_in_executor(None, hash_file, pdf_a),
            loop.run_in_executor(None, hash_file, pdf_b),
        )
        job_id = job_id_for(hash_a, hash_b)
        set_job_context(job_id)
        result_path = self.result_dir(job_id)

        try:
            layout.ensure_data_directories(self._settings.data_root)
        except OSError as exc:
            raise StorageIOError(f"Cannot create data directories: {exc}") from exc

        async with self._locks.hold(job_id):
            while True:
                state = markers.entry_state(result_path)
                if state == "pending":
                    logger.info("Job %s is running elsewhere; waiting", job_id)
                    state = await markers.wait_until_settled(
                        result_path,
                        self._settings.entry_wait_timeout_seconds,
                        self._settings.entry_poll_interval_seconds,
                    )
                if state == "ready":
                    logger.info("Job %s already done; reusing results", job_id)
                    result = self.inspect(job_id)
                    result.reused = True
                    return result
                if state == "failed":
                    logger.info("Retrying previously failed job %s", job_id)
                    markers.discard(result_path)
                if markers.claim(result_path):
                    break

            logger.info("Starting job %s (%s vs %s)", job_id, pdf_a.name, pdf_b.name)
            pages = await self._run(job_id, pdf_a, pdf_b, hash_a, hash_b, result_path, color)

        return ComparisonResult(
            job_id=job_id,
            doc_hash_a=hash_a,
            doc_hash_b=hash_b,
            status="done",
            result_dir=str(result_path),
            pages=pages,
            images=[p.name for p in layout.list_result_images(result_path)],
        )

    def inspect(self, job_id: str) -> ComparisonResult:
        """Report the state of a job from its result entry.

        Raises:
            ValueError: If ``job_id`` is not a pair of document hashes.
        """
        hash_a, hash_b = parse_job_id(job_id)
        result_path = self.result_dir(job_id)
        state = markers.entry_state(result_path)

        result = ComparisonResult(
            job_id=job_id,
            doc_hash_a=hash_a,
            doc_hash_b=hash_b,
            status="done" if state == "ready" else state,
            result_dir=str(result_path),
        )
        if state == "failed":
            result.error = markers.read_failure(result_path)
        elif state == "ready":
            result.images = [p.name for p in layout.list_result_images(result_path)]
        return result

    async def _run(
        self,
        job_id: str,
        pdf_a: Path,
        pdf_b: Path,
        hash_a: str,
        hash_b: str,
        result_path: Path,
        color: HighlightColor,
    ) -> list[PageDiffResult]:
        try:
            entry_a, entry_b = await _gather_or_cancel(
                self._cache.ensure_rasterized(pdf_a, hash_a),
                self._cache.ensure_rasterized(pdf_b, hash_b),
            )
            max_width = self._settings.padding_search_width
            pairs = pair_pages(
                enumerate_pages(entry_a.directory, max_width),
                enumerate_pages(entry_b.directory, max_width),
            )
            pages = await self._diff_pairs(pairs, result_path, color)
            markers.release(result_path)
        except asyncio.CancelledError:
            logger.warning("Job %s cancelled; removing %s", job_id, result_path)
            try:
                markers.discard(result_path)
            except StorageIOError:
                logger.exception("Could not remove cancelled job %s", job_id)
            raise
        except (PdfDiffError, OSError) as exc:
            kind = getattr(exc, "kind", "io")
            logger.error("Job %s failed: %s", job_id, exc)
            message = _record_failure(job_id, result_path, kind, exc)
            raise JobFailedError(job_id, kind, message) from exc
        except Exception as exc:
            logger.exception("Job %s failed unexpectedly", job_id)
            message = _record_failure(job_id, result_path, PdfDiffError.kind, exc)
            raise JobFailedError(job_id, PdfDiffError.kind, message) from exc

        identical = sum(1 for p in pages if p.identical)
        logger.info(
            "Job %s done: %d pages compared, %d identical",
            job_id, len(pages), identical,
        )
        return pages

    async def _diff_pairs(
        self,
        pairs: Sequence[PagePair],
        result_path: Path,
        color: HighlightColor,
    ) -> list[PageDiffResult]:
        """Diff page pairs on the worker pool; results come back in page order."""
        if not pairs:
            return []

        loop = asyncio.get_running_loop()
        executor = self._executor
        owned = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=min(self._settings.worker_count, len(pairs)),
                thread_name_prefix="pdfdiff-page",
            )
        futures = [
            executor.submit(
                contextvars.copy_context().run, _diff_pair, pair, result_path, color,
            )
            for pair in pairs
        ]
        try:
            return list(await _gather_or_cancel(*(asyncio.wrap_future(f) for f in futures)))
        finally:
            # Workers still running write into result_path; let them finish
            # before the caller discards or marks the entry.
            for future in futures:
                future.cancel()
            running = [f for f in futures if not f.done()]
            if running:
                await loop.run_in_executor(None, concurrent.futures.wait, running)
            if owned:
                executor.shutdown(wait=False)

    def _resolve_highlight(self, highlight: HighlightColor | str | None) -> HighlightColor:
        if highlight is None:
            return self._settings.highlight
        if isinstance(highlight, str):
            return HighlightColor.from_hex(highlight)
        return highlight


def _diff_pair(pair: PagePair, result_path: Path, color: HighlightColor) -> PageDiffResult:
    set_page_context(pair.number)
    return diff_page_files(
        pair.page_a,
        pair.page_b,
        layout.result_image(result_path, pair.number),
        color,
        pair.number,
    )


async def _gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """gather() that cancels the remaining awaitables when one of them fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _record_failure(job_id: str, result_path: Path, kind: str, exc: BaseException) -> str:
    """Leave the failure marker on a result entry and return the recorded message."""
    message = str(exc) or type(exc).__name__
    try:
        markers.mark_failed(result_path, JobError(kind=kind, message=message))
    except StorageIOError:
        logger.exception("Could not record failure of job %s", job_id)
    return message
