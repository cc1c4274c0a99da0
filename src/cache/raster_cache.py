# src/cache/raster_cache.py
"""Content-addressed store of rendered PDF pages.

One directory per document hash under the data root. An entry is rendered
once and never invalidated: identical bytes always render identically. While
rendering, the entry carries the in-progress marker so other readers can tell
a partial entry from a finished one.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pdfdiff.cache.hasher import hash_file
from pdfdiff.cache.models import CacheStatus, RasterEntry
from pdfdiff.core.errors import StorageIOError
from pdfdiff.logging.context import set_document_context
from pdfdiff.rasterizer.base_rasterizer import BaseRasterizer
from pdfdiff.storage import layout, markers
from pdfdiff.storage.locks import KeyedLock

logger = logging.getLogger(__name__)


class RasterCache:
    """Rasterize documents on first use and reuse the pages afterwards."""

    def __init__(
        self,
        data_root: Path,
        rasterizer: BaseRasterizer,
        wait_timeout: float = 120.0,
        poll_interval: float = 0.5,
    ) -> None:
        self._root = Path(data_root)
        self._rasterizer = rasterizer
        self._wait_timeout = wait_timeout
        self._poll_interval = poll_interval
        self._locks = KeyedLock()

    def entry_dir(self, doc_hash: str) -> Path:
        return layout.cache_entry_dir(self._root, doc_hash)

    def status(self, doc_hash: str) -> CacheStatus:
        """Report whether a document's pages are missing, being rendered, or ready."""
        state = markers.entry_state(self.entry_dir(doc_hash))
        if state == "failed":
            return "missing"
        return state

    async def ensure_rasterized(
        self, pdf_path: Path, doc_hash: str | None = None,
    ) -> RasterEntry:
        """Return the cache entry for ``pdf_path``, rendering it if needed.

        Args:
            pdf_path: Source PDF.
            doc_hash: Precomputed digest of ``pdf_path``; computed if omitted.

        Raises:
            StorageIOError: If the PDF or the entry directory is inaccessible.
            RasterizerError: If rendering fails. The partial entry is removed.
            EntryBusyError: If another process holds the entry too long.
        """
        pdf_path = Path(pdf_path)
        doc_hash = doc_hash or hash_file(pdf_path)
        set_document_context(doc_hash)
        entry = self.entry_dir(doc_hash)

        async with self._locks.hold(doc_hash):
            while True:
                state = markers.entry_state(entry)
                if state == "pending":
                    logger.info("Waiting for in-flight rasterization of %s", doc_hash)
                    state = await markers.wait_until_settled(
                        entry, self._wait_timeout, self._poll_interval,
                    )
                if state == "ready":
                    logger.info("Raster cache hit for %s (%s)", pdf_path.name, doc_hash)
                    return RasterEntry(
                        doc_hash=doc_hash, directory=entry, source_path=pdf_path,
                    )
                if state == "failed":
                    markers.discard(entry)
                try:
                    entry.parent.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise StorageIOError(f"Cannot create {entry.parent}: {exc}") from exc
                if markers.claim(entry):
                    break

            await self._render(pdf_path, entry)

        return RasterEntry(
            doc_hash=doc_hash, directory=entry, source_path=pdf_path, rendered=True,
        )

    async def _render(self, pdf_path: Path, entry: Path) -> None:
        try:
            await self._rasterizer.rasterize(pdf_path, layout.page_prefix(entry))
        except BaseException:
            logger.warning("Rasterization of %s aborted; removing %s", pdf_path, entry)
            try:
                markers.discard(entry)
            except StorageIOError:
                logger.exception("Could not remove partial cache entry %s", entry)
            raise
        markers.release(entry)
