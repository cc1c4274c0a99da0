# src/logging/context.py
"""Contextual logging: attach job_id, doc_hash and page to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per comparison job; copied into page-diff worker threads.
_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_doc_hash: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "doc_hash", default=None
)
_page: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "page", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    job_id: str | None = None
    doc_hash: str | None = None
    page: int | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        job_id=_job_id.get(),
        doc_hash=_doc_hash.get(),
        page=_page.get(),
    )


def set_job_context(job_id: str) -> None:
    """Set job-level context (once per compare call)."""
    _job_id.set(job_id)


def set_document_context(doc_hash: str | None) -> None:
    """Set the document being rasterized."""
    _doc_hash.set(doc_hash)


def set_page_context(page: int | None) -> None:
    """Set the page being diffed (inside a worker)."""
    _page.set(page)


def clear_context() -> None:
    _job_id.set(None)
    _doc_hash.set(None)
    _page.set(None)
