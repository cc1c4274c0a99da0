# src/core/errors.py
"""Exception hierarchy shared by every pdfdiff module.

Dimension mismatches between two pages are not represented here: they are
recovered locally by the diff engine and surfaced as a warning.
"""

from __future__ import annotations


class PdfDiffError(Exception):
    """Base class for all pdfdiff failures."""

    kind = "error"


class StorageIOError(PdfDiffError):
    """A file or directory could not be opened, created, read or written."""

    kind = "io"


class ImageDecodeError(PdfDiffError):
    """A raster page image is malformed or unreadable."""

    kind = "decode"


class RasterizerError(PdfDiffError):
    """The external rasterizer failed, timed out or produced no pages."""

    kind = "rasterizer"


class EntryBusyError(PdfDiffError):
    """An entry stayed marked in-progress by another worker past the wait timeout."""

    kind = "busy"

    def __init__(self, path: str, waited: float) -> None:
        super().__init__(
            f"{path} is still marked in progress after {waited:.1f}s; "
            "remove the directory if the owning process is gone"
        )
        self.path = path
        self.waited = waited


class JobFailedError(PdfDiffError):
    """A comparison job aborted. The cause is chained as ``__cause__``."""

    kind = "job"

    def __init__(self, job_id: str, kind: str, message: str) -> None:
        super().__init__(f"Job {job_id} failed ({kind}): {message}")
        self.job_id = job_id
        self.failure_kind = kind
        self.message = message
