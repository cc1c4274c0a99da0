# src/jobs/models.py
"""Job domain models: PageDiffResult, ComparisonResult, JobError."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

JobStatus = Literal["missing", "pending", "failed", "done"]


class PageDiffResult(BaseModel):
    """Outcome of diffing one page pair."""

    page_number: int
    output_path: str
    identical: bool = False
    dimension_mismatch: bool = False
    changed_rows: int = 0


class JobError(BaseModel):
    """Failure details persisted in a result entry's failure marker."""

    kind: str
    message: str


class ComparisonResult(BaseModel):
    """State of a comparison job, as returned by compare() and inspect()."""

    job_id: str
    doc_hash_a: str
    doc_hash_b: str
    status: JobStatus
    result_dir: str
    pages: list[PageDiffResult] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    reused: bool = False
    error: JobError | None = None

    @property
    def page_count(self) -> int:
        return len(self.images) if self.images else len(self.pages)
