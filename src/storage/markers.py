# src/storage/markers.py
"""Entry lifecycle markers shared by raster cache and result entries.

An entry directory is claimed atomically: a staging directory holding the
in-progress marker is renamed into place, so no reader ever observes the entry
without its marker. The marker is removed (at the same path) once the entry is
complete. A failed result entry keeps a JSON failure marker instead.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import time
import uuid
from pathlib import Path
from typing import Literal

from pdfdiff.core.errors import EntryBusyError, StorageIOError
from pdfdiff.jobs.models import JobError

logger = logging.getLogger(__name__)

IN_PROGRESS_MARKER = ".tmp"
FAILED_MARKER = ".failed"

EntryState = Literal["missing", "pending", "failed", "ready"]


def in_progress_path(entry: Path) -> Path:
    return entry / IN_PROGRESS_MARKER


def failed_path(entry: Path) -> Path:
    return entry / FAILED_MARKER


def entry_state(entry: Path) -> EntryState:
    """Classify an entry directory by its markers."""
    if not entry.is_dir():
        return "missing"
    if in_progress_path(entry).exists():
        return "pending"
    if failed_path(entry).exists():
        return "failed"
    return "ready"


def claim(entry: Path) -> bool:
    """Atomically create ``entry`` with its in-progress marker.

    Returns:
        True if this caller created the entry, False if it already existed.

    Raises:
        StorageIOError: If the entry cannot be created for another reason.
    """
    staging = entry.with_name(f".{entry.name}.{uuid.uuid4().hex[:8]}.claim")
    try:
        staging.mkdir(parents=True)
        in_progress_path(staging).touch()
    except OSError as exc:
        raise StorageIOError(f"Cannot create {staging}: {exc}") from exc

    try:
        os.rename(staging, entry)
    except OSError as exc:
        shutil.rmtree(staging, ignore_errors=True)
        if entry.is_dir():
            return False
        raise StorageIOError(f"Cannot create {entry}: {exc}") from exc
    return True


def release(entry: Path) -> None:
    """Mark ``entry`` complete by removing its in-progress marker."""
    try:
        in_progress_path(entry).unlink(missing_ok=True)
    except OSError as exc:
        raise StorageIOError(f"Cannot finalize {entry}: {exc}") from exc


def mark_failed(entry: Path, error: JobError) -> None:
    """Replace the in-progress marker with a failure marker."""
    try:
        failed_path(entry).write_text(error.model_dump_json(indent=2), encoding="utf-8")
        in_progress_path(entry).unlink(missing_ok=True)
    except OSError as exc:
        raise StorageIOError(f"Cannot mark {entry} as failed: {exc}") from exc


def read_failure(entry: Path) -> JobError | None:
    """Failure details of an entry, or None if it has not failed."""
    path = failed_path(entry)
    if not path.exists():
        return None
    try:
        return JobError.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Unreadable failure marker in %s", entry, exc_info=True)
        return JobError(kind="unknown", message="failure marker unreadable")


def discard(entry: Path) -> None:
    """Remove an entry directory and everything in it."""
    if not entry.exists():
        return
    try:
        shutil.rmtree(entry)
    except OSError as exc:
        raise StorageIOError(f"Cannot remove {entry}: {exc}") from exc


async def wait_until_settled(
    entry: Path,
    timeout: float,
    poll_interval: float,
) -> EntryState:
    """Poll until ``entry`` is no longer in progress.

    Raises:
        EntryBusyError: If the entry is still in progress after ``timeout``.
    """
    start = time.monotonic()
    state = entry_state(entry)
    while state == "pending":
        waited = time.monotonic() - start
        if waited >= timeout:
            raise EntryBusyError(str(entry), waited)
        await asyncio.sleep(poll_interval)
        state = entry_state(entry)
    return state
