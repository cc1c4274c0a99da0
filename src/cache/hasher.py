# src/cache/hasher.py
"""Content hashing for cache keys and identical-page detection.

Source PDFs are keyed by the SHA-256 of their raw bytes (``doc_hash``); the
same digest on rendered page files lets the diff engine skip byte-identical
pages without decoding them.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from pdfdiff.core.errors import StorageIOError

_BLOCK_SIZE = 1 << 16


def hash_bytes(raw_bytes: bytes) -> str:
    """SHA-256 hex digest of ``raw_bytes``."""
    return hashlib.sha256(raw_bytes).hexdigest()


def hash_file(path: str | Path) -> str:
    """SHA-256 hex digest of a file's contents, read in blocks.

    Raises:
        StorageIOError: If the file cannot be opened or read.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for block in iter(lambda: fh.read(_BLOCK_SIZE), b""):
                digest.update(block)
    except OSError as exc:
        raise StorageIOError(f"Cannot hash {path}: {exc}") from exc
    return digest.hexdigest()


def job_id_for(doc_hash_a: str, doc_hash_b: str) -> str:
    """Comparison identity for an ordered document pair."""
    return f"{doc_hash_a}-{doc_hash_b}"


def is_digest(value: str) -> bool:
    """True for a lowercase 64-character SHA-256 hex digest."""
    if len(value) != 64:
        return False
    return all(c in "0123456789abcdef" for c in value)
