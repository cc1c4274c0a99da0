# src/cache/models.py
"""Cache domain models."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel

CacheStatus = Literal["missing", "pending", "ready"]


class RasterEntry(BaseModel):
    """A complete raster cache entry for one source document."""

    doc_hash: str
    directory: Path
    source_path: Path
    rendered: bool = False
