# src/config/settings.py
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: where the raster
cache lives, how the external rasterizer is invoked, how many pages are diffed
in parallel, and how logging is set up.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pdfdiff.imaging.color import HighlightColor
from pdfdiff.storage import layout

_HEX_COLOR = re.compile(r"^#?[0-9a-fA-F]{6}$")


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage ===
    data_root: Path = Path("data")

    # === Highlighting ===
    highlight_color: str = "ff2010"

    # === External rasterizer ===
    rasterizer_binary: str = "pdftoppm"
    rasterizer_dpi: int | None = None
    rasterizer_timeout_seconds: float = 300.0

    # === Page discovery ===
    padding_search_width: int = 10

    # === Concurrency ===
    max_workers: int = 0
    entry_wait_timeout_seconds: float = 120.0
    entry_poll_interval_seconds: float = 0.5

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("highlight_color")
    @classmethod
    def validate_highlight_color(cls, v: str) -> str:  # noqa: N805
        if not _HEX_COLOR.match(v.strip()):
            raise ValueError(f"highlight_color must be a 6-digit hex RGB value, got {v!r}")
        return v.strip().lstrip("#").lower()

    @field_validator("max_workers", "padding_search_width")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.padding_search_width < 1:
            errors.append("PADDING_SEARCH_WIDTH must be at least 1")

        if self.rasterizer_dpi is not None and self.rasterizer_dpi <= 0:
            errors.append("RASTERIZER_DPI must be positive when set")

        if self.rasterizer_timeout_seconds <= 0:
            errors.append("RASTERIZER_TIMEOUT_SECONDS must be positive")

        if self.entry_poll_interval_seconds <= 0:
            errors.append("ENTRY_POLL_INTERVAL_SECONDS must be positive")

        if self.entry_poll_interval_seconds > self.entry_wait_timeout_seconds:
            errors.append(
                "ENTRY_POLL_INTERVAL_SECONDS must be <= ENTRY_WAIT_TIMEOUT_SECONDS"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_root(self) -> Path:
        """Directory holding one raster cache entry per document hash."""
        return layout.cache_root(self.data_root)

    @property
    def generated_root(self) -> Path:
        """Directory holding one result entry per comparison."""
        return layout.generated_root(self.data_root)

    @property
    def highlight(self) -> HighlightColor:
        return HighlightColor.from_hex(self.highlight_color)

    @property
    def worker_count(self) -> int:
        """Page-diff pool size; 0 means one worker per CPU core."""
        return self.max_workers or os.cpu_count() or 1


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags or tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
