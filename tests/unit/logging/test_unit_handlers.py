# tests/unit/logging/test_unit_handlers.py
"""Tests for logging/handlers.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfdiff.logging.handlers import create_rotating_handler, parse_size


class TestParseSize:
    @pytest.mark.parametrize("value,expected", [
        ("100B", 100),
        ("1KB", 1024),
        ("10MB", 10 * 1024**2),
        ("2 gb", 2 * 1024**3),
    ])
    def test_valid(self, value, expected):
        assert parse_size(value) == expected

    @pytest.mark.parametrize("value", ["", "10", "MB", "1.5MB", "10TB"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid size format"):
            parse_size(value)


def test_create_rotating_handler(tmp_path: Path):
    handler = create_rotating_handler(tmp_path / "nested" / "app.log", "1KB", 3)
    try:
        assert handler.maxBytes == 1024
        assert handler.backupCount == 3
        assert (tmp_path / "nested").is_dir()
    finally:
        handler.close()
