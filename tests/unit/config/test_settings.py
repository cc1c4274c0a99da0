# tests/unit/config/test_settings.py
"""Tests for config/settings.py — defaults, validators and env loading."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pdfdiff.config.settings import ConfigurationError, Settings, load_settings
from pdfdiff.imaging.color import HighlightColor


class TestDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.data_root == Path("data")
        assert s.highlight_color == "ff2010"
        assert s.rasterizer_binary == "pdftoppm"
        assert s.rasterizer_dpi is None
        assert s.padding_search_width == 10
        assert s.log_format == "text"

    def test_derived_roots(self, tmp_path: Path):
        s = Settings(_env_file=None, data_root=tmp_path)
        assert s.cache_root == tmp_path
        assert s.generated_root == tmp_path / "generated"

    def test_highlight(self):
        s = Settings(_env_file=None)
        assert s.highlight == HighlightColor(255.0, 32.0, 16.0)


class TestEnvFile:
    def test_from_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "DATA_ROOT=/srv/pdfdiff\n"
            "HIGHLIGHT_COLOR=#00FF00\n"
            "RASTERIZER_DPI=150\n"
            "MAX_WORKERS=3\n"
            "LOG_FORMAT=json\n"
            "UNRELATED_KEY=ignored\n"
        )
        s = Settings(_env_file=str(env_file))
        assert s.data_root == Path("/srv/pdfdiff")
        assert s.highlight_color == "00ff00"
        assert s.rasterizer_dpi == 150
        assert s.worker_count == 3
        assert s.log_format == "json"


class TestValidators:
    @pytest.mark.parametrize("value", ["#FF2010", " ff2010 ", "FF2010"])
    def test_color_normalized(self, value):
        assert Settings(_env_file=None, highlight_color=value).highlight_color == "ff2010"

    @pytest.mark.parametrize("value", ["red", "fff", "ff20100", "zz2010"])
    def test_invalid_color(self, value):
        with pytest.raises(ValidationError, match="6-digit hex"):
            Settings(_env_file=None, highlight_color=value)

    def test_negative_workers(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_workers=-1)

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")


class TestConsistency:
    def test_zero_search_width(self):
        with pytest.raises(ConfigurationError, match="PADDING_SEARCH_WIDTH"):
            Settings(_env_file=None, padding_search_width=0)

    def test_non_positive_dpi(self):
        with pytest.raises(ConfigurationError, match="RASTERIZER_DPI"):
            Settings(_env_file=None, rasterizer_dpi=0)

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError, match="RASTERIZER_TIMEOUT_SECONDS"):
            Settings(_env_file=None, rasterizer_timeout_seconds=0)

    def test_poll_longer_than_wait(self):
        with pytest.raises(ConfigurationError, match="ENTRY_POLL_INTERVAL_SECONDS"):
            Settings(
                _env_file=None,
                entry_wait_timeout_seconds=1.0,
                entry_poll_interval_seconds=2.0,
            )

    def test_errors_are_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, padding_search_width=0, rasterizer_dpi=-5)
        assert "PADDING_SEARCH_WIDTH" in str(exc_info.value)
        assert "RASTERIZER_DPI" in str(exc_info.value)


class TestWorkerCount:
    def test_explicit(self):
        assert Settings(_env_file=None, max_workers=4).worker_count == 4

    def test_zero_means_cpu_count(self):
        with patch("pdfdiff.config.settings.os.cpu_count", return_value=6):
            assert Settings(_env_file=None, max_workers=0).worker_count == 6

    def test_unknown_cpu_count(self):
        with patch("pdfdiff.config.settings.os.cpu_count", return_value=None):
            assert Settings(_env_file=None, max_workers=0).worker_count == 1


def test_load_settings_overrides(tmp_path: Path):
    s = load_settings(_env_file=None, data_root=tmp_path, highlight_color="0000ff")
    assert s.data_root == tmp_path
    assert s.highlight.as_tuple() == (0.0, 0.0, 255.0)
