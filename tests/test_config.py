"""Tests for settings and half-year naming."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from seasonbook.config import Settings, settings
from seasonbook.seasons.naming import (
    SeasonKey,
    SportType,
    half_year_label,
    is_bucket_boundary,
    season_key,
)


def test_project_config():
    """Default settings load without a .env file."""
    assert settings.api_host == "127.0.0.1", f"Expected API host 127.0.0.1, got {settings.api_host}"
    assert settings.api_port == 8000
    assert settings.fall_start_month == 7
    assert settings.default_sport in ("baseball", "softball")
    assert settings.data_dir == settings.project_root / "data"


def test_fall_start_month_is_validated():
    with pytest.raises(ValidationError):
        Settings(fall_start_month=1)
    with pytest.raises(ValidationError):
        Settings(fall_start_month=13)
    assert Settings(fall_start_month=8).fall_start_month == 8


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FALL_START_MONTH", "6")
    monkeypatch.setenv("DEFAULT_SPORT", "softball")

    configured = Settings()

    assert configured.fall_start_month == 6
    assert configured.default_sport == "softball"


@pytest.mark.parametrize(
    ("moment", "label"),
    [
        (date(2026, 1, 1), "Spring 2026"),
        (date(2026, 6, 30), "Spring 2026"),
        (date(2026, 7, 1), "Fall 2026"),
        (datetime(2026, 12, 31, 23, 59), "Fall 2026"),
    ],
)
def test_half_year_label(moment, label):
    assert half_year_label(moment) == label


def test_custom_fall_start_month():
    assert half_year_label(date(2026, 6, 15), fall_start_month=6) == "Fall 2026"
    assert is_bucket_boundary(date(2026, 6, 1), fall_start_month=6)
    assert not is_bucket_boundary(date(2026, 7, 1), fall_start_month=6)


def test_season_keys_sort_chronologically():
    keys = [season_key(date(2025, 9, 1)), season_key(date(2024, 3, 1)), season_key(date(2025, 2, 1))]

    assert sorted(keys) == [SeasonKey(2024, 0), SeasonKey(2025, 0), SeasonKey(2025, 1)]


def test_sport_type_display_name():
    assert SportType("softball").display_name == "Softball"
