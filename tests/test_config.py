"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from availability_engine.config import (
    AppConfig,
    CalendarConfig,
    ScheduleConfig,
    _safe_int,
    _validate_config,
)


def _config(schedule: ScheduleConfig = None, calendar: CalendarConfig = None) -> AppConfig:
    config = AppConfig.__new__(AppConfig)
    object.__setattr__(config, "schedule", schedule or ScheduleConfig())
    object.__setattr__(config, "calendar", calendar or CalendarConfig())
    object.__setattr__(config, "log_level", "INFO")
    object.__setattr__(config, "app_name", "test")
    return config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_window_must_be_hhmm(self):
        schedule = replace(ScheduleConfig(), default_window_start="8am")
        with pytest.raises(ValueError, match="DEFAULT_WINDOW_START"):
            _validate_config(_config(schedule=schedule))

    def test_window_must_be_ordered(self):
        schedule = replace(
            ScheduleConfig(), default_window_start="18:00", default_window_end="08:00"
        )
        with pytest.raises(ValueError, match="DEFAULT_WINDOW_START"):
            _validate_config(_config(schedule=schedule))

    def test_granularity_positive(self):
        schedule = replace(ScheduleConfig(), slot_granularity_minutes=0)
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _validate_config(_config(schedule=schedule))

    def test_default_duration_positive(self):
        schedule = replace(ScheduleConfig(), default_service_duration=-5)
        with pytest.raises(ValueError, match="DEFAULT_SERVICE_DURATION"):
            _validate_config(_config(schedule=schedule))

    def test_statuses_required(self):
        schedule = replace(ScheduleConfig(), active_booking_statuses=())
        with pytest.raises(ValueError, match="ACTIVE_BOOKING_STATUSES"):
            _validate_config(_config(schedule=schedule))

    def test_horizon_positive(self):
        schedule = replace(ScheduleConfig(), next_available_horizon_days=0)
        with pytest.raises(ValueError, match="NEXT_AVAILABLE_HORIZON_DAYS"):
            _validate_config(_config(schedule=schedule))

    def test_view_start_must_be_hhmm(self):
        calendar = replace(CalendarConfig(), view_start="25:00")
        with pytest.raises(ValueError, match="CALENDAR_VIEW_START"):
            _validate_config(_config(calendar=calendar))

    def test_min_card_not_negative(self):
        calendar = replace(CalendarConfig(), min_card_minutes=-1)
        with pytest.raises(ValueError, match="CALENDAR_MIN_CARD_MINUTES"):
            _validate_config(_config(calendar=calendar))


class TestSafeInt:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("SLOT_GRANULARITY_MINUTES", "15")
        assert _safe_int("SLOT_GRANULARITY_MINUTES", "30") == 15

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("SLOT_GRANULARITY_MINUTES", raising=False)
        assert _safe_int("SLOT_GRANULARITY_MINUTES", "30") == 30

    def test_bad_value_names_variable(self, monkeypatch):
        monkeypatch.setenv("SLOT_GRANULARITY_MINUTES", "half-hour")
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _safe_int("SLOT_GRANULARITY_MINUTES", "30")
