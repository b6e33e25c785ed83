"""
Centralized configuration with environment variable overrides.

Default working window, slot granularity, booking statuses and calendar
layout settings live here. Nothing is hardcoded in scheduling logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _csv(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class ScheduleConfig:
    """Availability defaults used when a resource has nothing configured."""

    default_window_start: str = os.getenv("DEFAULT_WINDOW_START", "08:00")
    default_window_end: str = os.getenv("DEFAULT_WINDOW_END", "18:00")
    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "30")
    default_service_duration: int = _safe_int("DEFAULT_SERVICE_DURATION", "60")
    active_booking_statuses: tuple[str, ...] = _csv(
        "ACTIVE_BOOKING_STATUSES", "scheduled,confirmed"
    )
    business_timezone: str = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")
    next_available_horizon_days: int = _safe_int("NEXT_AVAILABLE_HORIZON_DAYS", "14")


@dataclass(frozen=True)
class CalendarConfig:
    """Day-view layout settings."""

    view_start: str = os.getenv("CALENDAR_VIEW_START", "00:00")
    min_card_minutes: int = _safe_int("CALENDAR_MIN_CARD_MINUTES", "0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "availability-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    for name, value in [
        ("DEFAULT_WINDOW_START", config.schedule.default_window_start),
        ("DEFAULT_WINDOW_END", config.schedule.default_window_end),
        ("CALENDAR_VIEW_START", config.calendar.view_start),
    ]:
        if not _HHMM.match(value):
            raise ValueError(f"{name} must be HH:MM, got {value!r}")

    if config.schedule.default_window_start >= config.schedule.default_window_end:
        raise ValueError(
            "DEFAULT_WINDOW_START must be before DEFAULT_WINDOW_END, got "
            f"{config.schedule.default_window_start}-{config.schedule.default_window_end}"
        )
    if config.schedule.slot_granularity_minutes < 1:
        raise ValueError(
            "SLOT_GRANULARITY_MINUTES must be >= 1, "
            f"got {config.schedule.slot_granularity_minutes}"
        )
    if config.schedule.default_service_duration < 1:
        raise ValueError(
            "DEFAULT_SERVICE_DURATION must be >= 1, "
            f"got {config.schedule.default_service_duration}"
        )
    if not config.schedule.active_booking_statuses:
        raise ValueError("ACTIVE_BOOKING_STATUSES must name at least one status")
    if config.schedule.next_available_horizon_days < 1:
        raise ValueError(
            "NEXT_AVAILABLE_HORIZON_DAYS must be >= 1, "
            f"got {config.schedule.next_available_horizon_days}"
        )
    if config.calendar.min_card_minutes < 0:
        raise ValueError(
            f"CALENDAR_MIN_CARD_MINUTES must be >= 0, got {config.calendar.min_card_minutes}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info(
        "Configuration loaded for '%s' (default window %s-%s)",
        config.app_name,
        config.schedule.default_window_start,
        config.schedule.default_window_end,
    )
    return config


# Singleton instance
settings = load_config()
