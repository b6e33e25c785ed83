"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

from datetime import date


class TestPackageImports:
    def test_version(self):
        import availability_engine
        assert availability_engine.__version__ == "0.1.0"

    def test_scheduling_package(self):
        from availability_engine.scheduling import (
            DurationResolver, ScheduleResolver, SlotGenerator, SlotSequence,
            layout_day, pack_lanes, validate_booking,
        )
        assert callable(pack_lanes)

    def test_flow_package(self):
        from availability_engine.flow import BookingWizard, WizardState
        assert WizardState.INTAKE == "intake"

    def test_errors_are_value_errors_where_malformed(self):
        from availability_engine.errors import InvalidDuration, InvalidInterval, UnknownEntity
        assert issubclass(InvalidInterval, ValueError)
        assert issubclass(InvalidDuration, ValueError)
        assert issubclass(UnknownEntity, LookupError)


class TestConfigImport:
    def test_import_config(self):
        from availability_engine.config import settings
        assert settings.schedule.slot_granularity_minutes >= 1
        assert settings.schedule.active_booking_statuses


class TestLoggingContext:
    def test_request_id_attached(self):
        import logging

        from availability_engine.logging_context import (
            RequestIdFilter, get_request_logger, new_request_id,
        )
        request_id = new_request_id()
        assert request_id.startswith("REQ-")
        logger = get_request_logger("tests.logging")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
        get_request_logger("tests.logging")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1

        record = logging.LogRecord("tests.logging", logging.INFO, __file__, 1, "msg", None, None)
        RequestIdFilter().filter(record)
        assert record.request_id == request_id


class TestDemoData:
    def test_demo_store_builds(self):
        from availability_engine.demo_data import build_demo_store, next_weekday
        today = date(2026, 3, 4)
        store = build_demo_store(today)
        monday = next_weekday(today, 0)
        assert monday == date(2026, 3, 9)
        assert len(store.get_bookings("res-ana", monday)) == 3

    def test_console_session_builds(self):
        from console_demo import ConsoleSession
        session = ConsoleSession(today=date(2026, 3, 4))
        assert session.wizard.state.value == "intake"
        assert session.day == date(2026, 3, 9)
