"""Tests for the command-line entry point."""

import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

import main


def run(monkeypatch, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    main.main()


class TestWeekCommand:
    def test_configured_schedule(self, monkeypatch, capsys):
        run(monkeypatch, "week", "res-ana")
        out = capsys.readouterr().out
        assert out.startswith("Mon: 09:00-18:00")
        assert "Sat: 09:00-13:00" in out
        assert "Sun" not in out

    def test_default_window_shown(self, monkeypatch, capsys):
        run(monkeypatch, "week", "res-bruno")
        assert "Sun: 08:00-18:00" in capsys.readouterr().out

    def test_unknown_resource_exits(self, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "week", "res-nobody")
        assert exc.value.code == 1


class TestSlotsCommand:
    def test_lists_times(self, monkeypatch, capsys):
        run(monkeypatch, "slots", "res-bruno", "2099-01-05", "svc-cut")
        out = capsys.readouterr().out
        assert "available time(s) on 05/01/2099" in out
        assert "08:00" in out

    def test_bad_date_exits(self, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "slots", "res-ana", "05/01/2099", "svc-cut")
        assert exc.value.code == 1

    def test_unknown_campaign_exits(self, monkeypatch):
        with pytest.raises(SystemExit):
            run(monkeypatch, "slots", "res-ana", "2099-01-05", "svc-cut", "--campaign", "cmp-nope")


class TestLayoutCommand:
    def test_empty_day(self, monkeypatch, capsys):
        run(monkeypatch, "layout", "res-ana", "2099-01-05")
        assert "No bookings on 05/01/2099." in capsys.readouterr().out


class TestBadTimezone:
    def test_unknown_timezone_exits(self, monkeypatch):
        def today_in_unknown_zone():
            return datetime.now(ZoneInfo("Nowhere/Atlantis")).date()

        monkeypatch.setattr(main, "business_today", today_in_unknown_zone)
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "week", "res-ana")
        assert exc.value.code == 1
