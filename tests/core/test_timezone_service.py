# tests/core/test_timezone_service.py
"""DST handling and instant parsing."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from salonbook.core.timezone_service import TimezoneService

NY = "America/New_York"


class TestLocalToUtc:
    def test_summer_offset(self):
        result = TimezoneService.local_to_utc(date(2026, 10, 19), time(9), NY)
        assert result == datetime(2026, 10, 19, 13, tzinfo=timezone.utc)

    def test_winter_offset(self):
        result = TimezoneService.local_to_utc(date(2026, 12, 7), time(9), NY)
        assert result == datetime(2026, 12, 7, 14, tzinfo=timezone.utc)

    def test_nonexistent_time_is_rejected(self):
        with pytest.raises(ValueError, match="does not exist"):
            TimezoneService.local_to_utc(date(2026, 3, 8), time(2, 30), NY)

    def test_ambiguous_time_resolves_to_first_occurrence(self):
        result = TimezoneService.local_to_utc(date(2026, 11, 1), time(1, 30), NY)
        # First 01:30 is still EDT (UTC-4)
        assert result == datetime(2026, 11, 1, 5, 30, tzinfo=timezone.utc)

    def test_unknown_zone_falls_back_to_default(self):
        result = TimezoneService.local_to_utc(date(2026, 10, 19), time(9), "Mars/Olympus")
        assert result == datetime(2026, 10, 19, 13, tzinfo=timezone.utc)


class TestResolveWallTime:
    def test_gap_time_moves_forward(self):
        result = TimezoneService.resolve_wall_time(date(2026, 3, 8), time(2, 30), NY)
        local = TimezoneService.utc_to_local(result, NY)
        assert (local.hour, local.minute) == (3, 30)

    def test_regular_time_is_unchanged(self):
        regular = TimezoneService.resolve_wall_time(date(2026, 10, 19), time(9), NY)
        assert regular == TimezoneService.local_to_utc(date(2026, 10, 19), time(9), NY)


class TestInstants:
    @pytest.mark.parametrize(
        "value",
        ["2026-10-19T14:00:00Z", "2026-10-19T10:00:00-04:00", "2026-10-19T16:00:00+02:00"],
    )
    def test_parse_instant_normalizes_to_utc(self, value):
        assert TimezoneService.parse_instant(value) == datetime(
            2026, 10, 19, 14, tzinfo=timezone.utc
        )

    def test_parse_instant_rejects_missing_offset(self):
        with pytest.raises(ValueError, match="offset"):
            TimezoneService.parse_instant("2026-10-19T14:00:00")

    def test_parse_instant_rejects_garbage(self):
        with pytest.raises(ValueError):
            TimezoneService.parse_instant("next monday+0100")

    def test_ensure_utc(self):
        aware = datetime(2026, 10, 19, 10, tzinfo=timezone(timedelta(hours=-4)))
        assert TimezoneService.ensure_utc(aware) == datetime(2026, 10, 19, 14, tzinfo=timezone.utc)
        with pytest.raises(ValueError):
            TimezoneService.ensure_utc(datetime(2026, 10, 19, 10))

    def test_local_date_uses_business_zone(self):
        # 02:00 UTC Tuesday is still Monday evening in New York
        instant = datetime(2026, 10, 20, 2, tzinfo=timezone.utc)
        assert TimezoneService.local_date(instant, NY) == date(2026, 10, 19)
