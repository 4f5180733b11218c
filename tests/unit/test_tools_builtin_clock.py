"""Tests for time and timezone tools."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from toolport.tools.builtin.clock import (
    COMMON_TIMEZONES,
    ConvertTimezoneTool,
    FormatTimeTool,
    GetCurrentTimeTool,
    ListTimezonesTool,
    TimeDifferenceTool,
    TimeInputError,
    parse_time,
    relative_description,
    resolve_timezone,
)


class TestHelpers:
    def test_resolve_timezone(self):
        assert resolve_timezone(None) is timezone.utc
        assert resolve_timezone("utc") is timezone.utc
        assert resolve_timezone("Asia/Tokyo") == ZoneInfo("Asia/Tokyo")

    def test_resolve_unknown_timezone(self):
        with pytest.raises(TimeInputError, match="Unknown timezone: Mars/Olympus"):
            resolve_timezone("Mars/Olympus")

    def test_parse_iso_with_z(self):
        assert parse_time("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_parse_naive_uses_given_zone(self):
        tokyo = ZoneInfo("Asia/Tokyo")
        assert parse_time("2024-01-15T10:30:00", tokyo).tzinfo is tokyo

    def test_parse_unix(self):
        assert parse_time("0", allow_unix=True) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_parse_invalid(self):
        with pytest.raises(TimeInputError, match="ISO format"):
            parse_time("yesterday-ish")

    def test_relative_description(self):
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert relative_description(now - timedelta(days=2, hours=3), now) == "2 day(s) ago"
        assert relative_description(now - timedelta(minutes=90), now) == "1 hour(s) ago"
        assert relative_description(now + timedelta(minutes=5), now) == "5 minute(s) in the future"
        assert relative_description(now, now) == "0 second(s) ago"


class TestGetCurrentTime:
    @pytest.mark.asyncio
    async def test_default_iso_utc(self):
        result = await GetCurrentTimeTool().execute(format="iso")
        assert result.text.endswith("Z")
        parsed = datetime.fromisoformat(result.text.replace("Z", "+00:00"))
        assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 60

    @pytest.mark.asyncio
    async def test_unix(self):
        result = await GetCurrentTimeTool().execute(format="unix")
        assert abs(int(result.text) - datetime.now(timezone.utc).timestamp()) < 60

    @pytest.mark.asyncio
    async def test_with_timezone(self):
        result = await GetCurrentTimeTool().execute(timezone="Asia/Kolkata", format="iso")
        assert result.text.endswith("+05:30")

    @pytest.mark.asyncio
    async def test_unknown_timezone(self):
        result = await GetCurrentTimeTool().execute(timezone="Nowhere/City", format="iso")
        assert result.is_error is True
        assert result.text == "Error: Unknown timezone: Nowhere/City"


class TestConvertTimezone:
    @pytest.mark.asyncio
    async def test_convert(self):
        result = await ConvertTimezoneTool().execute(
            time="2024-01-15T10:30:00", fromTimezone="UTC", toTimezone="Asia/Tokyo"
        )
        assert result.text == (
            "From: Monday, January 15, 2024 at 10:30:00 AM UTC (UTC)\n"
            "To: Monday, January 15, 2024 at 07:30:00 PM JST (Asia/Tokyo)"
        )

    @pytest.mark.asyncio
    async def test_invalid_time(self):
        result = await ConvertTimezoneTool().execute(time="garbage", fromTimezone="UTC", toTimezone="UTC")
        assert result.is_error is True


class TestTimeDifference:
    @pytest.mark.asyncio
    async def test_positive(self):
        result = await TimeDifferenceTool().execute(
            startTime="2024-01-01T00:00:00Z", endTime="2024-01-02T01:01:01Z"
        )
        assert result.text == (
            "Time Difference :\n"
            "- Days: 1\n"
            "- Hours: 25\n"
            "- Minutes: 1501\n"
            "- Seconds: 90061\n"
            "- Milliseconds: 90061000"
        )

    @pytest.mark.asyncio
    async def test_negative(self):
        result = await TimeDifferenceTool().execute(
            startTime="2024-01-02T00:00:00Z", endTime="2024-01-01T00:00:00Z"
        )
        assert result.text.startswith("Time Difference (negative) :\n- Days: 1")


class TestFormatTime:
    MOMENT = "2024-01-15T10:30:00Z"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fmt,expected",
        [
            ("iso", "2024-01-15T10:30:00.000Z"),
            ("rfc2822", "Mon, 15 Jan 2024 10:30:00 GMT"),
            ("unix", "1705314600"),
            ("locale", "01/15/2024, 10:30:00 AM"),
        ],
    )
    async def test_formats(self, fmt, expected):
        result = await FormatTimeTool().execute(time=self.MOMENT, format=fmt)
        assert result.text == expected

    @pytest.mark.asyncio
    async def test_unix_input(self):
        result = await FormatTimeTool().execute(time="1705314600", format="iso")
        assert result.text == "2024-01-15T10:30:00.000Z"

    @pytest.mark.asyncio
    async def test_locale_in_timezone(self):
        result = await FormatTimeTool().execute(time=self.MOMENT, format="locale", timezone="Asia/Tokyo")
        assert result.text == "01/15/2024, 07:30:00 PM"

    @pytest.mark.asyncio
    async def test_relative(self):
        result = await FormatTimeTool().execute(time="2000-01-01T00:00:00Z", format="relative")
        assert result.text.endswith("day(s) ago")


class TestListTimezones:
    @pytest.mark.asyncio
    async def test_region(self):
        result = await ListTimezonesTool().execute(region="europe")
        assert result.text.splitlines() == COMMON_TIMEZONES["europe"]

    @pytest.mark.asyncio
    async def test_all(self):
        result = await ListTimezonesTool().execute(region="all")
        zones = result.text.splitlines()
        assert len(zones) == sum(len(z) for z in COMMON_TIMEZONES.values())

    def test_every_listed_zone_resolves(self):
        for zones in COMMON_TIMEZONES.values():
            for name in zones:
                assert resolve_timezone(name) is not None
