"""
Time and timezone tools.

Timezones are IANA names resolved with ``zoneinfo``. Input times are ISO
8601 strings, Unix timestamps (format_time only) or ``now``; a time without
an offset is read in the source timezone, or UTC when none is given.
"""

import logging
from datetime import datetime, timezone, tzinfo
from email.utils import format_datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from toolport.tools.base import Tool
from toolport.tools.models import EnumParam, StringParam, ToolParameter, ToolResult

logger = logging.getLogger(__name__)

COMMON_TIMEZONES: dict[str, list[str]] = {
    "america": [
        "America/New_York",
        "America/Chicago",
        "America/Denver",
        "America/Los_Angeles",
        "America/Toronto",
        "America/Vancouver",
        "America/Sao_Paulo",
        "America/Mexico_City",
    ],
    "europe": [
        "Europe/London",
        "Europe/Paris",
        "Europe/Berlin",
        "Europe/Rome",
        "Europe/Madrid",
        "Europe/Amsterdam",
        "Europe/Moscow",
    ],
    "asia": [
        "Asia/Tokyo",
        "Asia/Shanghai",
        "Asia/Hong_Kong",
        "Asia/Singapore",
        "Asia/Seoul",
        "Asia/Kolkata",
        "Asia/Dubai",
        "Asia/Bangkok",
    ],
    "pacific": [
        "Pacific/Auckland",
        "Australia/Sydney",
        "Pacific/Honolulu",
        "Pacific/Fiji",
    ],
}

LOCALE_FORMAT = "%m/%d/%Y, %I:%M:%S %p"
LONG_FORMAT = "%A, %B %d, %Y at %I:%M:%S %p %Z"


class TimeInputError(ValueError):
    """A time or timezone argument could not be interpreted."""


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up an IANA timezone; None means UTC."""
    if not name:
        return timezone.utc
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimeInputError(f"Unknown timezone: {name}") from e


def parse_time(value: str, tz: tzinfo = timezone.utc, allow_unix: bool = False) -> datetime:
    """
    Parse a user-supplied time.

    Args:
        value: ISO 8601 string, ``now``, or digits (Unix seconds) if allowed
        tz: Timezone for values without an offset
        allow_unix: Accept a bare integer as Unix seconds

    Returns:
        Timezone-aware datetime

    Raises:
        TimeInputError: If the value cannot be parsed
    """
    text = value.strip()
    if text.lower() == "now":
        return datetime.now(tz)
    if allow_unix and text.isdigit():
        return datetime.fromtimestamp(int(text), tz=timezone.utc)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00") if text.endswith("Z") else text)
    except ValueError as e:
        raise TimeInputError("Invalid time format. Please use ISO format (e.g., '2024-01-15T10:30:00').") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def relative_description(moment: datetime, now: Optional[datetime] = None) -> str:
    """Human description of ``moment`` relative to ``now``, e.g. ``3 hour(s) ago``."""
    now = now or datetime.now(timezone.utc)
    delta_seconds = (now - moment).total_seconds()
    direction = "ago" if delta_seconds >= 0 else "in the future"

    seconds = int(abs(delta_seconds))
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    if days > 0:
        return f"{days} day(s) {direction}"
    if hours > 0:
        return f"{hours} hour(s) {direction}"
    if minutes > 0:
        return f"{minutes} minute(s) {direction}"
    return f"{seconds} second(s) {direction}"


def _iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GetCurrentTimeTool(Tool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "get_current_time"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get the current date and time"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(
                name="timezone",
                description="Timezone to display time in (e.g., 'America/New_York', 'UTC'). Defaults to UTC.",
                required=False,
            ),
            EnumParam(
                name="format",
                description="Output format for the time",
                allowed=["iso", "locale", "unix"],
                required=False,
                default="iso",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        fmt: str = kwargs.get("format") or "iso"
        tz_name: Optional[str] = kwargs.get("timezone")
        try:
            tz = resolve_timezone(tz_name)
        except TimeInputError as e:
            return ToolResult.failure(str(e))

        now = datetime.now(tz)
        if fmt == "unix":
            return ToolResult.success(str(int(now.timestamp())))
        if fmt == "locale":
            return ToolResult.success(now.strftime(LOCALE_FORMAT))
        if tz_name:
            return ToolResult.success(now.isoformat(timespec="seconds"))
        return ToolResult.success(_iso_utc(now))


class ConvertTimezoneTool(Tool):
    """Show one instant in two timezones."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "convert_timezone"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Convert time from one timezone to another"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="time", description="Time to convert (ISO format or 'now' for current time)"),
            StringParam(name="fromTimezone", description="Source timezone"),
            StringParam(name="toTimezone", description="Target timezone"),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            source = resolve_timezone(kwargs["fromTimezone"])
            target = resolve_timezone(kwargs["toTimezone"])
            moment = parse_time(kwargs["time"], source)
        except TimeInputError as e:
            return ToolResult.failure(str(e))

        from_time = moment.astimezone(source).strftime(LONG_FORMAT)
        to_time = moment.astimezone(target).strftime(LONG_FORMAT)
        return ToolResult.success(
            f"From: {from_time} ({kwargs['fromTimezone']})\n"
            f"To: {to_time} ({kwargs['toTimezone']})"
        )


class TimeDifferenceTool(Tool):
    """Elapsed time between two instants in several units."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "time_difference"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Calculate the difference between two times"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="startTime", description="Start time (ISO format)"),
            StringParam(name="endTime", description="End time (ISO format or 'now' for current time)"),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            start = parse_time(kwargs["startTime"])
            end = parse_time(kwargs["endTime"])
        except TimeInputError as e:
            return ToolResult.failure(str(e))

        diff_ms = round((end - start).total_seconds() * 1000)
        total = abs(diff_ms)
        sign = "" if diff_ms >= 0 else "(negative) "
        return ToolResult.success(
            f"Time Difference {sign}:\n"
            f"- Days: {total // 86_400_000}\n"
            f"- Hours: {total // 3_600_000}\n"
            f"- Minutes: {total // 60_000}\n"
            f"- Seconds: {total // 1000}\n"
            f"- Milliseconds: {total}"
        )


class FormatTimeTool(Tool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "format_time"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Format a timestamp in various ways"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(
                name="time",
                description="Time to format (ISO format, Unix timestamp, or 'now' for current time)",
            ),
            EnumParam(
                name="format",
                description="Output format",
                allowed=["iso", "rfc2822", "locale", "relative", "unix"],
            ),
            StringParam(name="timezone", description="Timezone to use for formatting", required=False),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        fmt: str = kwargs["format"]
        try:
            tz = resolve_timezone(kwargs.get("timezone"))
            moment = parse_time(kwargs["time"], tz, allow_unix=True)
        except TimeInputError as e:
            return ToolResult.failure(str(e))

        if fmt == "rfc2822":
            return ToolResult.success(format_datetime(moment.astimezone(timezone.utc), usegmt=True))
        if fmt == "unix":
            return ToolResult.success(str(int(moment.timestamp())))
        if fmt == "locale":
            return ToolResult.success(moment.astimezone(tz).strftime(LOCALE_FORMAT))
        if fmt == "relative":
            return ToolResult.success(relative_description(moment))
        return ToolResult.success(_iso_utc(moment))


class ListTimezonesTool(Tool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "list_timezones"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List common timezones"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            EnumParam(
                name="region",
                description="Filter timezones by region",
                allowed=["america", "europe", "asia", "pacific", "all"],
                required=False,
                default="all",
            )
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        region: str = kwargs.get("region") or "all"
        if region == "all":
            zones = [zone for group in COMMON_TIMEZONES.values() for zone in group]
        else:
            zones = COMMON_TIMEZONES[region]
        return ToolResult.success("\n".join(zones))
