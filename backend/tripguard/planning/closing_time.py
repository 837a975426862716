"""Today's closing instant from a venue's opening hours.

Opening hours arrive in the venue's local wall-clock time. The resolved
instant is composed on the venue's local calendar date for "today" and keeps
the venue's UTC offset; it is never converted to UTC.
"""

import re
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

DEFAULT_UTC_OFFSET_MINUTES = 540  # JST when the place reports no offset

_SEPARATORS = r"[~～\-–—]"

_RANGE_24H = re.compile(rf"(\d{{1,2}}):(\d{{2}})\s*{_SEPARATORS}\s*(\d{{1,2}}):(\d{{2}})")
_RANGE_12H = re.compile(
    rf"\d{{1,2}}:\d{{2}}\s*(?:AM|PM)\s*{_SEPARATORS}\s*(\d{{1,2}}):(\d{{2}})\s*(AM|PM)",
    re.IGNORECASE,
)

# 0 = Sunday .. 6 = Saturday
_DAY_NAMES: dict[int, tuple[str, ...]] = {
    0: ("sunday", "sun", "日曜日"),
    1: ("monday", "mon", "月曜日"),
    2: ("tuesday", "tue", "火曜日"),
    3: ("wednesday", "wed", "水曜日"),
    4: ("thursday", "thu", "木曜日"),
    5: ("friday", "fri", "金曜日"),
    6: ("saturday", "sat", "土曜日"),
}

_DAY_OF_WEEK = {
    "SUNDAY": 0,
    "MONDAY": 1,
    "TUESDAY": 2,
    "WEDNESDAY": 3,
    "THURSDAY": 4,
    "FRIDAY": 5,
    "SATURDAY": 6,
}


def local_day_of_week(now: datetime, utc_offset_minutes: int) -> int:
    """Weekday at the venue (0=Sunday)."""
    local = now.astimezone(UTC) + timedelta(minutes=utc_offset_minutes)
    return local.isoweekday() % 7


def compose_local_instant(
    now: datetime, hour: int, minute: int, utc_offset_minutes: int
) -> datetime:
    """hour:minute on the venue's local calendar date for `now`, offset attached."""
    tz = timezone(timedelta(minutes=utc_offset_minutes))
    local_date = now.astimezone(tz).date()
    return datetime(local_date.year, local_date.month, local_date.day, hour, minute, tzinfo=tz)


def parse_closing_clock(description: str) -> tuple[int, int] | None:
    """Closing (hour, minute) from a free-text range such as "Mon: 10:00–21:00".

    The second time of the range is the closing time. Returns None when no
    range is found or the hour is out of range.
    """
    match = _RANGE_24H.search(description)
    if match:
        hour, minute = int(match.group(3)), int(match.group(4))
    else:
        match = _RANGE_12H.search(description)
        if not match:
            return None
        hour, minute = int(match.group(1)), int(match.group(2))
        meridiem = match.group(3).upper()
        if meridiem == "PM" and hour < 12:
            hour += 12
        elif meridiem == "AM" and hour == 12:
            hour = 0

    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        return None
    return hour, minute


def _description_for_day(descriptions: list[Any], day: int) -> str | None:
    # Prefer an entry labelled with today's name; fall back to positional lookup
    names = _DAY_NAMES[day]
    for desc in descriptions:
        if not isinstance(desc, str):
            continue
        label = desc.split(":", 1)[0].strip().lower()
        if label in names:
            return desc

    if day < len(descriptions) and isinstance(descriptions[day], str):
        return descriptions[day]
    return None


def _period_open_day(period: dict[str, Any]) -> int:
    open_ = period.get("open") or {}
    day = open_.get("day", open_.get("dayOfWeek"))
    if isinstance(day, int):
        return day
    if day is None:
        return -1
    return _DAY_OF_WEEK.get(str(day).upper(), -1)


def resolve_closing_time(
    opening_hours: dict[str, Any] | None,
    utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve today's closing instant from an opening-hours payload.

    Args:
        opening_hours: Payload with optional `weekdayDescriptions` (free text)
            and `periods` (structured open/close day, hour, minute)
        utc_offset_minutes: Venue offset from UTC
        now: Reference instant (defaults to current time)

    Returns:
        Closing instant with the venue offset, or None if unavailable
    """
    if not opening_hours:
        return None

    if now is None:
        now = datetime.now(UTC)

    today = local_day_of_week(now, utc_offset_minutes)

    descriptions = opening_hours.get("weekdayDescriptions") or []
    desc = _description_for_day(descriptions, today) if descriptions else None
    if desc:
        clock = parse_closing_clock(desc)
        if clock:
            return compose_local_instant(now, clock[0], clock[1], utc_offset_minutes)

    for period in opening_hours.get("periods") or []:
        close = period.get("close") or {}
        if _period_open_day(period) == today and close.get("hour") is not None:
            return compose_local_instant(
                now, int(close["hour"]), int(close.get("minute") or 0), utc_offset_minutes
            )

    return None


def resolve_place_closing_time(
    place: dict[str, Any],
    default_utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
    now: datetime | None = None,
) -> datetime | None:
    """Closing instant for a place-detail payload (current hours, then regular)."""
    offset = place.get("utcOffsetMinutes")
    if offset is None:
        offset = default_utc_offset_minutes

    return resolve_closing_time(
        place.get("currentOpeningHours"), offset, now
    ) or resolve_closing_time(place.get("regularOpeningHours"), offset, now)
