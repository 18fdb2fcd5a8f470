"""Utility functions for month and business-day calculations."""

from __future__ import annotations

import re
from datetime import date, timedelta
from calendar import monthrange

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD date. Raises ValueError otherwise.

    date.fromisoformat alone also accepts basic and week forms like
    20240301 or 2024-W10-5, which would never match a YYYY-MM prefix.
    """
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Invalid date: {value!r}")
    return date.fromisoformat(value)


def current_month(today: date | None = None) -> str:
    """Return the YYYY-MM string for today (or the given date)."""
    return (today or date.today()).strftime("%Y-%m")


def parse_month(month: str) -> tuple[int, int]:
    """Split a YYYY-MM string into (year, month). Raises ValueError if malformed."""
    parts = month.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid month: {month!r}")
    year, mon = int(parts[0]), int(parts[1])
    if not 1 <= mon <= 12:
        raise ValueError(f"Invalid month: {month!r}")
    return year, mon


def shift_month(month: str, delta: int) -> str:
    """Move a YYYY-MM string forward or back by delta months."""
    year, mon = parse_month(month)
    index = year * 12 + (mon - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a YYYY-MM month."""
    year, mon = parse_month(month)
    return date(year, mon, 1), date(year, mon, monthrange(year, mon)[1])


def month_label(month: str) -> str:
    """Human label like '2024年03月' for a YYYY-MM month."""
    year, mon = parse_month(month)
    return f"{year}年{mon:02d}月"


def get_jp_holidays(year: int) -> dict[date, str]:
    """Get Japanese national holidays for a given year."""
    import holidays
    jp_holidays = holidays.JP(years=year)  # type: ignore[attr-defined]
    return {d: name for d, name in jp_holidays.items()}


def get_business_days(start: date, end: date) -> list[date]:
    """Get list of business days (weekdays minus Japanese holidays) in a date range."""
    jp_holidays = get_jp_holidays(start.year)
    if start.year != end.year:
        jp_holidays.update(get_jp_holidays(end.year))

    business_days = []
    current = start
    while current <= end:
        # Monday=0 to Friday=4 are weekdays
        if current.weekday() < 5 and current not in jp_holidays:
            business_days.append(current)
        current += timedelta(days=1)

    return business_days


def remaining_business_days(month: str, today: date | None = None) -> list[date]:
    """Business days in the month from today (inclusive) onwards.

    Past months have none left; future months have all of theirs.
    """
    today = today or date.today()
    start, end = month_bounds(month)
    if today > end:
        return []
    return get_business_days(max(start, today), end)
