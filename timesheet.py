"""Ordered collection of daily time entries."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Iterator

from models import HOURS_PLACES, TimeEntry, fits_hours_places
from utils import parse_date

logger = logging.getLogger(__name__)


def _to_hours(value) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        hours = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return hours if hours.is_finite() else None


def validate(entry_date: str, hours) -> str | None:
    """Return an error message for a new entry, or None if it can be added."""
    if not entry_date or not entry_date.strip():
        return "Date is required"
    try:
        parse_date(entry_date.strip())
    except ValueError:
        return "Date must be YYYY-MM-DD"

    parsed = _to_hours(hours)
    if parsed is None:
        return "Invalid hours value"
    if parsed <= 0:
        return "Hours must be greater than zero"
    if not fits_hours_places(parsed):
        return f"Hours allow at most {HOURS_PLACES} decimal places"
    return None


class TimeEntryStore:
    """Time entries kept sorted by date.

    ``on_change`` is called with the full list after every successful
    mutation so the caller can persist it.
    """

    def __init__(
        self,
        entries: Iterable[TimeEntry] = (),
        on_change: Callable[[list[TimeEntry]], None] | None = None,
    ):
        self._entries: list[TimeEntry] = sorted(entries, key=lambda e: e.date)
        self.on_change = on_change

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TimeEntry]:
        return iter(list(self._entries))

    @property
    def entries(self) -> list[TimeEntry]:
        return list(self._entries)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self.entries)

    def get(self, entry_id: str) -> TimeEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add(self, entry_date: str, hours) -> TimeEntry | None:
        """Add an entry. Returns None without changing anything if input is invalid."""
        error = validate(entry_date, hours)
        if error:
            logger.debug("Rejected entry %r / %r: %s", entry_date, hours, error)
            return None

        entry = TimeEntry(id=uuid.uuid4().hex, date=entry_date.strip(), hours=_to_hours(hours))
        self._entries.append(entry)
        # list.sort is stable so same-day entries keep insertion order
        self._entries.sort(key=lambda e: e.date)
        logger.info("Added %sh on %s", entry.hours, entry.date)
        self._changed()
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove an entry. Returns False if no entry has that id."""
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        logger.info("Deleted entry %s", entry_id)
        self._changed()
        return True

    def update(self, entry_id: str, hours) -> TimeEntry | None:
        """Replace the hours of an entry. The date never changes."""
        parsed = _to_hours(hours)
        if parsed is None or parsed < 0 or not fits_hours_places(parsed):
            return None

        entry = self.get(entry_id)
        if entry is None:
            return None

        entry.hours = parsed
        logger.info("Updated %s to %sh", entry.date, parsed)
        self._changed()
        return entry

    def for_month(self, month: str) -> list[TimeEntry]:
        """Entries whose date starts with the YYYY-MM month."""
        return [e for e in self._entries if e.date.startswith(month)]

    def monthly_hours(self, month: str) -> Decimal:
        return sum((e.hours for e in self.for_month(month)), Decimal("0"))

    def worked_days(self, month: str) -> int:
        """Number of distinct dates with hours logged in the month."""
        return len({e.date for e in self.for_month(month) if e.hours > 0})
