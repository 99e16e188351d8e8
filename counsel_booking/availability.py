"""Availability reconciliation for consultant schedules.

Pure functions over already-fetched ScheduleEntry records:
- Drop past windows relative to a caller-supplied "now"
- Group remaining entries by calendar date
- Decide whether a single entry may be booked
- Collect booked slot IDs for the staff registration grid

Nothing here talks to the network or mutates records. Dates are compared as
"YYYY-MM-DD" strings, never as instants, so no timezone conversion happens.
"""
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from counsel_booking.errors import ValidationError
from counsel_booking.models import ScheduleEntry, Slot
from counsel_booking.timeparse import time_to_minutes

DateLike = Union[str, date_type]


def _date_key(value: DateLike) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date_type):
        return value.isoformat()
    return str(value)


def _now_parts(now: datetime) -> Tuple[str, int]:
    return now.date().isoformat(), now.hour * 60 + now.minute


def is_future(entry: ScheduleEntry, now: datetime) -> bool:
    """
    True if the entry starts strictly after `now`.

    Future dates always qualify. On today's date the slot start must be later
    than now's time of day; an entry without a usable start time cannot be
    matched against now and is treated as not selectable today.
    """
    today, current_minutes = _now_parts(now)

    if entry.date > today:
        return True
    if entry.date < today:
        return False

    start_minutes = time_to_minutes(entry.slot_start)
    if start_minutes is None:
        return False
    return start_minutes > current_minutes


def filter_future_schedules(
    entries: Iterable[ScheduleEntry],
    now: datetime,
) -> List[ScheduleEntry]:
    """Keep entries that start after `now`, in their original order."""
    return [entry for entry in entries if is_future(entry, now)]


def group_by_date(entries: Iterable[ScheduleEntry]) -> Dict[str, List[ScheduleEntry]]:
    """
    Partition entries by date string.

    Keys appear in first-seen order and each list keeps insertion order.
    Use sorted_dates() to walk the groups chronologically.
    """
    grouped: Dict[str, List[ScheduleEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.date, []).append(entry)
    return grouped


def sorted_dates(groups: Dict[str, Any]) -> List[str]:
    """Group keys in ascending calendar order."""
    return sorted(groups, key=date_type.fromisoformat)


def is_bookable(entry: ScheduleEntry, now: datetime) -> bool:
    """Single gate for selection and submit: unbooked and strictly future."""
    if entry.booked:
        return False
    return is_future(entry, now)


def check_selectable(entry: ScheduleEntry, now: datetime) -> ScheduleEntry:
    """
    Validate a candidate selection before it is submitted.

    Returns:
        The entry, unchanged

    Raises:
        ValidationError: The slot is in the past or already booked
    """
    if not is_future(entry, now):
        raise ValidationError(
            "Cannot book a time slot in the past. Please choose another slot."
        )
    if entry.booked:
        raise ValidationError(
            f"The {entry.time_range} slot on {entry.date} is already booked. "
            "Please choose another slot."
        )
    return entry


def entries_for_consultant(
    entries: Iterable[ScheduleEntry],
    consultant_id: Any,
) -> List[ScheduleEntry]:
    """Entries belonging to one consultant; IDs compared as strings."""
    wanted = str(consultant_id)
    return [entry for entry in entries if str(entry.consultant_id) == wanted]


def compute_booked_slot_ids(
    entries: Iterable[ScheduleEntry],
    consultant_id: Any,
    date: DateLike,
) -> Set[str]:
    """
    Slot IDs already booked for a consultant on a date.

    Example:
        Entries for consultant 5 on "2024-01-01" with slot 7 booked and
        slot 8 free give {"7"}.
    """
    if consultant_id is None or date is None:
        return set()

    wanted_consultant = str(consultant_id)
    wanted_date = _date_key(date)
    return {
        str(entry.slot_id)
        for entry in entries
        if entry.booked
        and entry.slot_id is not None
        and entry.date == wanted_date
        and str(entry.consultant_id) == wanted_consultant
    }


def complete_entries(entries: Iterable[ScheduleEntry]) -> List[ScheduleEntry]:
    """Entries with a slot ID and both slot times (staff schedule table)."""
    return [
        entry for entry in entries
        if entry.slot_id is not None and entry.slot_start and entry.slot_end
    ]


@dataclass(frozen=True)
class SlotOption:
    """A slot as offered in the staff registration grid."""
    slot: Slot
    booked: bool


def slot_availability(
    slots: Sequence[Slot],
    entries: Iterable[ScheduleEntry],
    consultant_id: Any,
    date: DateLike,
) -> List[SlotOption]:
    """Every slot paired with whether it is booked for consultant/date."""
    booked_ids = compute_booked_slot_ids(entries, consultant_id, date)
    return [SlotOption(slot=slot, booked=str(slot.id) in booked_ids) for slot in slots]


def toggle_slot_selection(
    selected: Iterable[Any],
    slot_id: Any,
    booked_ids: Set[str],
) -> Tuple[Any, ...]:
    """
    Add or remove a slot from a staff selection.

    Returns:
        New selection tuple (the input is not modified)

    Raises:
        ValidationError: The slot is already booked
    """
    wanted = str(slot_id)
    if wanted in booked_ids:
        raise ValidationError("This slot is already registered.")

    current = tuple(selected)
    if any(str(item) == wanted for item in current):
        return tuple(item for item in current if str(item) != wanted)
    return current + (slot_id,)


@dataclass(frozen=True)
class DayAvailability:
    """Entries of one date, with a bookable flag per entry."""
    date: str
    entries: Tuple[ScheduleEntry, ...]
    bookable: FrozenSet[str]

    def is_bookable(self, entry: ScheduleEntry) -> bool:
        return str(entry.id) in self.bookable


@dataclass(frozen=True)
class BookingView:
    """Future schedule of one consultant, grouped by ascending date."""
    days: Tuple[DayAvailability, ...]
    generated_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.days

    def find(self, schedule_id: Any) -> Optional[ScheduleEntry]:
        wanted = str(schedule_id)
        for day in self.days:
            for entry in day.entries:
                if str(entry.id) == wanted:
                    return entry
        return None


def build_booking_view(entries: Iterable[ScheduleEntry], now: datetime) -> BookingView:
    """Filter, group and sort entries for the booking page."""
    groups = group_by_date(filter_future_schedules(entries, now))
    days = tuple(
        DayAvailability(
            date=day,
            entries=tuple(groups[day]),
            bookable=frozenset(
                str(entry.id) for entry in groups[day] if is_bookable(entry, now)
            ),
        )
        for day in sorted_dates(groups)
    )
    return BookingView(days=days, generated_at=now)
