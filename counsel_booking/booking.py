"""Booking and slot-registration flows.

Both flows follow the same shape: validate locally, send one write, then
re-fetch schedules to get ground truth. No booked flag is ever flipped
locally. The local bookable check is advisory; two clients can race for the
same entry and the backend decides. A rejection is returned as a failed
result, not raised.
"""
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from counsel_booking.availability import (
    BookingView,
    build_booking_view,
    check_selectable,
    compute_booked_slot_ids,
)
from counsel_booking.errors import BookingError, ValidationError
from counsel_booking.logging_config import get_logger
from counsel_booking.models import ScheduleEntry
from counsel_booking.services import AppointmentService, ScheduleService

logger = get_logger(__name__)


@dataclass
class BookingResult:
    """Outcome of a booking attempt."""
    success: bool
    appointment: Any = None
    error: Optional[BookingError] = None
    schedules: List[ScheduleEntry] = field(default_factory=list)


@dataclass
class RegistrationResult:
    """Outcome of a staff slot registration."""
    success: bool
    registered: Tuple[int, ...] = ()
    error: Optional[BookingError] = None
    schedules: List[ScheduleEntry] = field(default_factory=list)


class BookingFlow:
    """Client-side booking for one member."""

    def __init__(
        self,
        schedules: ScheduleService,
        appointments: AppointmentService,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            schedules: Schedule service used to load and re-fetch entries
            appointments: Appointment service used to submit the booking
            clock: Source of "now" (injectable for tests)
        """
        self.schedules = schedules
        self.appointments = appointments
        self.clock = clock

    def load(self, consultant_id: Any) -> BookingView:
        """Future schedule of a consultant, grouped by date."""
        entries = self.schedules.get_consultant_schedules(consultant_id)
        return build_booking_view(entries, self.clock())

    def select(self, entry: ScheduleEntry) -> ScheduleEntry:
        """
        Accept an entry as the member's choice.

        Raises:
            ValidationError: The entry is in the past or already booked
        """
        return check_selectable(entry, self.clock())

    def submit(
        self,
        entry: ScheduleEntry,
        consultant_id: Any,
        description: str = "",
    ) -> BookingResult:
        """
        Book `entry` with the consultant.

        Validation failures, network errors and backend rejections all come
        back as BookingResult(success=False, error=...).
        """
        try:
            check_selectable(entry, self.clock())
            appointment = self.appointments.create_appointment(
                slot_id=entry.slot_id,
                schedule_id=entry.id,
                consultant_id=consultant_id,
                appointment_date=entry.date,
                description=description,
            )
        except BookingError as exc:
            logger.warning(
                "booking_failed",
                schedule_id=entry.id,
                kind=exc.kind.value,
                message=exc.message,
            )
            return BookingResult(success=False, error=exc)

        logger.info("booking_succeeded", schedule_id=entry.id)
        return BookingResult(
            success=True,
            appointment=appointment,
            schedules=_refetch(lambda: self.schedules.get_consultant_schedules(consultant_id)),
        )


class SlotRegistrationFlow:
    """Staff registration of consultant working slots."""

    def __init__(self, schedules: ScheduleService):
        self.schedules = schedules

    def register(
        self,
        consultant_id: Any,
        date: Union[str, date_type, None],
        slot_ids: Iterable[Any],
        known_entries: Optional[Iterable[ScheduleEntry]] = None,
    ) -> RegistrationResult:
        """
        Register `slot_ids` for a consultant on a date.

        Args:
            consultant_id: Consultant to register
            date: Target date
            slot_ids: Selected slot identifiers
            known_entries: Schedules already on screen; fetched when omitted
        """
        slot_ids = tuple(slot_ids)
        try:
            if not date or consultant_id is None or not slot_ids:
                raise ValidationError(
                    "Please choose a consultant, a date and at least one time slot."
                )

            entries = (
                list(known_entries)
                if known_entries is not None
                else self.schedules.get_schedules()
            )
            taken = compute_booked_slot_ids(entries, consultant_id, date)
            clashing = [slot_id for slot_id in slot_ids if str(slot_id) in taken]
            if clashing:
                raise ValidationError(
                    "Slot(s) already registered: " + ", ".join(str(s) for s in clashing)
                )

            self.schedules.register_schedule(date, consultant_id, slot_ids)
        except BookingError as exc:
            logger.warning(
                "slot_registration_failed",
                consultant_id=consultant_id,
                kind=exc.kind.value,
                message=exc.message,
            )
            return RegistrationResult(success=False, error=exc)

        return RegistrationResult(
            success=True,
            registered=tuple(int(slot_id) for slot_id in slot_ids),
            schedules=_refetch(self.schedules.get_schedules),
        )


def _refetch(fetch: Callable[[], List[ScheduleEntry]]) -> List[ScheduleEntry]:
    # The write already succeeded; a failed re-fetch only leaves the list stale.
    try:
        return fetch()
    except BookingError as exc:
        logger.warning("schedule_refresh_failed", message=exc.message)
        return []
