"""Appointment endpoints: booking, status changes, check-in."""
from datetime import date as date_type
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from counsel_booking.errors import (
    BackendError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from counsel_booking.http_client import BackendClient
from counsel_booking.logging_config import get_logger
from counsel_booking.models import (
    Appointment,
    AppointmentRequest,
    AppointmentStatus,
    Consultant,
    MemberAppointment,
    ScheduleEntry,
    parse_many,
    require_positive_id,
)
from counsel_booking.timeparse import normalize_time

logger = get_logger(__name__)

T = TypeVar("T")

CHECK_IN_MESSAGES = {
    400: "Check-in is not available at this time. Please check the appointment time.",
    404: "Appointment not found.",
    409: "Appointment has already been checked in.",
}


class AppointmentService:
    """Creates and manages appointments."""

    def __init__(self, client: BackendClient):
        self.client = client

    def create_appointment(
        self,
        slot_id: Any,
        schedule_id: Any,
        consultant_id: Any,
        appointment_date: Union[str, date_type, None],
        description: Optional[str] = "",
    ) -> Any:
        """
        Book a schedule entry (`POST appointment`).

        All identifiers must be positive integers and the date non-empty;
        otherwise ValidationError is raised and nothing is sent.

        Raises:
            ValidationError: Invalid or missing field
            ConflictError: The backend says the slot was taken meanwhile
        """
        request = AppointmentRequest.build(
            slotId=slot_id,
            scheduleId=schedule_id,
            consultantId=consultant_id,
            appointmentDate=appointment_date,
            description=description,
        )
        result = self.client.post("appointment", json=request.payload())
        logger.info(
            "appointment_created",
            schedule_id=request.schedule_id,
            consultant_id=request.consultant_id,
            date=request.appointment_date,
        )
        return result

    def update_appointment(self, appointment_id: Any, data: Dict[str, Any]) -> Any:
        return self.client.put(f"appointments/{appointment_id}", json=data)

    def delete_appointment(self, appointment_id: Any) -> Any:
        return self.client.delete(f"appointments/{appointment_id}")

    def update_appointment_status(
        self,
        appointment_id: Any,
        status: Union[str, AppointmentStatus],
    ) -> Any:
        """
        Move an appointment to BOOKED, CONSULTED or CANCELLED.

        Raises:
            ValidationError: Bad ID or status outside the whitelist
        """
        appointment_id = require_positive_id(appointment_id, "appointment ID")
        try:
            status = AppointmentStatus(status)
        except ValueError:
            raise ValidationError("Invalid status") from None

        return self.client.put(
            f"appointment/{appointment_id}/status",
            params={"status": status.value},
        )

    def get_appointments(self) -> List[Appointment]:
        return parse_many(Appointment.from_api, self.client.get("appointment"), "appointment")

    def get_member_appointments(self, account_id: Any) -> List[MemberAppointment]:
        """
        Appointments of one account, joined with schedule and consultant.

        Schedules and consultants are fetched in full and matched locally;
        a missing or malformed match leaves the nested field as None.
        """
        raws = self.client.get(f"appointment/account/{account_id}") or []
        missing = [
            raw.get("id") for raw in raws
            if isinstance(raw, Mapping) and not raw.get("scheduleId")
        ]
        if missing:
            logger.warning("appointments_without_schedule", ids=missing)

        schedules = _index_by_id(self.client.get("schedules"), "schedule")
        consultants = _index_by_id(self.client.get("consultants"), "consultant")

        def build(raw: Mapping[str, Any]) -> MemberAppointment:
            schedule_raw = schedules.get(raw.get("scheduleId"))
            consultant_raw = consultants.get(raw.get("consultantId"))
            if schedule_raw is None:
                logger.warning(
                    "appointment_schedule_not_found",
                    appointment_id=raw.get("id"),
                    schedule_id=raw.get("scheduleId"),
                )
            schedule = _related(ScheduleEntry.from_api, schedule_raw, "schedule", raw.get("id"))
            consultant = _related(
                lambda record: Consultant.from_api(record, record.get("account")),
                consultant_raw,
                "consultant",
                raw.get("id"),
            )
            return MemberAppointment(
                **Appointment.api_fields(raw),
                schedule=schedule,
                slot_label=_slot_label(schedule_raw) if schedule else None,
                consultant=consultant,
            )

        return parse_many(build, raws, "member_appointment")

    def check_in(self, appointment_id: Any) -> Any:
        """
        Mark attendance (`POST appointment/{id}/check-in`).

        Raises:
            BackendError: 400, outside the check-in window
            NotFoundError: 404
            ConflictError: 409, already checked in
        """
        try:
            return self.client.post(f"appointment/{appointment_id}/check-in")
        except BackendError as exc:
            message = CHECK_IN_MESSAGES.get(exc.status_code)
            if message is None:
                raise
            error_class = {404: NotFoundError, 409: ConflictError}.get(exc.status_code, BackendError)
            raise error_class(message, status_code=exc.status_code, payload=exc.payload) from exc


def _slot_label(schedule_raw: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not schedule_raw or not isinstance(schedule_raw.get("slot"), Mapping):
        return None
    slot = schedule_raw["slot"]
    if slot.get("label"):
        return slot["label"]
    return f"{normalize_time(slot.get('slotStart'))} - {normalize_time(slot.get('slotEnd'))}"


def _index_by_id(raws: Any, kind: str) -> Dict[Any, Mapping[str, Any]]:
    index = {}
    for raw in raws or []:
        if not isinstance(raw, Mapping):
            logger.warning("skipped_malformed_record", kind=kind, id=None, error="not an object")
            continue
        index[raw.get("id")] = raw
    return index


def _related(
    build: Callable[[Mapping[str, Any]], T],
    raw: Optional[Mapping[str, Any]],
    kind: str,
    appointment_id: Any,
) -> Optional[T]:
    # A bad joined record blanks the nested field; the appointment itself stays.
    if not raw:
        return None
    try:
        return build(raw)
    except (PydanticValidationError, TypeError, AttributeError, ValueError) as exc:
        logger.warning(
            "skipped_malformed_related_record",
            kind=kind,
            id=raw.get("id"),
            appointment_id=appointment_id,
            error=str(exc),
        )
        return None
