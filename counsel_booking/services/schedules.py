"""Schedules and slots: what consultants offer and what is taken."""
from datetime import date as date_type
from typing import Any, Iterable, List, Union

from counsel_booking.errors import NotFoundError
from counsel_booking.http_client import BackendClient
from counsel_booking.logging_config import get_logger
from counsel_booking.models import (
    ScheduleEntry,
    ScheduleRegistration,
    Slot,
    parse_many,
    parse_schedule_entries,
    require_positive_id,
)

logger = get_logger(__name__)


class ScheduleService:
    """Schedule entries (consultant availability) and slot definitions."""

    def __init__(self, client: BackendClient):
        self.client = client

    def get_schedules(self) -> List[ScheduleEntry]:
        entries = parse_schedule_entries(self.client.get("schedules"))
        logger.debug("schedules_loaded", count=len(entries))
        return entries

    def get_schedule(self, schedule_id: Any) -> ScheduleEntry:
        raw = self.client.get(f"schedules/{schedule_id}")
        if not raw:
            raise NotFoundError("Schedule not found")
        return ScheduleEntry.from_api(raw)

    def get_consultant_schedules(self, consultant_id: Any) -> List[ScheduleEntry]:
        """
        Schedule entries of one consultant.

        Raises:
            ValidationError: consultant_id is not a positive integer
        """
        consultant_id = require_positive_id(consultant_id, "consultant ID")
        raws = self.client.get(f"schedules/consultant/{consultant_id}") or []
        for raw in raws:
            if isinstance(raw, dict) and not raw.get("slot"):
                logger.warning("schedule_without_slot", id=raw.get("id"))
        return parse_schedule_entries(raws)

    def get_slots(self) -> List[Slot]:
        return parse_many(Slot.from_api, self.client.get("slot"), "slot")

    def create_slot(self, slot_data: dict) -> Any:
        return self.client.post("slot", json=slot_data)

    def register_schedule(
        self,
        date: Union[str, date_type],
        consultant_id: Any,
        slot_ids: Iterable[Any],
    ) -> Any:
        """
        Register slots for a consultant on a date (`POST slot/register`).

        Raises:
            ValidationError: Bad date, consultant ID or empty slot list
        """
        registration = ScheduleRegistration.build(
            date=date,
            consultantId=consultant_id,
            slotIds=list(slot_ids),
        )
        result = self.client.post("slot/register", json=registration.payload())
        logger.info(
            "schedule_registered",
            consultant_id=registration.consultant_id,
            date=registration.date,
            slots=len(registration.slot_ids),
        )
        return result
