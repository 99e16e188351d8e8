"""Pydantic models for backend records and outgoing payloads.

Raw backend JSON enters the package only through the from_api constructors
below. That is where slot times are normalized and the booked-status
encoding (0 = booked) is inverted, exactly once.
"""
import re
from datetime import date as date_type
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from counsel_booking import config
from counsel_booking.errors import ValidationError
from counsel_booking.logging_config import get_logger
from counsel_booking.timeparse import normalize_time

logger = get_logger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Identifier = Union[int, str]
T = TypeVar("T")


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states accepted by the backend."""
    BOOKED = "BOOKED"
    CONSULTED = "CONSULTED"
    CANCELLED = "CANCELLED"


def parse_booked_status(raw: Any) -> bool:
    """
    Translate the backend's bookedStatus into "is booked".

    The backend sends 0 for a booked schedule and 1 (or anything else) for a
    free one. Booleans are not the numeric 0 and count as free.
    """
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return False
    return raw == 0


def positive_int(value: Any) -> int:
    """Coerce an identifier to a positive int or raise ValueError."""
    if isinstance(value, bool):
        raise ValueError("must be a positive integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be a positive integer")
        value = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError("must be a positive integer")
        value = int(text)
    elif not isinstance(value, int):
        raise ValueError("must be a positive integer")
    if value <= 0:
        raise ValueError("must be a positive integer")
    return value


def require_positive_id(value: Any, label: str) -> int:
    """Validate an identifier before it is put in a URL."""
    try:
        return positive_int(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}") from None


def iso_date(value: Any) -> str:
    """Accept a date or a "YYYY-MM-DD" string, return the string."""
    if isinstance(value, date_type):
        return value.isoformat()
    if not isinstance(value, str) or not ISO_DATE.match(value):
        raise ValueError("expected a YYYY-MM-DD date")
    date_type.fromisoformat(value)
    return value


def split_list(raw: Any) -> List[str]:
    """Split a comma-separated backend field into trimmed, non-empty items."""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [str(item).strip() for item in raw if str(item).strip()]


def parse_many(
    build: Callable[[Any], T],
    raws: Optional[Iterable[Any]],
    kind: str,
) -> List[T]:
    """
    Build records one by one, skipping the ones that do not parse.

    One bad record must not hide the rest of a listing, so failures are
    logged and dropped. Order is preserved.
    """
    records = []
    for raw in raws or []:
        try:
            records.append(build(raw))
        except (PydanticValidationError, TypeError, AttributeError, ValueError) as exc:
            record_id = raw.get("id") if isinstance(raw, Mapping) else None
            logger.warning("skipped_malformed_record", kind=kind, id=record_id, error=str(exc))
    return records


class Slot(BaseModel):
    """Named daily time window (reference data owned by the backend)."""
    model_config = ConfigDict(frozen=True)

    id: Identifier
    start: Optional[str] = None
    end: Optional[str] = None
    label: str = ""

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "Slot":
        start = normalize_time(raw.get("slotStart"))
        end = normalize_time(raw.get("slotEnd"))
        label = raw.get("label") or f"{start or '--:--'} - {end or '--:--'}"
        return cls(id=raw.get("id"), start=start, end=end, label=label)


class ScheduleEntry(BaseModel):
    """One consultant's availability on one date for one slot."""
    model_config = ConfigDict(frozen=True)

    id: Identifier
    date: str
    slot_id: Optional[Identifier] = None
    consultant_id: Optional[Identifier] = None
    booked: bool = False
    recurrence: Optional[Any] = None
    slot_start: Optional[str] = None
    slot_end: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, value):
        return iso_date(value)

    @property
    def time_range(self) -> str:
        return f"{self.slot_start or '--:--'} - {self.slot_end or '--:--'}"

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "ScheduleEntry":
        if "bookedStatus" not in raw:
            logger.warning("schedule_missing_booked_status", id=raw.get("id"))

        slot = raw.get("slot")
        if not isinstance(slot, Mapping):
            slot = {}

        return cls(
            id=raw.get("id"),
            date=raw.get("date"),
            slot_id=raw.get("slotId"),
            consultant_id=raw.get("consultantId"),
            booked=parse_booked_status(raw.get("bookedStatus")),
            recurrence=raw.get("recurrence"),
            slot_start=normalize_time(slot.get("slotStart")),
            slot_end=normalize_time(slot.get("slotEnd")),
        )


def parse_schedule_entries(raws: Optional[Iterable[Any]]) -> List[ScheduleEntry]:
    return parse_many(ScheduleEntry.from_api, raws, "schedule")


class Consultant(BaseModel):
    """Consultant profile merged with its account record."""
    model_config = ConfigDict(frozen=True)

    id: Optional[Identifier] = None
    consultant_id: Optional[Identifier] = None
    name: str = config.DEFAULT_TEXT
    email: str = ""
    phone: str = ""
    avatar: str = ""
    address: str = ""
    gender: str = ""
    date_of_birth: Optional[Any] = None
    status: str = "ACTIVE"
    bio: str = ""
    consultations: int = 0
    degree_level: str = config.DEFAULT_TEXT
    experience: str = config.DEFAULT_TEXT
    field_of_study: str = config.DEFAULT_TEXT
    organization: str = config.DEFAULT_TEXT
    rating: float = config.DEFAULT_RATING
    specialties: List[str] = Field(default_factory=list)
    issued_date: Optional[Any] = None
    expiry_date: Optional[Any] = None

    @classmethod
    def from_api(
        cls,
        consultant: Mapping[str, Any],
        account: Optional[Mapping[str, Any]] = None,
    ) -> "Consultant":
        """
        Merge a `consultants` record with its `account/{id}` record.

        Account fields win; consultant fields fill the gaps. Without an
        account, the consultant record alone is used.
        """
        account = account or {}
        display_name = consultant.get("consultantName") or ""
        return cls(
            id=account.get("id", consultant.get("accountId")),
            consultant_id=consultant.get("id"),
            name=account.get("name") or display_name or config.DEFAULT_TEXT,
            email=account.get("email") or "",
            phone=account.get("phone") or "",
            avatar=account.get("avatar") or display_name[:1] or "C",
            address=account.get("address") or "",
            gender=account.get("gender") or "",
            date_of_birth=account.get("dateOfBirth"),
            status=account.get("status") or "ACTIVE",
            bio=consultant.get("bio") or "",
            consultations=consultant.get("consultations") or 0,
            degree_level=consultant.get("degreeLevel") or config.DEFAULT_TEXT,
            experience=consultant.get("experience") or config.DEFAULT_TEXT,
            field_of_study=consultant.get("fieldOfStudy") or config.DEFAULT_TEXT,
            organization=consultant.get("organization") or config.DEFAULT_TEXT,
            rating=consultant.get("rating") or config.DEFAULT_RATING,
            specialties=split_list(consultant.get("specialities")) or [config.DEFAULT_SPECIALTY],
            issued_date=consultant.get("issuedDate"),
            expiry_date=consultant.get("expiryDate"),
        )


class Appointment(BaseModel):
    """An account's claim on one schedule entry."""
    model_config = ConfigDict(frozen=True)

    id: Identifier
    created_at: Optional[Any] = None
    description: str = ""
    status: str = AppointmentStatus.BOOKED.value
    account_id: Optional[Identifier] = None
    account_name: str = config.DEFAULT_TEXT
    consultant_id: Optional[Identifier] = None
    consultant_name: str = config.DEFAULT_TEXT
    meeting_link: Optional[str] = None
    checked_in: bool = False
    appointment_date: Optional[str] = None
    schedule_id: Optional[Identifier] = None

    @classmethod
    def api_fields(cls, raw: Mapping[str, Any]) -> dict:
        return dict(
            id=raw.get("id"),
            created_at=raw.get("createAt"),
            description=raw.get("description") or "",
            status=raw.get("status") or AppointmentStatus.BOOKED.value,
            account_id=raw.get("accountId"),
            account_name=raw.get("accountName") or config.DEFAULT_TEXT,
            consultant_id=raw.get("consultantId"),
            consultant_name=raw.get("consultantName") or config.DEFAULT_TEXT,
            meeting_link=raw.get("meetingLink") or None,
            checked_in=bool(raw.get("checkedIn")),
            appointment_date=raw.get("appointmentDate"),
            schedule_id=raw.get("scheduleId"),
        )

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "Appointment":
        return cls(**cls.api_fields(raw))


class MemberAppointment(Appointment):
    """Appointment joined with its schedule entry and consultant."""

    schedule: Optional[ScheduleEntry] = None
    slot_label: Optional[str] = None
    consultant: Optional[Consultant] = None


class BlogAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    role: str = "Expert"
    avatar: str = "A"
    bio: str = ""


class Blog(BaseModel):
    """Blog post as shown to readers and staff."""
    model_config = ConfigDict(frozen=True)

    id: Identifier
    title: str = ""
    description: str = ""
    content: str = ""
    category: str = ""
    author: BlogAuthor = Field(default_factory=BlogAuthor)
    read_time: str = config.DEFAULT_READ_TIME
    views: str = config.DEFAULT_VIEWS
    date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "Blog":
        author = raw.get("author") or ""
        category = raw.get("category") or ""
        return cls(
            id=raw.get("id"),
            title=raw.get("title") or "",
            description=raw.get("description") or "",
            content=raw.get("content") or "",
            category=category,
            author=BlogAuthor(
                name=author,
                avatar=author[:1].upper() or "A",
                bio=f"Expert in {category.lower() or 'counseling'}",
            ),
            read_time=raw.get("readTime") or config.DEFAULT_READ_TIME,
            views=str(raw.get("views") or config.DEFAULT_VIEWS),
            date=raw.get("date") or date_type.today().isoformat(),
            tags=split_list(raw.get("tags")),
        )


def _validation_message(exc: PydanticValidationError, labels: Mapping[str, str]) -> str:
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error.get("loc") else "request"
    return labels.get(field, f"Invalid {field}")


class AppointmentRequest(BaseModel):
    """Body of `POST appointment`."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slot_id: int = Field(alias="slotId")
    schedule_id: int = Field(alias="scheduleId")
    consultant_id: int = Field(alias="consultantId")
    appointment_date: str = Field(alias="appointmentDate", min_length=1)
    description: str = ""

    REQUIRED: ClassVar[Tuple[str, ...]] = ("slotId", "scheduleId", "consultantId", "appointmentDate")
    LABELS: ClassVar[Dict[str, str]] = {
        "slotId": "Invalid slot ID",
        "scheduleId": "Invalid schedule ID",
        "consultantId": "Invalid consultant ID",
        "appointmentDate": "Invalid appointment date",
    }

    @field_validator("slot_id", "schedule_id", "consultant_id", mode="before")
    @classmethod
    def check_ids(cls, value):
        return positive_int(value)

    @field_validator("appointment_date", mode="before")
    @classmethod
    def check_date(cls, value):
        if isinstance(value, date_type):
            return value.isoformat()
        return value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, value):
        return value or ""

    @classmethod
    def build(cls, **fields: Any) -> "AppointmentRequest":
        """
        Validate booking fields (camelCase keys) before anything is sent.

        Raises:
            ValidationError: A field is missing or not a positive integer
        """
        for name in cls.REQUIRED:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {name}")
        try:
            return cls.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(_validation_message(exc, cls.LABELS)) from exc

    def payload(self) -> dict:
        return self.model_dump(by_alias=True)


class ScheduleRegistration(BaseModel):
    """Body of `POST slot/register`: one consultant, one date, many slots."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str
    consultant_id: int = Field(alias="consultantId")
    slot_ids: List[int] = Field(alias="slotIds", min_length=1)

    LABELS: ClassVar[Dict[str, str]] = {
        "date": "Invalid date",
        "consultantId": "Invalid consultant ID",
        "slotIds": "Select at least one valid slot",
    }

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, value):
        return iso_date(value)

    @field_validator("consultant_id", mode="before")
    @classmethod
    def check_consultant(cls, value):
        return positive_int(value)

    @field_validator("slot_ids", mode="before")
    @classmethod
    def check_slots(cls, value):
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("slotIds must be a list")
        return [positive_int(item) for item in value]

    @classmethod
    def build(cls, **fields: Any) -> "ScheduleRegistration":
        try:
            return cls.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(_validation_message(exc, cls.LABELS)) from exc

    def payload(self) -> dict:
        return self.model_dump(by_alias=True)
