"""Client library for the counseling platform: availability and booking."""
from counsel_booking.availability import (
    build_booking_view,
    check_selectable,
    compute_booked_slot_ids,
    filter_future_schedules,
    group_by_date,
    is_bookable,
    sorted_dates,
)
from counsel_booking.booking import BookingFlow, SlotRegistrationFlow
from counsel_booking.errors import (
    BackendError,
    BookingError,
    CircuitOpenError,
    ConflictError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from counsel_booking.http_client import BackendClient

__version__ = "0.1.0"
