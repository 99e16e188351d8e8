"""Resource services wrapping the counseling backend REST API."""
from counsel_booking.services.accounts import AccountService
from counsel_booking.services.appointments import AppointmentService
from counsel_booking.services.blogs import BlogService
from counsel_booking.services.consultants import ConsultantService
from counsel_booking.services.schedules import ScheduleService

__all__ = [
    "AccountService",
    "AppointmentService",
    "BlogService",
    "ConsultantService",
    "ScheduleService",
]
