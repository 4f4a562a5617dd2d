"""Wire schemas exchanged with the booking backend."""

from clinic_portal.schemas.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    Department,
)
from clinic_portal.schemas.users import (
    LoginCredentials,
    LoginResponse,
    User,
    UserRegister,
    UserUpdate,
)

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "AppointmentUpdate",
    "Department",
    "LoginCredentials",
    "LoginResponse",
    "User",
    "UserRegister",
    "UserUpdate",
]
