"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field

from clinic_portal.schemas.base import CamelModel


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_cancellable(self) -> bool:
        """Only upcoming appointments can still be cancelled."""
        return self in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


class Department(str, Enum):
    """Clinic departments offered when booking."""

    CARDIOLOGY = "Cardiology"
    DERMATOLOGY = "Dermatology"
    NEUROLOGY = "Neurology"
    ORTHOPEDICS = "Orthopedics"
    PEDIATRICS = "Pediatrics"
    GENERAL = "General"


class Appointment(CamelModel):
    """Appointment as returned by the backend."""

    model_config = ConfigDict(extra="allow")

    id: int
    user_id: int | None = None
    patient_name: str
    patient_phone: str | None = None
    appointment_date: datetime
    doctor_name: str
    # Free text on the backend side; Department lists the bookable values
    department: str | None = None
    reason: str | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_cancellable(self) -> bool:
        """Check whether the list view should offer a cancel action."""
        return self.status.is_cancellable


class AppointmentCreate(CamelModel):
    """Schema for creating a new appointment."""

    user_id: int
    patient_name: str = Field(..., min_length=1, max_length=100)
    patient_phone: str | None = Field(None, max_length=15)
    appointment_date: datetime
    doctor_name: str = Field(..., min_length=1, max_length=100)
    department: Department | None = None
    reason: str | None = Field(None, max_length=500)


class AppointmentUpdate(CamelModel):
    """Schema for updating an existing appointment."""

    patient_name: str | None = Field(None, min_length=1, max_length=100)
    patient_phone: str | None = Field(None, max_length=15)
    appointment_date: datetime | None = None
    doctor_name: str | None = Field(None, min_length=1, max_length=100)
    department: Department | None = None
    reason: str | None = Field(None, max_length=500)
    status: AppointmentStatus | None = None
    notes: str | None = Field(None, max_length=255)
