"""Booking, listing and cancellation screens."""

import re
from datetime import datetime

import structlog
from pydantic import BaseModel, ValidationError

from clinic_portal.core import validation
from clinic_portal.core.exceptions import (
    ApiException,
    RequestFailedException,
    ValidationException,
)
from clinic_portal.forms.base import request_failed, require_user, schema_error
from clinic_portal.schemas.appointments import Appointment, AppointmentCreate, Department
from clinic_portal.schemas.users import User
from clinic_portal.services.appointment_service import AppointmentService
from clinic_portal.services.session import SessionManager

logger = structlog.get_logger(__name__)


class BookingForm(BaseModel):
    """
    Raw booking form values.

    ``patient_name`` and ``patient_phone`` left as None are filled from
    the user's profile.
    """

    patient_name: str | None = None
    patient_phone: str | None = None
    appointment_date: str | datetime = ""
    doctor_name: str = ""
    department: str = ""
    reason: str = ""


def _department(value: str) -> Department | None:
    if not value.strip():
        return None
    try:
        return Department(value.strip())
    except ValueError:
        raise ValidationException("Please select a valid department") from None


def build_appointment(user: User, form: BookingForm) -> AppointmentCreate:
    """
    Validate the booking form in display order and build the request.

    Raises:
        ValidationException: With the message for the first failing field
    """
    patient_name = form.patient_name if form.patient_name is not None else user.full_name or ""
    patient_phone = (
        form.patient_phone if form.patient_phone is not None else user.phone_number or ""
    )

    if not validation.is_required(patient_name):
        raise ValidationException("Patient name is required")
    if patient_phone and not validation.is_valid_phone(patient_phone):
        raise ValidationException("Please enter a valid phone number")
    if isinstance(form.appointment_date, str) and not validation.is_required(
        form.appointment_date
    ):
        raise ValidationException("Appointment date is required")

    appointment_date = validation.parse_date(form.appointment_date)
    if appointment_date is None:
        raise ValidationException("Please enter a valid appointment date")
    if not validation.is_future_date(appointment_date):
        raise ValidationException("Appointment date must be in the future")
    if not validation.is_required(form.doctor_name):
        raise ValidationException("Doctor name is required")

    try:
        return AppointmentCreate(
            user_id=user.id,
            patient_name=patient_name.strip(),
            patient_phone=patient_phone or None,
            appointment_date=appointment_date,
            doctor_name=form.doctor_name.strip(),
            department=_department(form.department),
            reason=form.reason or None,
        )
    except ValidationError as e:
        raise schema_error(e, patient_phone="Please enter a valid phone number") from e


async def book(
    session: SessionManager,
    appointments: AppointmentService,
    form: BookingForm,
) -> Appointment:
    """
    Book an appointment for the logged-in user.

    No request is sent when validation fails.

    Args:
        session: Current session
        appointments: Appointment service
        form: Booking form

    Returns:
        Created appointment

    Raises:
        LoginRequiredException: If nobody is logged in
        ValidationException: If a field is invalid
        RequestFailedException: If the backend rejects the booking
    """
    user = require_user(session)
    data = build_appointment(user, form)

    try:
        appointment = await appointments.create_appointment(data)
    except ApiException as e:
        raise request_failed(e, "Failed to create appointment") from e

    logger.info("appointment_booked", appointment_id=appointment.id, user_id=user.id)
    return appointment


async def my_appointments(
    session: SessionManager,
    appointments: AppointmentService,
) -> list[Appointment]:
    """Fetch the logged-in user's appointments. An empty list is not an error."""
    user = require_user(session)
    try:
        return await appointments.list_user_appointments(user.id)
    except ApiException as e:
        raise RequestFailedException(
            "Failed to load appointments", status_code=e.status_code
        ) from e


async def cancel(appointments: AppointmentService, appointment_id: str | int) -> Appointment:
    """
    Cancel an appointment by the ID the user typed in.

    Raises:
        ValidationException: If the ID is blank or not a number
        RequestFailedException: If the backend refuses the cancellation
    """
    raw_id = str(appointment_id).strip() if appointment_id is not None else ""
    if not raw_id:
        raise ValidationException("Please enter an appointment ID")
    if not re.fullmatch(r"\d+", raw_id, re.ASCII):
        raise ValidationException("Appointment ID must be a number")

    try:
        appointment = await appointments.cancel_appointment(int(raw_id))
    except ApiException as e:
        raise request_failed(e, "Failed to cancel appointment") from e

    logger.info("appointment_cancelled", appointment_id=appointment.id)
    return appointment
