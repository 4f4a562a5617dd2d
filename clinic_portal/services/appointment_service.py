"""Appointment endpoints of the booking backend."""

from clinic_portal.schemas.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
)
from clinic_portal.services.api_client import ApiClient, decode, decode_list


class AppointmentService:
    """
    Service for managing appointments.

    Results are never cached: every call is a fresh round trip.
    """

    def __init__(self, api: ApiClient):
        """Initialize service with API client."""
        self.api = api

    async def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """
        Create a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            BadRequestException: If the backend rejects the slot or date
        """
        body = await self.api.post("/appointments", json=data.to_payload())
        return decode(Appointment, body)

    async def get_appointment(self, appointment_id: int | str) -> Appointment:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        body = await self.api.get(f"/appointments/{appointment_id}")
        return decode(Appointment, body)

    async def list_appointments(self) -> list[Appointment]:
        """List every appointment."""
        return decode_list(Appointment, await self.api.get("/appointments"))

    async def list_user_appointments(self, user_id: int) -> list[Appointment]:
        """List appointments booked by a user."""
        body = await self.api.get(f"/appointments/user/{user_id}")
        return decode_list(Appointment, body)

    async def list_by_status(self, status: AppointmentStatus) -> list[Appointment]:
        """List appointments with the given status."""
        status = AppointmentStatus(status)
        body = await self.api.get(f"/appointments/status/{status.value}")
        return decode_list(Appointment, body)

    async def update_appointment(
        self,
        appointment_id: int | str,
        data: AppointmentUpdate,
    ) -> Appointment:
        """
        Update an existing appointment.

        Args:
            appointment_id: Appointment ID
            data: Fields to change

        Returns:
            Updated appointment
        """
        body = await self.api.put(f"/appointments/{appointment_id}", json=data.to_payload())
        return decode(Appointment, body)

    async def cancel_appointment(self, appointment_id: int | str) -> Appointment:
        """Mark an appointment as cancelled."""
        body = await self.api.put(f"/appointments/{appointment_id}/cancel")
        return decode(Appointment, body)

    async def delete_appointment(self, appointment_id: int | str) -> None:
        """Delete an appointment."""
        await self.api.delete(f"/appointments/{appointment_id}")
