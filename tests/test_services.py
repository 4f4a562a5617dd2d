"""Tests for the REST wrappers."""

import json
from datetime import datetime

import httpx
import pytest

from clinic_portal.core.exceptions import (
    ApiException,
    BadRequestException,
    ConflictException,
    InvalidResponseException,
    NotFoundException,
    ServiceUnavailableException,
)
from clinic_portal.core.storage import TOKEN_KEY
from clinic_portal.schemas.appointments import (
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    Department,
)
from clinic_portal.schemas.users import LoginCredentials, UserRegister, UserUpdate
from clinic_portal.services.api_client import ApiClient


@pytest.mark.asyncio
async def test_register_posts_camel_case_body(users, backend, sample_user):
    backend.add("POST", "/users/register", status_code=201, json=sample_user)

    user = await users.register(
        UserRegister(
            username="alice",
            email="alice@example.com",
            password="secret1",
            full_name="Alice Doe",
            phone_number="5551234567",
        )
    )

    request = backend.last_request
    assert request.method == "POST"
    assert request.url.path == "/api/users/register"
    assert json.loads(request.content) == {
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret1",
        "fullName": "Alice Doe",
        "phoneNumber": "5551234567",
    }
    assert user.id == 7


@pytest.mark.asyncio
async def test_register_conflict_surfaces_backend_message(users, backend):
    backend.add(
        "POST", "/users/register", status_code=400, json={"error": "Username already exists"}
    )

    with pytest.raises(BadRequestException) as exc_info:
        await users.register(
            UserRegister(username="alice", email="alice@example.com", password="secret1")
        )

    assert exc_info.value.message == "Username already exists"
    assert exc_info.value.detail == "Username already exists"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_login_returns_user(users, backend, sample_user):
    backend.add("POST", "/users/login", json={"message": "Login successful", "user": sample_user})

    response = await users.login(LoginCredentials(username="alice", password="secret1"))

    assert response.message == "Login successful"
    assert response.user.username == "alice"
    assert response.token is None


@pytest.mark.asyncio
async def test_user_lookups(users, backend, sample_user):
    backend.add("GET", "/users/7", json=sample_user)
    backend.add("GET", "/users/username/alice", json=sample_user)
    backend.add("GET", "/users", json=[sample_user])

    assert (await users.get_user(7)).username == "alice"
    assert (await users.get_user_by_username("alice")).id == 7
    assert [u.id for u in await users.list_users()] == [7]


@pytest.mark.asyncio
async def test_get_user_not_found_without_body(users, backend):
    backend.add("GET", "/users/99", status_code=404)

    with pytest.raises(NotFoundException) as exc_info:
        await users.get_user(99)

    assert exc_info.value.detail is None
    assert exc_info.value.message == "Resource not found"


@pytest.mark.asyncio
async def test_update_user_sends_only_set_fields(users, backend, sample_user):
    backend.add("PUT", "/users/7", json=sample_user)

    await users.update_user(
        7,
        UserUpdate(address="2 Side St", new_password="newpass", current_password="old"),
    )

    assert json.loads(backend.last_request.content) == {
        "address": "2 Side St",
        "newPassword": "newpass",
        "currentPassword": "old",
    }


@pytest.mark.asyncio
async def test_delete_user(users, backend):
    backend.add("DELETE", "/users/7", json={"message": "User deleted successfully"})

    assert await users.delete_user(7) is None
    assert backend.last_request.method == "DELETE"


@pytest.mark.asyncio
async def test_create_appointment(appointments, backend, sample_appointment):
    backend.add("POST", "/appointments", status_code=201, json=sample_appointment)

    created = await appointments.create_appointment(
        AppointmentCreate(
            user_id=7,
            patient_name="Alice Doe",
            appointment_date=datetime(2030, 3, 4, 9, 30),
            doctor_name="Smith",
            department=Department.CARDIOLOGY,
        )
    )

    body = json.loads(backend.last_request.content)
    assert body == {
        "userId": 7,
        "patientName": "Alice Doe",
        "appointmentDate": "2030-03-04T09:30:00",
        "doctorName": "Smith",
        "department": "Cardiology",
    }
    assert created.id == 42
    assert created.status is AppointmentStatus.SCHEDULED
    assert created.is_cancellable is True


@pytest.mark.asyncio
async def test_create_appointment_slot_taken(appointments, backend):
    backend.add(
        "POST",
        "/appointments",
        status_code=400,
        json={"error": "This time slot is already booked for the selected doctor"},
    )

    with pytest.raises(BadRequestException, match="already booked"):
        await appointments.create_appointment(
            AppointmentCreate(
                user_id=7,
                patient_name="Alice Doe",
                appointment_date=datetime(2030, 3, 4, 9, 30),
                doctor_name="Smith",
            )
        )


@pytest.mark.asyncio
async def test_appointment_listings(appointments, backend, sample_appointment):
    cancelled = {**sample_appointment, "id": 43, "status": "CANCELLED"}
    backend.add("GET", "/appointments", json=[sample_appointment, cancelled])
    backend.add("GET", "/appointments/user/7", json=[sample_appointment])
    backend.add("GET", "/appointments/status/CANCELLED", json=[cancelled])
    backend.add("GET", "/appointments/42", json=sample_appointment)

    assert [a.id for a in await appointments.list_appointments()] == [42, 43]
    assert [a.id for a in await appointments.list_user_appointments(7)] == [42]
    by_status = await appointments.list_by_status(AppointmentStatus.CANCELLED)
    assert [a.id for a in by_status] == [43]
    assert by_status[0].is_cancellable is False
    assert (await appointments.get_appointment(42)).doctor_name == "Smith"


@pytest.mark.asyncio
async def test_empty_listing_is_not_an_error(appointments, backend):
    backend.add("GET", "/appointments/user/7", json=[])

    assert await appointments.list_user_appointments(7) == []


@pytest.mark.asyncio
async def test_update_cancel_and_delete_appointment(appointments, backend, sample_appointment):
    backend.add("PUT", "/appointments/42", json={**sample_appointment, "reason": "Follow-up"})
    backend.add(
        "PUT", "/appointments/42/cancel", json={**sample_appointment, "status": "CANCELLED"}
    )
    backend.add("DELETE", "/appointments/42", status_code=204)

    updated = await appointments.update_appointment(42, AppointmentUpdate(reason="Follow-up"))
    assert json.loads(backend.last_request.content) == {"reason": "Follow-up"}
    assert updated.reason == "Follow-up"

    cancelled = await appointments.cancel_appointment(42)
    assert cancelled.status is AppointmentStatus.CANCELLED

    assert await appointments.delete_appointment(42) is None


@pytest.mark.asyncio
async def test_bearer_token_from_store(users, backend, store, sample_user):
    backend.add("GET", "/users/7", json=sample_user)

    await users.get_user(7)
    assert "Authorization" not in backend.last_request.headers

    store.set_json(TOKEN_KEY, "abc123")
    await users.get_user(7)
    assert backend.last_request.headers["Authorization"] == "Bearer abc123"


@pytest.mark.asyncio
async def test_status_code_mapping():
    def handler(request: httpx.Request) -> httpx.Response:
        status = int(request.url.path.rsplit("/", 1)[1])
        return httpx.Response(status, json={"message": f"status {status}"})

    async with ApiClient("http://test/api", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(ConflictException):
            await api.get("/status/409")
        with pytest.raises(ApiException) as exc_info:
            await api.get("/status/500")

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "status 500"


@pytest.mark.asyncio
async def test_transport_error_becomes_service_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient("http://test/api", transport=httpx.MockTransport(handler))

    with pytest.raises(ServiceUnavailableException) as exc_info:
        await api.get("/appointments")

    assert exc_info.value.detail is None
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_non_json_success_body_is_invalid_response(api, backend):
    backend.add("GET", "/appointments", text="<html>Whitelabel Error Page</html>")

    with pytest.raises(InvalidResponseException) as exc_info:
        await api.get("/appointments")

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail is None


@pytest.mark.asyncio
async def test_response_not_matching_schema_is_invalid_response(users, appointments, backend):
    backend.add("POST", "/users/login", json={"message": "ok"})
    backend.add("GET", "/appointments/user/7", json={"id": 42})
    backend.add("GET", "/appointments/42", json={"id": "not-a-number"})

    with pytest.raises(InvalidResponseException):
        await users.login(LoginCredentials(username="alice", password="secret1"))
    with pytest.raises(InvalidResponseException):
        await appointments.list_user_appointments(7)
    with pytest.raises(InvalidResponseException):
        await appointments.get_appointment(42)
