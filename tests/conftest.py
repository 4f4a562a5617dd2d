from typing import Any

import httpx
import pytest

from clinic_portal.core.storage import MemoryStore
from clinic_portal.services.api_client import ApiClient
from clinic_portal.services.appointment_service import AppointmentService
from clinic_portal.services.session import SessionManager
from clinic_portal.services.user_service import UserService

BASE_URL = "http://test/api"


class FakeBackend:
    """Route table standing in for the booking backend."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, str | None]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json: Any = None,
        text: str | None = None,
    ) -> None:
        self.routes[(method, f"/api{path}")] = (status_code, json, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "No such route"})

        status_code, body, text = route
        if text is not None:
            return httpx.Response(status_code, text=text)
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def api(backend: FakeBackend, store: MemoryStore) -> ApiClient:
    return ApiClient(BASE_URL, store=store, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def users(api: ApiClient) -> UserService:
    return UserService(api)


@pytest.fixture
def appointments(api: ApiClient) -> AppointmentService:
    return AppointmentService(api)


@pytest.fixture
def session(users: UserService, store: MemoryStore) -> SessionManager:
    session = SessionManager(users, store)
    session.initialize()
    return session


@pytest.fixture
def sample_user() -> dict:
    """User record as the backend sends it."""
    return {
        "id": 7,
        "username": "alice",
        "email": "alice@example.com",
        "fullName": "Alice Doe",
        "phoneNumber": "(555) 123-4567",
        "address": "1 Main St",
        "role": "PATIENT",
    }


@pytest.fixture
def sample_appointment() -> dict:
    return {
        "id": 42,
        "userId": 7,
        "patientName": "Alice Doe",
        "patientPhone": "5551234567",
        "appointmentDate": "2030-03-04T09:30:00",
        "doctorName": "Smith",
        "department": "Cardiology",
        "reason": "Checkup",
        "status": "SCHEDULED",
        "notes": None,
        "createdAt": "2026-10-01T10:00:00",
        "updatedAt": "2026-10-01T10:00:00",
    }
