"""Tests for the session holder."""

import asyncio

import pytest

from clinic_portal.core.exceptions import (
    BadRequestException,
    OperationInProgressException,
    UnauthorizedException,
)
from clinic_portal.core.storage import TOKEN_KEY, USER_KEY, MemoryStore
from clinic_portal.schemas.users import LoginCredentials, User, UserUpdate
from clinic_portal.services.session import SessionManager


def test_initialize_without_saved_session(users, store):
    session = SessionManager(users, store)
    assert session.loading is True

    assert session.initialize() is None
    assert session.loading is False
    assert session.get_current_user() is None
    assert session.is_authenticated is False


def test_initialize_restores_saved_user(users, sample_user):
    store = MemoryStore({USER_KEY: sample_user})
    session = SessionManager(users, store)

    user = session.initialize()

    assert user is not None
    assert user.id == 7
    assert user.full_name == "Alice Doe"
    assert session.is_authenticated is True


def test_initialize_drops_corrupt_record(users):
    store = MemoryStore({USER_KEY: {"username": "no-id"}})
    session = SessionManager(users, store)

    assert session.initialize() is None
    assert store.get_json(USER_KEY) is None


@pytest.mark.asyncio
async def test_login_stores_backend_user(session, backend, store, sample_user):
    backend.add(
        "POST",
        "/users/login",
        json={"message": "Login successful", "user": sample_user, "token": "abc123"},
    )

    response = await session.login(LoginCredentials(username="alice", password="secret1"))

    assert session.get_current_user() is response.user
    assert store.get_json(USER_KEY) == sample_user
    assert store.get_json(TOKEN_KEY) == "abc123"


@pytest.mark.asyncio
async def test_login_keeps_unknown_fields(session, backend, store, sample_user):
    sample_user["lastLogin"] = "2026-10-01T10:00:00"
    backend.add("POST", "/users/login", json={"user": sample_user})

    await session.login(LoginCredentials(username="alice", password="secret1"))

    assert store.get_json(USER_KEY)["lastLogin"] == "2026-10-01T10:00:00"
    assert store.get_json(TOKEN_KEY) is None


@pytest.mark.asyncio
async def test_failed_login_keeps_prior_session(users, backend, sample_user):
    store = MemoryStore({USER_KEY: sample_user})
    session = SessionManager(users, store)
    previous = session.initialize()
    backend.add("POST", "/users/login", status_code=401, json={"error": "Invalid credentials"})

    with pytest.raises(UnauthorizedException) as exc_info:
        await session.login(LoginCredentials(username="bob", password="wrong!"))

    assert exc_info.value.message == "Invalid credentials"
    assert session.get_current_user() is previous
    assert store.get_json(USER_KEY) == sample_user


@pytest.mark.asyncio
async def test_failed_login_from_logged_out_state(session, backend):
    backend.add("POST", "/users/login", status_code=401, json={"error": "Invalid credentials"})

    with pytest.raises(UnauthorizedException):
        await session.login(LoginCredentials(username="bob", password="wrong!"))

    assert session.get_current_user() is None


@pytest.mark.asyncio
async def test_logout_clears_memory_and_store(session, backend, store, sample_user):
    backend.add("POST", "/users/login", json={"user": sample_user, "token": "abc123"})
    await session.login(LoginCredentials(username="alice", password="secret1"))
    requests_before = len(backend.requests)

    session.logout()

    assert session.get_current_user() is None
    assert store.get_json(USER_KEY) is None
    assert store.get_json(TOKEN_KEY) is None
    assert len(backend.requests) == requests_before


@pytest.mark.asyncio
async def test_update_profile_replaces_with_backend_record(users, backend, sample_user):
    store = MemoryStore({USER_KEY: sample_user})
    session = SessionManager(users, store)
    session.initialize()
    # Backend normalizes the phone and drops the address
    echoed = {**sample_user, "phoneNumber": "5559876543", "address": None}
    backend.add("PUT", "/users/7", json=echoed)

    updated = await session.update_profile(
        7, UserUpdate(phone_number="(555) 987-6543", full_name="Alice Q. Doe")
    )

    assert session.get_current_user() is updated
    assert updated.phone_number == "5559876543"
    # Patch values are not merged in
    assert updated.full_name == "Alice Doe"
    assert updated.address is None
    assert store.get_json(USER_KEY) == echoed


@pytest.mark.asyncio
async def test_update_profile_failure_keeps_prior_state(users, backend, sample_user):
    store = MemoryStore({USER_KEY: sample_user})
    session = SessionManager(users, store)
    previous = session.initialize()
    backend.add("PUT", "/users/7", status_code=400, json={"error": "Email already exists"})

    with pytest.raises(BadRequestException) as exc_info:
        await session.update_profile(7, UserUpdate(email="taken@example.com"))

    assert exc_info.value.message == "Email already exists"
    assert session.get_current_user() is previous
    assert store.get_json(USER_KEY) == sample_user
    assert session.is_updating is False


@pytest.mark.asyncio
async def test_concurrent_update_is_rejected(store, sample_user):
    release = asyncio.Event()
    calls = []

    class SlowUsers:
        async def update_user(self, user_id, patch):
            calls.append(user_id)
            await release.wait()
            return User.model_validate(sample_user)

    session = SessionManager(SlowUsers(), store)
    session.initialize()

    first = asyncio.create_task(session.update_profile(7, UserUpdate(full_name="A")))
    await asyncio.sleep(0)
    assert session.is_updating is True

    with pytest.raises(OperationInProgressException):
        await session.update_profile(7, UserUpdate(full_name="B"))

    release.set()
    await first

    assert calls == [7]
    assert session.is_updating is False
