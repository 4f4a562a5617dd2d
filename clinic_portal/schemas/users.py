"""User schemas for request/response validation."""

from pydantic import ConfigDict, Field

from clinic_portal.schemas.base import CamelModel


class User(CamelModel):
    """
    User record as returned by the backend.

    Unknown fields are kept so the persisted session holds exactly what
    the backend sent.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    username: str
    email: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    role: str | None = None


class UserRegister(CamelModel):
    """Schema for registering a new user."""

    username: str
    email: str
    password: str
    full_name: str = ""
    phone_number: str = ""


class LoginCredentials(CamelModel):
    """Login request schema."""

    username: str
    password: str


class LoginResponse(CamelModel):
    """Login response with the authenticated user."""

    model_config = ConfigDict(extra="allow")

    message: str | None = None
    user: User
    token: str | None = None


class UserUpdate(CamelModel):
    """
    Partial profile update.

    Password fields are only meaningful together: the backend checks
    ``current_password`` before applying ``new_password``.
    """

    full_name: str | None = None
    phone_number: str | None = Field(None, max_length=20)
    address: str | None = None
    email: str | None = None
    current_password: str | None = None
    new_password: str | None = None
