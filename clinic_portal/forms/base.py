"""Helpers shared by the form workflows."""

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from clinic_portal.core.exceptions import (
    ApiException,
    LoginRequiredException,
    RequestFailedException,
    ValidationException,
)
from clinic_portal.schemas.users import User
from clinic_portal.services.session import SessionManager


def require_user(session: SessionManager) -> User:
    """Return the logged-in user or stop the action."""
    user = session.current_user
    if user is None:
        raise LoginRequiredException()
    return user


def request_failed(exc: ApiException, fallback: str) -> RequestFailedException:
    """Prefer the backend's own error text over the screen's generic message."""
    return RequestFailedException(exc.detail or fallback, status_code=exc.status_code)


def schema_error(exc: ValidationError, **messages: str) -> ValidationException:
    """
    Turn a pydantic error into a single inline message.

    Keyword arguments map a field name to the screen's own message for it.
    """
    errors = exc.errors()
    if not errors:
        return ValidationException()
    first = errors[0]
    loc = first.get("loc", ())
    for name, text in messages.items():
        if loc and loc[0] in (name, to_camel(name)):
            return ValidationException(text)
    field = ".".join(str(part) for part in loc)
    message = first.get("msg", "Invalid value")
    return ValidationException(f"{field}: {message}" if field else message)
