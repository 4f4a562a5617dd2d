"""Login and registration screen."""

import structlog
from pydantic import BaseModel

from clinic_portal.core import validation
from clinic_portal.core.exceptions import (
    ApiException,
    RequestFailedException,
    ValidationException,
)
from clinic_portal.forms.base import request_failed
from clinic_portal.schemas.users import LoginCredentials, User, UserRegister
from clinic_portal.services.session import SessionManager

logger = structlog.get_logger(__name__)


class LoginForm(BaseModel):
    username: str = ""
    password: str = ""


class RegisterForm(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    full_name: str = ""
    phone_number: str = ""


async def login(session: SessionManager, form: LoginForm) -> User:
    """
    Log in from the login tab.

    Every failure reads "Invalid username or password", whatever the
    backend reported.
    """
    try:
        response = await session.login(
            LoginCredentials(username=form.username, password=form.password)
        )
    except ApiException as e:
        logger.info("login_rejected", username=form.username, status_code=e.status_code)
        raise RequestFailedException(
            "Invalid username or password",
            status_code=e.status_code,
        ) from e
    return response.user


def validate_registration(form: RegisterForm) -> None:
    """
    Check the registration form in display order.

    Raises:
        ValidationException: With the message for the first failing field
    """
    if not validation.is_valid_username(form.username):
        raise ValidationException("Username must be between 3 and 50 characters")
    if not validation.is_valid_email(form.email):
        raise ValidationException("Please enter a valid email")
    if not validation.is_strong_password(form.password):
        raise ValidationException("Password must be at least 6 characters")


async def register(session: SessionManager, form: RegisterForm) -> User:
    """
    Register a new account and log straight into it.

    Args:
        session: Current session
        form: Registration form

    Returns:
        Logged-in user

    Raises:
        ValidationException: If a field is invalid; nothing is sent
        RequestFailedException: If registration or the follow-up login fails
    """
    validate_registration(form)

    try:
        await session.users.register(
            UserRegister(
                username=form.username,
                email=form.email,
                password=form.password,
                full_name=form.full_name,
                phone_number=form.phone_number,
            )
        )
        response = await session.login(
            LoginCredentials(username=form.username, password=form.password)
        )
    except ApiException as e:
        raise request_failed(e, "Registration failed") from e

    logger.info("user_registered", user_id=response.user.id, username=response.user.username)
    return response.user
