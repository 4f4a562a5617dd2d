"""Profile editing screen."""

from pydantic import BaseModel, ValidationError

from clinic_portal.core import validation
from clinic_portal.core.exceptions import ApiException, ValidationException
from clinic_portal.forms.base import request_failed, require_user, schema_error
from clinic_portal.schemas.users import User, UserUpdate
from clinic_portal.services.session import SessionManager


class ProfileForm(BaseModel):
    full_name: str = ""
    phone_number: str = ""
    address: str = ""
    email: str = ""
    current_password: str = ""
    new_password: str = ""

    @classmethod
    def from_user(cls, user: User) -> "ProfileForm":
        """Prefill the form from the current profile."""
        return cls(
            full_name=user.full_name or "",
            phone_number=user.phone_number or "",
            address=user.address or "",
            email=user.email or "",
        )


def build_update(form: ProfileForm) -> UserUpdate:
    """
    Validate the profile form and build the patch.

    Password fields are only sent when a new password was entered.

    Raises:
        ValidationException: With the message for the first failing field
    """
    if form.email and not validation.is_valid_email(form.email):
        raise ValidationException("Please enter a valid email")
    if form.phone_number and not validation.is_valid_phone(form.phone_number):
        raise ValidationException("Please enter a valid phone number")
    if form.new_password and not form.current_password:
        raise ValidationException("Current password is required to change password")
    if form.new_password and not validation.is_strong_password(form.new_password):
        raise ValidationException("New password must be at least 6 characters")

    fields = {
        "full_name": form.full_name,
        "phone_number": form.phone_number,
        "address": form.address,
        "email": form.email,
    }
    if form.new_password:
        fields["current_password"] = form.current_password
        fields["new_password"] = form.new_password

    try:
        return UserUpdate(**fields)
    except ValidationError as e:
        raise schema_error(e, phone_number="Please enter a valid phone number") from e


async def update_profile(session: SessionManager, form: ProfileForm) -> User:
    """
    Save profile changes for the logged-in user.

    Returns:
        The user record the backend returned, now the current session user

    Raises:
        LoginRequiredException: If nobody is logged in
        ValidationException: If a field is invalid; nothing is sent
        OperationInProgressException: If a previous save has not finished
        RequestFailedException: If the backend rejects the update
    """
    user = require_user(session)
    patch = build_update(form)

    try:
        return await session.update_profile(user.id, patch)
    except ApiException as e:
        raise request_failed(e, "Failed to update profile") from e
