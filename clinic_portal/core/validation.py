"""
Form validation helpers.

Every function here is pure and never raises: malformed input yields
``False`` or an empty string, and callers decide which message to show.
"""

import re
from datetime import datetime
from typing import Any

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\d{10,15}$")
PHONE_SEPARATORS = re.compile(r"[-\s()]")

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50


def is_valid_email(email: Any) -> bool:
    """Check for a ``local@domain.tld`` shape without whitespace."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def is_valid_phone(phone: Any) -> bool:
    """Check for 10-15 digits once dashes, spaces and parentheses are removed."""
    if not isinstance(phone, str):
        return False
    return PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", phone)) is not None


def is_strong_password(password: Any) -> bool:
    """Length is the only strength criterion."""
    if not isinstance(password, str):
        return False
    return len(password) >= MIN_PASSWORD_LENGTH


def is_valid_username(username: Any) -> bool:
    if not isinstance(username, str):
        return False
    return MIN_USERNAME_LENGTH <= len(username) <= MAX_USERNAME_LENGTH


def is_required(value: Any) -> bool:
    """Fail on ``None`` and on strings that are empty after stripping."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def parse_date(value: Any) -> datetime | None:
    """
    Parse a datetime or ISO-8601 string.

    Args:
        value: ``datetime`` instance or ISO string (a trailing ``Z`` is accepted)

    Returns:
        Parsed datetime, or None when the input cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _to_local(value: datetime) -> datetime | None:
    # Naive values are already local wall-clock time
    if value.tzinfo is None:
        return value
    try:
        return value.astimezone()
    except (OverflowError, ValueError, OSError):
        return None


def is_future_date(value: Any) -> bool:
    """True iff the parsed date is strictly after the current time."""
    parsed = parse_date(value)
    if parsed is None:
        return False
    if parsed.tzinfo is None:
        return parsed > datetime.now()
    return parsed > datetime.now().astimezone()


def format_date(value: Any) -> str:
    """
    Render a date for display, e.g. ``Oct 5, 2026, 09:05 AM``.

    Args:
        value: ``datetime`` or ISO string

    Returns:
        Display string in local time, or an empty string for falsy or
        unparseable input
    """
    if not value:
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return ""

    local = _to_local(parsed)
    if local is None:
        return ""
    return f"{local:%b} {local.day}, {local.year}, {local:%I:%M %p}"


def format_date_for_input(value: Any) -> str:
    """Render a zero-padded ``YYYY-MM-DDTHH:MM`` string for a date-time input."""
    if not value:
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return ""

    local = _to_local(parsed)
    if local is None:
        return ""
    return local.strftime("%Y-%m-%dT%H:%M")
