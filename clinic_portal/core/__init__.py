"""Validation helpers, errors, session storage and logging setup."""
