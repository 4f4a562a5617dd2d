"""Submit handlers for the booking screens."""
