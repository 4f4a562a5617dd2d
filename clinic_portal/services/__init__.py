"""REST wrappers and the session holder."""
