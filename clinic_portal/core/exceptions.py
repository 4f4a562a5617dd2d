"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationException(AppException):
    """Client-side validation failure. Raised before any request is sent."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class LoginRequiredException(AppException):
    """Action needs an authenticated session."""

    def __init__(self, message: str = "Please log in first"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class OperationInProgressException(AppException):
    """Same action is already waiting on the backend."""

    def __init__(self, message: str = "Operation already in progress"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class RequestFailedException(AppException):
    """Form submission failed at the backend; message is ready to show."""


class ApiException(AppException):
    """
    Request to the backend failed.

    ``detail`` holds the error text reported by the backend, or None when
    the response carried none.
    """

    detail: str | None = None

    def __init__(self, message: str = "Request failed", status_code: int = 500):
        """Initialize with the backend status code."""
        super().__init__(message, status_code=status_code)


class BadRequestException(ApiException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class UnauthorizedException(ApiException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(ApiException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class NotFoundException(ApiException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ConflictException(ApiException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class InvalidResponseException(ApiException):
    """Backend answered with a body the client cannot read."""

    def __init__(self, message: str = "Invalid response from server"):
        """Initialize with 502 status code."""
        super().__init__(message, status_code=502)


class ServiceUnavailableException(ApiException):
    """Backend could not be reached."""

    def __init__(self, message: str = "Service unavailable"):
        """Initialize with 503 status code."""
        super().__init__(message, status_code=503)


_STATUS_EXCEPTIONS: dict[int, type[ApiException]] = {
    400: BadRequestException,
    401: UnauthorizedException,
    403: ForbiddenException,
    404: NotFoundException,
    409: ConflictException,
    503: ServiceUnavailableException,
}


def exception_for_status(status_code: int, detail: str | None = None) -> ApiException:
    """
    Build the exception matching an HTTP error status.

    Args:
        status_code: Response status code
        detail: Error message reported by the backend, if any

    Returns:
        Exception instance for the status
    """
    exc_class = _STATUS_EXCEPTIONS.get(status_code)
    if exc_class is None:
        exc = ApiException(
            detail or f"Request failed with status {status_code}",
            status_code=status_code,
        )
    else:
        exc = exc_class(detail) if detail else exc_class()
    exc.detail = detail
    return exc
