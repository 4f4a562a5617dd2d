"""HTTP client for the booking backend."""

import time
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from clinic_portal.config import Settings
from clinic_portal.core.exceptions import (
    InvalidResponseException,
    ServiceUnavailableException,
    exception_for_status,
)
from clinic_portal.core.storage import TOKEN_KEY, KeyValueStore

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode(model: type[ModelT], body: Any) -> ModelT:
    """
    Validate a response body into a schema.

    Raises:
        InvalidResponseException: If the body does not match the schema
    """
    try:
        return model.model_validate(body)
    except ValidationError as e:
        logger.warning(
            "api_response_invalid", model=model.__name__, error_count=e.error_count()
        )
        raise InvalidResponseException() from e


def decode_list(model: type[ModelT], body: Any) -> list[ModelT]:
    """Validate a JSON array body. A missing body is an empty list."""
    if body is None:
        return []
    if not isinstance(body, list):
        logger.warning("api_response_invalid", model=model.__name__, error="expected a list")
        raise InvalidResponseException()
    return [decode(model, item) for item in body]


class ApiClient:
    """
    Thin async wrapper around ``httpx.AsyncClient``.

    Non-2xx responses are raised as ``ApiException`` subclasses carrying
    the backend's ``error`` message. Transport failures become
    ``ServiceUnavailableException``. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        store: KeyValueStore | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Backend API root, e.g. ``http://localhost:8080/api``
            store: Session store consulted for the bearer token
            timeout: Request timeout in seconds; None keeps the httpx default
            transport: Optional custom transport (used by tests)
        """
        kwargs: dict[str, Any] = {"base_url": base_url.rstrip("/")}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if transport is not None:
            kwargs["transport"] = transport

        self.store = store
        self._client = httpx.AsyncClient(**kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: KeyValueStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Build a client from application settings."""
        return cls(
            settings.api_base_url,
            store=store,
            timeout=settings.api_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.store is not None:
            token = self.store.get_json(TOKEN_KEY)
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_detail(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None

        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
            if message:
                return str(message)
        return None

    async def request(self, method: str, path: str, json: Any | None = None) -> Any:
        """
        Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            json: Optional JSON body

        Returns:
            Decoded response body, or None for an empty body

        Raises:
            ApiException: If the backend answers with an error status
            ServiceUnavailableException: If the backend cannot be reached
            InvalidResponseException: If a success response is not JSON
        """
        start_time = time.time()
        logger.debug("api_request_started", method=method, path=path)

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            logger.error(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=time.time() - start_time,
            )
            raise ServiceUnavailableException("Unable to reach the server") from e

        duration = time.time() - start_time

        if response.is_error:
            detail = self._error_detail(response)
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=detail,
                duration=duration,
            )
            raise exception_for_status(response.status_code, detail)

        logger.info(
            "api_request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration=duration,
        )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("api_response_invalid", method=method, path=path, error=str(e))
            raise InvalidResponseException() from e

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any | None = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any | None = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
