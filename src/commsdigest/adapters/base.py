"""Base adapter interface for remote services."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()


class BaseAdapter(ABC):
    """Abstract base class for HTTP service adapters.

    All adapters must implement:
    - connect(): Validate credentials and open the HTTP client

    Subclasses get a shared ``httpx.AsyncClient`` lifecycle and turn error
    responses into the classified exceptions below.
    """

    def __init__(
        self, name: str, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """Initialize adapter with a name for logging.

        Args:
            name: Adapter name bound into every log line.
            transport: HTTP transport override (tests pass a mock transport).
        """
        self.name = name
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._connected = False
        self.logger = logger.bind(adapter=name)

    @property
    def is_connected(self) -> bool:
        """Check if adapter is currently connected."""
        return self._connected

    @abstractmethod
    async def connect(self) -> bool:
        """Prepare the adapter for requests.

        Returns:
            True if connection successful, False otherwise.
        """
        pass

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._connected = False
        self.logger.debug("Disconnected")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            AuthenticationError: 401 or 403.
            RateLimitError: 429, carrying Retry-After when present.
            ApiError: Any other error status or a transport failure.
        """
        if self._client is None:
            raise ApiError(self.name, "Not connected", code="NOT_CONNECTED")

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self.logger.error("Request failed", method=method, path=path, error=str(e))
            raise ApiError(self.name, f"Request failed: {e}", code="NETWORK_ERROR") from e

        if response.is_error:
            raise classify_response(self.name, response)

        if not response.content:
            return {}
        return response.json()

    async def __aenter__(self) -> "BaseAdapter":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()


def classify_response(adapter_name: str, response: httpx.Response) -> "AdapterError":
    """Build the exception matching an error response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or body.get("error_description") or response.reason_phrase
    status = response.status_code

    if status in (401, 403):
        return AuthenticationError(adapter_name, message or "Authentication failed")

    if status == 429:
        return RateLimitError(
            adapter_name,
            message or "Rate limit exceeded",
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
        )

    code = body.get("code") or body.get("error")
    if not isinstance(code, str):
        code = f"HTTP_{status}"
    return ApiError(adapter_name, message or f"HTTP {status}", code=code, status=status)


def _parse_retry_after(value: str | None) -> int | None:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        return max(0, int(float(value)))
    except ValueError:
        return None


class AdapterError(Exception):
    """Base exception for adapter errors."""

    def __init__(self, adapter_name: str, message: str) -> None:
        self.adapter_name = adapter_name
        self.message = message
        super().__init__(message)


class AuthenticationError(AdapterError):
    """Raised when the service rejects the credentials."""

    pass


class RateLimitError(AdapterError):
    """Raised when the service throttles the caller."""

    def __init__(self, adapter_name: str, message: str, retry_after: int | None = None) -> None:
        super().__init__(adapter_name, message)
        self.retry_after = retry_after
        self.status = 429


class ApiError(AdapterError):
    """Raised for any other failed request."""

    def __init__(
        self,
        adapter_name: str,
        message: str,
        code: str = "INTERNAL_ERROR",
        status: int | None = None,
    ) -> None:
        super().__init__(adapter_name, message)
        self.code = code
        self.status = status


class DeliveryError(AdapterError):
    """Raised when a report could not be delivered."""

    pass
