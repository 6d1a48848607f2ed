"""Exception hierarchy for the Teleloop Bot API SDK."""

from typing import Any, Dict, Optional


class TeleloopError(Exception):
    """Base class for every error raised by this package."""


class APIException(TeleloopError):
    """Raised for non-2xx responses from the Bot API.

    Attributes:
        status_code: HTTP status code returned by the API.
        response_body: Raw response body as a dict, when available.
    """

    def __init__(self, status_code: int, response_body: Optional[Dict[str, Any]] = None) -> None:
        """Initialise with the HTTP status code and optional body."""
        self.status_code = status_code
        self.response_body = response_body or {}
        description = self.response_body.get("description", "Unknown error")
        super().__init__(f"API error {status_code}: {description}")


class ResponseError(TeleloopError):
    """Raised when a 2xx response carries an ``ok: false`` envelope.

    Attributes:
        description: Human-readable reason reported by the API.
        error_code: Optional numeric error code from the envelope.
    """

    def __init__(self, description: Optional[str], error_code: Optional[int] = None) -> None:
        self.description = description or "Unknown error"
        self.error_code = error_code
        super().__init__(f"teleloop: {self.description}")


class FetchError(TeleloopError):
    """Raised when a batch of updates cannot be fetched or decoded.

    The underlying exception is always chained as ``__cause__``.
    """

    def __init__(self, offset: int, detail: str) -> None:
        self.offset = offset
        self.detail = detail
        super().__init__(f"failed to get updates (offset={offset}): {detail}")
