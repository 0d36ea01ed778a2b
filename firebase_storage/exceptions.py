"""Custom exception hierarchy for the Firebase Storage client."""

from __future__ import annotations

from typing import Any

NO_RESPONSE = "N/A"


class FirebaseStorageError(Exception):
    """Base exception for all client-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FirebaseStorageError):
    """Raised when configuration is invalid or missing."""
    pass


class StorageError(FirebaseStorageError):
    """Raised when a request against the storage endpoint fails.

    Carries the URL that was being invoked, the raw response text (``"N/A"``
    when nothing was received) and the underlying transport, status or parse
    failure.
    """

    def __init__(
        self,
        request_url: str,
        response_body: str | None = NO_RESPONSE,
        cause: BaseException | None = None,
    ) -> None:
        self.request_url = request_url
        self.response_body = NO_RESPONSE if response_body is None else response_body
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Storage request to {request_url} failed{reason}",
            {"request_url": request_url, "response_body": self.response_body},
        )
        if cause is not None:
            self.__cause__ = cause


class MissingFieldError(FirebaseStorageError, LookupError):
    """Raised when a response lacks a field the operation depends on."""

    def __init__(self, field: str, payload: Any = None) -> None:
        self.field = field
        self.payload = payload
        super().__init__(
            f"Could not extract '{field}' property from response. Response: {payload!r}",
            {"field": field},
        )


__all__ = [
    "NO_RESPONSE",
    "FirebaseStorageError",
    "ConfigurationError",
    "StorageError",
    "MissingFieldError",
]
