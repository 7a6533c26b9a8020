"""Exception hierarchy shared by the store client and the MCP layer."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "TableStoreError",
    "ConfigurationError",
    "ToolValidationError",
    "NotFoundError",
    "BackendError",
    "BackendHTTPError",
    "ResponseShapeError",
    "redact",
]

_REDACTED = "[REDACTED]"


def redact(text: str, secret: Optional[str]) -> str:
    """Replace every occurrence of *secret* in *text*."""

    if not text or not secret:
        return text
    return text.replace(secret, _REDACTED)


class TableStoreError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(TableStoreError):
    """Raised when the server cannot start with the given configuration."""


class ToolValidationError(TableStoreError):
    """Tool arguments did not match the tool's input schema."""


class NotFoundError(TableStoreError):
    """A resource URI, table or tool name could not be resolved."""


class BackendError(TableStoreError):
    """The record store answered with something unusable."""


class BackendHTTPError(BackendError):
    """Non-2xx response from the record store API."""

    def __init__(self, status_code: int, reason: str, body: str, *, hint: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.hint = hint
        message = f"API Error: {status_code} {reason}. Response: {body}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


class ResponseShapeError(BackendError):
    """Response body was not JSON or did not match the expected shape."""
