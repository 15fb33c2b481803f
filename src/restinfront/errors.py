"""
Errors Module.

Defines the exception taxonomy raised by the library. Fatal configuration and
programming errors (`SchemaError`, `WrongCardinality`, `ConfigurationError`)
propagate to the caller; `FetchError` is routed to the `on_fetch_error` hook and
recorded on the instance state instead of propagating.
"""

from typing import Any, Optional


class RestinfrontError(Exception):
    """Root of every error raised by the library."""

    def __init__(self, message: str):
        super().__init__(f"[Restinfront] {message}")


class SchemaError(RestinfrontError):
    """Raised at model registration when a schema is malformed."""


class UnknownFieldType(RestinfrontError):
    """Raised when a field type name was never registered."""


class WrongCardinality(RestinfrontError):
    """Raised when a collection-only operation is used on an entity, or vice versa."""


class ConfigurationError(RestinfrontError):
    """Raised before any network activity when `base_url` or `endpoint` is missing."""


class FetchError(RestinfrontError):
    """
    A failed request: non-success status, missing token, transport failure or timeout.

    Attributes:
        response (Optional[Any]): The transport response, when one was received.
        status (Optional[int]): The HTTP status code, when one was received.
    """

    def __init__(self, message: str, response: Optional[Any] = None):
        super().__init__(message)
        self.response = response
        self.status: Optional[int] = getattr(response, "status", None)


class FetchTimeoutError(FetchError):
    """The request did not complete before the configured timeout."""
