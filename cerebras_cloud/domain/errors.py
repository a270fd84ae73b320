"""
Error domain - the exception types every layer of the SDK raises.

Transport and HTTP failures are normalized into CerebrasApiError. Cancellation,
unusable 2xx bodies and bad caller input each have their own type so callers
can tell them apart.
"""

from __future__ import annotations
from typing import Optional


class CerebrasError(Exception):
    """Base class for all errors raised by the SDK."""


class CerebrasApiError(CerebrasError):
    """Normalized failure of an API call (HTTP non-2xx or network error)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        error_type: Optional[str] = None,
        raw_response: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.error_type = error_type
        self.raw_response = raw_response

    @property
    def is_network_error(self) -> bool:
        """True when no HTTP response was obtained at all."""
        return self.status_code is None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r}, "
            f"error_type={self.error_type!r}, error_code={self.error_code!r})"
        )


class ModelNotFoundError(CerebrasApiError):
    """Requested model id is not in the account's model listing."""

    def __init__(self, model_id: str):
        super().__init__(f"Model '{model_id}' not found", status_code=404, error_type="not_found_error")
        self.model_id = model_id


class RequestCancelledError(CerebrasError):
    """The caller asked the request to stop."""


class ResponseParseError(CerebrasError):
    """The server answered 2xx but the body does not match the expected shape."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response


class InvalidArgumentError(CerebrasError, ValueError):
    """Caller input rejected before any network call."""


class ConfigurationError(CerebrasError, ValueError):
    """Settings are incomplete or invalid."""
