"""Domain layer - wire models and error types with no I/O dependencies."""

from .errors import (
    CerebrasError,
    CerebrasApiError,
    ModelNotFoundError,
    RequestCancelledError,
    ResponseParseError,
    InvalidArgumentError,
    ConfigurationError,
)

__all__ = [
    "CerebrasError",
    "CerebrasApiError",
    "ModelNotFoundError",
    "RequestCancelledError",
    "ResponseParseError",
    "InvalidArgumentError",
    "ConfigurationError",
]
