"""
Cerebras Cloud - Python client for the Cerebras Cloud inference API.
"""

__version__ = "1.0.0"
__author__ = "Cerebras Cloud Python SDK Team"

__all__ = [
    "CerebrasClient",
    "AsyncCerebrasClient",
    "create_client",
    "create_async_client",
    "CerebrasSettings",
    "CerebrasError",
    "CerebrasApiError",
    "ModelNotFoundError",
    "RequestCancelledError",
    "ResponseParseError",
    "InvalidArgumentError",
    "ConfigurationError",
]

_CLIENT_EXPORTS = {"CerebrasClient", "AsyncCerebrasClient", "create_client", "create_async_client"}
_ERROR_EXPORTS = {
    "CerebrasError",
    "CerebrasApiError",
    "ModelNotFoundError",
    "RequestCancelledError",
    "ResponseParseError",
    "InvalidArgumentError",
    "ConfigurationError",
}


# Lazy attribute access so `import cerebras_cloud.domain...` does not pull in httpx.
def __getattr__(name: str):  # pragma: no cover - simple lazy loader
    if name in _CLIENT_EXPORTS:
        from . import client
        return getattr(client, name)
    if name == "CerebrasSettings":
        from .infrastructure.config.settings import CerebrasSettings
        return CerebrasSettings
    if name in _ERROR_EXPORTS:
        from .domain import errors
        return getattr(errors, name)
    raise AttributeError(f"module 'cerebras_cloud' has no attribute {name!r}")
