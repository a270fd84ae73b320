"""
Response decoding shared by the operation services.
"""

from __future__ import annotations
from typing import Any, Type, TypeVar

from ..domain.errors import ResponseParseError
from ..domain.models.base import WireModel

M = TypeVar('M', bound=WireModel)


def decode_json(response: Any, what: str) -> Any:
    """Decode a 2xx response body as JSON or raise ResponseParseError."""
    try:
        return response.json()
    except ValueError as e:
        raise ResponseParseError(
            f"Failed to deserialize {what} response: body is not JSON",
            raw_response=_text(response),
        ) from e


def decode_model(response: Any, model: Type[M], what: str) -> M:
    """Decode a 2xx response body into model or raise ResponseParseError."""
    payload = decode_json(response, what)
    try:
        return model.from_dict(payload)
    except ResponseParseError as e:
        raise ResponseParseError(
            f"Failed to deserialize {what} response: {e}",
            raw_response=_text(response),
        ) from e


def _text(response: Any) -> Any:
    return getattr(response, 'text', None)
