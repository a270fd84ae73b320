"""
Error normalization - turns failed HTTP responses and transport exceptions
into CerebrasApiError.
"""

from __future__ import annotations
import json
from typing import Any, Optional, Tuple

from ...domain.errors import CerebrasApiError


def parse_error_body(body: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Best-effort parse of {"error": {"message", "type", "code"}}.

    Returns (message, type, code). A body that is not a JSON object yields
    the raw text as message; an object without an error entry yields all None.
    """
    if not body or not body.strip():
        return None, None, None
    try:
        payload: Any = json.loads(body)
    except ValueError:
        return body, None, None
    if not isinstance(payload, dict):
        return body, None, None
    error = payload.get('error')
    if error is None:
        return None, None, None
    if isinstance(error, str):
        return error, None, None
    if not isinstance(error, dict):
        return body, None, None
    return _opt_str(error.get('message')), _opt_str(error.get('type')), _opt_str(error.get('code'))


def error_from_response(status_code: int, body: str) -> CerebrasApiError:
    """Build the normalized error for a non-2xx response."""
    message, error_type, error_code = parse_error_body(body)
    return CerebrasApiError(
        message or f"Request failed with status {status_code}",
        status_code=status_code,
        error_code=error_code,
        error_type=error_type,
        raw_response=body or None,
    )


def error_from_exception(exc: BaseException) -> CerebrasApiError:
    """Build the normalized error for a failure with no HTTP response.

    The caller raises it ``from exc`` so the original exception is kept as
    the cause.
    """
    detail = str(exc) or type(exc).__name__
    return CerebrasApiError(f"Network error occurred: {detail}")


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)
