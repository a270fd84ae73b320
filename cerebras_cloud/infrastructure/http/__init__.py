"""HTTP transport package."""

from .retry import RetryPolicy, RETRYABLE_STATUS_CODES
from .stream import AsyncSSEStream, SSEStream
from .transport import AsyncHttpTransport, HttpTransport, OutboundRequest

__all__ = [
    'AsyncHttpTransport',
    'AsyncSSEStream',
    'HttpTransport',
    'OutboundRequest',
    'RETRYABLE_STATUS_CODES',
    'RetryPolicy',
    'SSEStream',
]
