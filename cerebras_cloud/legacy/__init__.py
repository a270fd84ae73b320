"""Single-prompt compatibility helpers."""

from .compat import (
    ato_completion_chunks,
    join_text,
    to_chat_request,
    to_completion_chunk,
    to_completion_chunks,
    to_completion_response,
)

__all__ = [
    'ato_completion_chunks',
    'join_text',
    'to_chat_request',
    'to_completion_chunk',
    'to_completion_chunks',
    'to_completion_response',
]
