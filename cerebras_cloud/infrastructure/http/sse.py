"""
Server-sent event parsing for streaming completions.

Frames look like ``data: <json>`` separated by blank lines and end with
``data: [DONE]``. Malformed frames are logged and skipped so one bad event
does not abort an otherwise healthy stream.
"""

from __future__ import annotations
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Callable, Iterable, Iterator, Optional, TypeVar

from ...domain.errors import ResponseParseError

T = TypeVar('T')

DATA_PREFIX = 'data: '
DONE_SENTINEL = '[DONE]'

_logger = logging.getLogger(__name__)


def extract_data(line: str) -> Optional[str]:
    """Payload of a data line, or None for blank and non-data lines."""
    line = line.rstrip('\r\n')
    if not line.strip():
        return None
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):]


def decode_payload(
    payload: str,
    decode: Callable[[Any], T],
    logger: Optional[logging.Logger] = None,
) -> Optional[T]:
    """JSON-decode one payload and map it to the chunk type; None when malformed."""
    log = logger or _logger
    try:
        obj = json.loads(payload)
    except ValueError as e:
        log.warning(f"Skipping malformed SSE frame: {e} ({payload[:200]!r})")
        return None
    try:
        return decode(obj)
    except ResponseParseError as e:
        log.warning(f"Skipping SSE frame with unexpected shape: {e}")
        return None


def iter_chunks(
    lines: Iterable[str],
    decode: Callable[[Any], T],
    logger: Optional[logging.Logger] = None,
) -> Iterator[T]:
    """Yield decoded chunks in arrival order until [DONE] or end of input."""
    for line in lines:
        data = extract_data(line)
        if data is None:
            continue
        if data == DONE_SENTINEL:
            return
        item = decode_payload(data, decode, logger)
        if item is not None:
            yield item


async def aiter_chunks(
    lines: AsyncIterable[str],
    decode: Callable[[Any], T],
    logger: Optional[logging.Logger] = None,
) -> AsyncIterator[T]:
    """Async counterpart of iter_chunks."""
    async for line in lines:
        data = extract_data(line)
        if data is None:
            continue
        if data == DONE_SENTINEL:
            return
        item = decode_payload(data, decode, logger)
        if item is not None:
            yield item
