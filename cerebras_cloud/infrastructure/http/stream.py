"""
Chunk streams handed back by the transport once response headers arrive.

Each stream is single-pass and owns the underlying httpx response. The
response is closed when iteration ends or fails, when the caller closes the
stream (directly or through ``with`` / ``async with``), or when an
abandoned stream is garbage collected.
"""

from __future__ import annotations
import asyncio
import logging
import threading
from typing import Any, AsyncGenerator, AsyncIterator, Callable, Generator, Generic, Iterator, Optional, Set, TypeVar

import httpx

from ...domain.errors import RequestCancelledError
from .errors import error_from_exception
from .sse import aiter_chunks, iter_chunks

T = TypeVar('T')

# Close tasks scheduled by AsyncSSEStream.__del__, held until they finish
_pending_closes: Set[asyncio.Task] = set()


class SSEStream(Generic[T]):
    """Iterator of typed chunks read from a live streaming response."""

    def __init__(
        self,
        response: httpx.Response,
        decode: Callable[[Any], T],
        cancel_event: Optional[threading.Event] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.response = response
        self._decode = decode
        self._cancel_event = cancel_event
        self._logger = logger or logging.getLogger(__name__)
        self._iterator = self._iter_chunks()
        self._closed = False

    @property
    def request_id(self) -> Optional[str]:
        return self.response.request.headers.get('X-Request-Id')

    def _lines(self) -> Iterator[str]:
        for line in self.response.iter_lines():
            if self._cancel_event is not None and self._cancel_event.is_set():
                self._logger.warning("Stream was cancelled")
                raise RequestCancelledError("Stream was cancelled")
            yield line

    def _iter_chunks(self) -> Generator[T, None, None]:
        try:
            yield from iter_chunks(self._lines(), self._decode, self._logger)
        except httpx.RequestError as e:
            self._logger.error(f"Stream interrupted: {e}")
            raise error_from_exception(e) from e
        finally:
            self._release()

    def _release(self) -> None:
        if not self._closed:
            self._closed = True
            self.response.close()

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        return next(self._iterator)

    def close(self) -> None:
        """Stop reading and release the connection."""
        self._iterator.close()
        self._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __del__(self) -> None:
        # A stream dropped before its first next() never runs the generator's finally
        if not getattr(self, '_closed', True):
            self._release()

    def __enter__(self) -> SSEStream[T]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncSSEStream(Generic[T]):
    """Async iterator of typed chunks read from a live streaming response.

    Cancellation of the consuming task propagates as asyncio.CancelledError;
    the response is still closed.
    """

    def __init__(
        self,
        response: httpx.Response,
        decode: Callable[[Any], T],
        logger: Optional[logging.Logger] = None,
    ):
        self.response = response
        self._decode = decode
        self._logger = logger or logging.getLogger(__name__)
        self._iterator = self._iter_chunks()
        self._closed = False

    @property
    def request_id(self) -> Optional[str]:
        return self.response.request.headers.get('X-Request-Id')

    async def _iter_chunks(self) -> AsyncGenerator[T, None]:
        try:
            async for chunk in aiter_chunks(self.response.aiter_lines(), self._decode, self._logger):
                yield chunk
        except httpx.RequestError as e:
            self._logger.error(f"Stream interrupted: {e}")
            raise error_from_exception(e) from e
        finally:
            await self._release()

    async def _release(self) -> None:
        if not self._closed:
            self._closed = True
            await self.response.aclose()

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        return await self._iterator.__anext__()

    async def aclose(self) -> None:
        """Stop reading and release the connection."""
        await self._iterator.aclose()
        await self._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __del__(self) -> None:
        if getattr(self, '_closed', True):
            return
        self._closed = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning("Async stream was garbage collected outside an event loop without being closed")
            return
        self._logger.warning("Async stream was garbage collected without being closed; closing response")
        task = loop.create_task(self.response.aclose())
        _pending_closes.add(task)
        task.add_done_callback(_pending_closes.discard)

    async def __aenter__(self) -> AsyncSSEStream[T]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
