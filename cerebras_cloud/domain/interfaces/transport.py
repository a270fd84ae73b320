"""
Transport protocol interfaces.
Defines the contract the operation services need from the HTTP layer.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Iterator, Optional, Protocol, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class OutboundRequest:
    """Logical request: rebuilt into a fresh httpx.Request on every attempt."""
    method: str
    path: str
    body: Optional[Dict[str, Any]] = None


class ChunkStream(Protocol[T]):
    """Single-pass stream of decoded chunks that owns a live connection."""

    def __iter__(self) -> Iterator[T]:
        ...

    def __next__(self) -> T:
        ...

    def close(self) -> None:
        ...


class AsyncChunkStream(Protocol[T]):
    """Async single-pass stream of decoded chunks."""

    def __aiter__(self) -> AsyncIterator[T]:
        ...

    async def __anext__(self) -> T:
        ...

    async def aclose(self) -> None:
        ...


class Transport(Protocol):
    """Protocol for blocking transports."""

    def send(self, request: OutboundRequest, cancel_event: Optional[threading.Event] = None) -> Any:
        """Send a unary request and return the 2xx response."""
        ...

    def stream(
        self,
        request: OutboundRequest,
        decode: Callable[[Any], T],
        cancel_event: Optional[threading.Event] = None,
    ) -> ChunkStream[T]:
        """Open a streaming request."""
        ...

    def close(self) -> None:
        ...


class AsyncTransport(Protocol):
    """Protocol for asyncio transports."""

    async def send(self, request: OutboundRequest) -> Any:
        ...

    async def stream(self, request: OutboundRequest, decode: Callable[[Any], T]) -> AsyncChunkStream[T]:
        ...

    async def aclose(self) -> None:
        ...
