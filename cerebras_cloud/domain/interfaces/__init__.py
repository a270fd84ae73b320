"""Domain interfaces package - Protocols for the transport port."""

from .transport import AsyncChunkStream, AsyncTransport, ChunkStream, OutboundRequest, Transport

__all__ = [
    "ChunkStream",
    "AsyncChunkStream",
    "OutboundRequest",
    "Transport",
    "AsyncTransport",
]
