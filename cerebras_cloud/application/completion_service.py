"""
Completion service - Application service binding the transport to POST completions.
"""

from __future__ import annotations
import logging
import threading
from typing import Optional

from ..domain.errors import InvalidArgumentError
from ..domain.interfaces.transport import AsyncChunkStream, AsyncTransport, ChunkStream, OutboundRequest, Transport
from ..domain.models.completion import TextCompletionChunk, TextCompletionRequest, TextCompletionResponse
from .base import decode_model

COMPLETIONS_PATH = 'completions'


def build_completion_request(request: TextCompletionRequest, stream: bool) -> OutboundRequest:
    if request is None:
        raise InvalidArgumentError("request is required")
    return OutboundRequest('POST', COMPLETIONS_PATH, request.with_stream(stream).to_dict())


class CompletionService:
    """Text completions over a blocking transport."""

    def __init__(self, transport: Transport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def create(
        self,
        request: TextCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> TextCompletionResponse:
        outbound = build_completion_request(request, stream=False)
        self._logger.debug(f"Creating text completion with model {request.model}")
        response = self._transport.send(outbound, cancel_event=cancel_event)
        result = decode_model(response, TextCompletionResponse, 'text completion')
        tokens = result.usage.total_tokens if result.usage else 0
        self._logger.info(f"Text completion created successfully. Model: {result.model}, Tokens: {tokens}")
        return result

    def create_stream(
        self,
        request: TextCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChunkStream[TextCompletionChunk]:
        outbound = build_completion_request(request, stream=True)
        self._logger.debug(f"Creating streaming text completion with model {request.model}")
        return self._transport.stream(outbound, TextCompletionChunk.from_dict, cancel_event=cancel_event)


class AsyncCompletionService:
    """Text completions over an asyncio transport."""

    def __init__(self, transport: AsyncTransport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    async def create(self, request: TextCompletionRequest) -> TextCompletionResponse:
        outbound = build_completion_request(request, stream=False)
        self._logger.debug(f"Creating text completion with model {request.model}")
        response = await self._transport.send(outbound)
        result = decode_model(response, TextCompletionResponse, 'text completion')
        tokens = result.usage.total_tokens if result.usage else 0
        self._logger.info(f"Text completion created successfully. Model: {result.model}, Tokens: {tokens}")
        return result

    async def create_stream(self, request: TextCompletionRequest) -> AsyncChunkStream[TextCompletionChunk]:
        outbound = build_completion_request(request, stream=True)
        self._logger.debug(f"Creating streaming text completion with model {request.model}")
        return await self._transport.stream(outbound, TextCompletionChunk.from_dict)
