"""
Chat service - Application service binding the transport to POST chat/completions.
"""

from __future__ import annotations
import logging
import threading
from typing import Optional

from ..domain.errors import InvalidArgumentError
from ..domain.interfaces.transport import AsyncChunkStream, AsyncTransport, ChunkStream, OutboundRequest, Transport
from ..domain.models.chat import ChatCompletionChunk, ChatCompletionRequest, ChatCompletionResponse
from .base import decode_model

CHAT_COMPLETIONS_PATH = 'chat/completions'


def build_chat_request(request: ChatCompletionRequest, stream: bool) -> OutboundRequest:
    if request is None:
        raise InvalidArgumentError("request is required")
    if not request.messages:
        raise InvalidArgumentError("messages must not be empty")
    return OutboundRequest('POST', CHAT_COMPLETIONS_PATH, request.with_stream(stream).to_dict())


def _log_created(logger: logging.Logger, response: ChatCompletionResponse) -> None:
    tokens = response.usage.total_tokens if response.usage else 0
    logger.info(f"Chat completion created successfully. Model: {response.model}, Tokens: {tokens}")


class ChatCompletionService:
    """Chat completions over a blocking transport."""

    def __init__(self, transport: Transport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def create(
        self,
        request: ChatCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatCompletionResponse:
        """Unary chat completion; the request's stream flag is forced off."""
        outbound = build_chat_request(request, stream=False)
        self._logger.debug(f"Creating chat completion with model {request.model}")
        response = self._transport.send(outbound, cancel_event=cancel_event)
        result = decode_model(response, ChatCompletionResponse, 'chat completion')
        _log_created(self._logger, result)
        return result

    def create_stream(
        self,
        request: ChatCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChunkStream[ChatCompletionChunk]:
        """Streaming chat completion; the request's stream flag is forced on."""
        outbound = build_chat_request(request, stream=True)
        self._logger.debug(f"Creating streaming chat completion with model {request.model}")
        return self._transport.stream(outbound, ChatCompletionChunk.from_dict, cancel_event=cancel_event)


class AsyncChatCompletionService:
    """Chat completions over an asyncio transport."""

    def __init__(self, transport: AsyncTransport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    async def create(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        outbound = build_chat_request(request, stream=False)
        self._logger.debug(f"Creating chat completion with model {request.model}")
        response = await self._transport.send(outbound)
        result = decode_model(response, ChatCompletionResponse, 'chat completion')
        _log_created(self._logger, result)
        return result

    async def create_stream(self, request: ChatCompletionRequest) -> AsyncChunkStream[ChatCompletionChunk]:
        outbound = build_chat_request(request, stream=True)
        self._logger.debug(f"Creating streaming chat completion with model {request.model}")
        return await self._transport.stream(outbound, ChatCompletionChunk.from_dict)
