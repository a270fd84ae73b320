"""
Cerebras Cloud client - facade over the chat, text-completion and models services.

Use create_client() / create_async_client() to build a ready client from
settings, or construct CerebrasClient directly around your own transport.
"""

from __future__ import annotations
import logging
import threading
from typing import Any, Iterator, List, Optional, Union, AsyncIterator

import httpx

from .application.chat_service import AsyncChatCompletionService, ChatCompletionService
from .application.completion_service import AsyncCompletionService, CompletionService
from .application.models_service import AsyncModelsService, ModelsService
from .domain.errors import ConfigurationError, InvalidArgumentError
from .domain.interfaces.transport import AsyncChunkStream, AsyncTransport, ChunkStream, Transport
from .domain.models.chat import ChatCompletionChunk, ChatCompletionRequest, ChatCompletionResponse
from .domain.models.completion import TextCompletionChunk, TextCompletionRequest, TextCompletionResponse
from .domain.models.prompt import CompletionChunk, CompletionRequest, CompletionResponse
from .domain.models.shared import Model
from .infrastructure.config.settings import API_KEY_ENV, CerebrasSettings, get_settings
from .infrastructure.http.transport import AsyncHttpTransport, HttpTransport
from .legacy import compat

PromptLike = Union[CompletionRequest, str]


def _silent_logger() -> logging.Logger:
    logger = logging.getLogger('cerebras_cloud.silent')
    logger.propagate = False
    logger.setLevel(logging.CRITICAL + 1)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def _resolve_logger(settings: CerebrasSettings, logger: Optional[logging.Logger]) -> logging.Logger:
    if not settings.enable_logging:
        return _silent_logger()
    return logger or logging.getLogger(__name__)


def _as_prompt_request(request: PromptLike) -> CompletionRequest:
    if isinstance(request, str):
        return CompletionRequest(prompt=request)
    if request is None:
        raise InvalidArgumentError("request is required")
    return request


def resolve_settings(settings: Optional[CerebrasSettings] = None, **overrides: Any) -> CerebrasSettings:
    """Apply overrides and resolve the API key once.

    Raises ConfigurationError when neither the settings nor the
    CEREBRAS_API_KEY environment variable provide a key.
    """
    base = settings or get_settings()
    values = base.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    resolved = CerebrasSettings(**values)
    api_key = resolved.resolved_api_key()
    if not api_key:
        raise ConfigurationError(
            f"ApiKey is required. Set it in configuration or via {API_KEY_ENV} environment variable."
        )
    return resolved.model_copy(update={'api_key': api_key})


class CerebrasClient:
    """Blocking client exposing every API operation.

    Attributes:
        chat: ChatCompletionService for POST chat/completions
        completions: CompletionService for POST completions
        models: ModelsService for GET models
    """

    def __init__(
        self,
        transport: Transport,
        settings: Optional[CerebrasSettings] = None,
        logger: Optional[logging.Logger] = None,
        chat: Optional[ChatCompletionService] = None,
        completions: Optional[CompletionService] = None,
        models: Optional[ModelsService] = None,
    ):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._settings = settings or get_settings()
        self.logger = logger or logging.getLogger(__name__)
        self.chat = chat or ChatCompletionService(transport, logger=self.logger)
        self.completions = completions or CompletionService(transport, logger=self.logger)
        self.models = models or ModelsService(transport, logger=self.logger)

    @property
    def settings(self) -> CerebrasSettings:
        return self._settings

    # Chat
    def create_chat_completion(
        self,
        request: ChatCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChatCompletionResponse:
        return self.chat.create(request, cancel_event=cancel_event)

    def create_chat_completion_stream(
        self,
        request: ChatCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChunkStream[ChatCompletionChunk]:
        return self.chat.create_stream(request, cancel_event=cancel_event)

    # Text completions
    def create_text_completion(
        self,
        request: TextCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> TextCompletionResponse:
        return self.completions.create(request, cancel_event=cancel_event)

    def create_text_completion_stream(
        self,
        request: TextCompletionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ChunkStream[TextCompletionChunk]:
        return self.completions.create_stream(request, cancel_event=cancel_event)

    # Models
    def list_models(self, cancel_event: Optional[threading.Event] = None) -> List[Model]:
        return self.models.list(cancel_event=cancel_event)

    def get_model(self, model_id: str, cancel_event: Optional[threading.Event] = None) -> Model:
        """Find a model in the listing; ModelNotFoundError (404) when absent."""
        return self.models.get(model_id, cancel_event=cancel_event)

    def retrieve_model(self, model_id: str, cancel_event: Optional[threading.Event] = None) -> Model:
        return self.models.retrieve(model_id, cancel_event=cancel_event)

    # Single-prompt API
    def _to_chat(self, request: PromptLike, stream: bool) -> ChatCompletionRequest:
        return compat.to_chat_request(
            _as_prompt_request(request),
            default_model=self._settings.default_model,
            default_max_tokens=self._settings.default_max_tokens,
            default_temperature=self._settings.default_temperature,
            stream=stream,
        )

    def generate_completion(
        self,
        request: PromptLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> CompletionResponse:
        """Prompt in, text out. Sent as a one-message chat completion."""
        response = self.chat.create(self._to_chat(request, stream=False), cancel_event=cancel_event)
        return compat.to_completion_response(response)

    def generate_completion_stream(
        self,
        request: PromptLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[CompletionChunk]:
        """Stream of flat text chunks from the first choice.

        The connection is opened before this returns, so HTTP errors raise
        here rather than on first iteration.
        """
        stream = self.chat.create_stream(self._to_chat(request, stream=True), cancel_event=cancel_event)
        return self._flatten(stream)

    @staticmethod
    def _flatten(stream: ChunkStream[ChatCompletionChunk]) -> Iterator[CompletionChunk]:
        try:
            yield from compat.to_completion_chunks(stream)
        finally:
            stream.close()

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> CerebrasClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncCerebrasClient:
    """asyncio client exposing every API operation."""

    def __init__(
        self,
        transport: AsyncTransport,
        settings: Optional[CerebrasSettings] = None,
        logger: Optional[logging.Logger] = None,
        chat: Optional[AsyncChatCompletionService] = None,
        completions: Optional[AsyncCompletionService] = None,
        models: Optional[AsyncModelsService] = None,
    ):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._settings = settings or get_settings()
        self.logger = logger or logging.getLogger(__name__)
        self.chat = chat or AsyncChatCompletionService(transport, logger=self.logger)
        self.completions = completions or AsyncCompletionService(transport, logger=self.logger)
        self.models = models or AsyncModelsService(transport, logger=self.logger)

    @property
    def settings(self) -> CerebrasSettings:
        return self._settings

    async def create_chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        return await self.chat.create(request)

    async def create_chat_completion_stream(
        self, request: ChatCompletionRequest
    ) -> AsyncChunkStream[ChatCompletionChunk]:
        return await self.chat.create_stream(request)

    async def create_text_completion(self, request: TextCompletionRequest) -> TextCompletionResponse:
        return await self.completions.create(request)

    async def create_text_completion_stream(
        self, request: TextCompletionRequest
    ) -> AsyncChunkStream[TextCompletionChunk]:
        return await self.completions.create_stream(request)

    async def list_models(self) -> List[Model]:
        return await self.models.list()

    async def get_model(self, model_id: str) -> Model:
        return await self.models.get(model_id)

    async def retrieve_model(self, model_id: str) -> Model:
        return await self.models.retrieve(model_id)

    def _to_chat(self, request: PromptLike, stream: bool) -> ChatCompletionRequest:
        return compat.to_chat_request(
            _as_prompt_request(request),
            default_model=self._settings.default_model,
            default_max_tokens=self._settings.default_max_tokens,
            default_temperature=self._settings.default_temperature,
            stream=stream,
        )

    async def generate_completion(self, request: PromptLike) -> CompletionResponse:
        response = await self.chat.create(self._to_chat(request, stream=False))
        return compat.to_completion_response(response)

    async def generate_completion_stream(self, request: PromptLike) -> AsyncIterator[CompletionChunk]:
        """Async generator of flat text chunks; connects on first iteration."""
        stream = await self.chat.create_stream(self._to_chat(request, stream=True))
        try:
            async for chunk in compat.ato_completion_chunks(stream):
                yield chunk
        finally:
            await stream.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> AsyncCerebrasClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_client(
    settings: Optional[CerebrasSettings] = None,
    http_client: Optional[httpx.Client] = None,
    logger: Optional[logging.Logger] = None,
    **overrides: Any,
) -> CerebrasClient:
    """Build a CerebrasClient from settings (defaults: environment / .env).

    Keyword overrides replace individual settings, e.g.
    ``create_client(api_key='csk-...', max_retries=5)``.
    """
    resolved = resolve_settings(settings, **overrides)
    log = _resolve_logger(resolved, logger)
    transport = HttpTransport.from_settings(resolved, client=http_client, logger=log)
    log.debug(f"Cerebras client initialized - Base URL: {resolved.base_url}, Model: {resolved.default_model}")
    return CerebrasClient(transport, settings=resolved, logger=log)


def create_async_client(
    settings: Optional[CerebrasSettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    logger: Optional[logging.Logger] = None,
    **overrides: Any,
) -> AsyncCerebrasClient:
    """asyncio counterpart of create_client."""
    resolved = resolve_settings(settings, **overrides)
    log = _resolve_logger(resolved, logger)
    transport = AsyncHttpTransport.from_settings(resolved, client=http_client, logger=log)
    log.debug(f"Async Cerebras client initialized - Base URL: {resolved.base_url}, Model: {resolved.default_model}")
    return AsyncCerebrasClient(transport, settings=resolved, logger=log)
