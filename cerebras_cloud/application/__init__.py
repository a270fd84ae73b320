"""Application layer - operation services binding the transport to API endpoints."""

from .chat_service import AsyncChatCompletionService, ChatCompletionService
from .completion_service import AsyncCompletionService, CompletionService
from .models_service import AsyncModelsService, ModelsService

__all__ = [
    "AsyncChatCompletionService",
    "AsyncCompletionService",
    "AsyncModelsService",
    "ChatCompletionService",
    "CompletionService",
    "ModelsService",
]
