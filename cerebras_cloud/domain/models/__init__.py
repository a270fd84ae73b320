"""Domain models package."""

from .shared import Model, Usage
from .chat import (
    ChatChoice,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ChatMessageDelta,
    ChatStreamChoice,
    FunctionCall,
    FunctionDefinition,
    MessageRole,
    ResponseFormat,
    Tool,
    ToolCall,
)
from .completion import (
    LogprobResult,
    TextCompletionChoice,
    TextCompletionChunk,
    TextCompletionRequest,
    TextCompletionResponse,
    TextCompletionStreamChoice,
)
from .prompt import CompletionChunk, CompletionRequest, CompletionResponse

__all__ = [
    "Model",
    "Usage",
    "ChatChoice",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatMessageDelta",
    "ChatStreamChoice",
    "FunctionCall",
    "FunctionDefinition",
    "MessageRole",
    "ResponseFormat",
    "Tool",
    "ToolCall",
    "LogprobResult",
    "TextCompletionChoice",
    "TextCompletionChunk",
    "TextCompletionRequest",
    "TextCompletionResponse",
    "TextCompletionStreamChoice",
    "CompletionChunk",
    "CompletionRequest",
    "CompletionResponse",
]
