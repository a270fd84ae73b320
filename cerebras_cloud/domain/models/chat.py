"""
Chat completion domain models - requests, responses, stream chunks and tool calling.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import json

from .base import WireModel
from .shared import Usage


class MessageRole(str, Enum):
    """Message roles accepted by the chat endpoint."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class FunctionCall(WireModel):
    """Function name and JSON-encoded arguments chosen by the model."""
    name: str
    arguments: str = ""


@dataclass(frozen=True)
class ToolCall(WireModel):
    """A tool invocation requested by the assistant."""
    NESTED = {"function": (FunctionCall, False)}

    id: str
    function: FunctionCall
    type: str = "function"

    def parsed_arguments(self) -> Dict[str, Any]:
        """Decode the function arguments; blank arguments decode to {}."""
        raw = self.function.arguments
        if not raw or not raw.strip():
            return {}
        value = json.loads(raw)
        return value if isinstance(value, dict) else {"value": value}


@dataclass(frozen=True)
class ChatMessage(WireModel):
    """Represents a single message in a conversation."""
    NESTED = {"tool_calls": (ToolCall, True)}

    role: str
    content: Optional[str] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.SYSTEM.value, content=content)

    @classmethod
    def user(cls, content: str, name: Optional[str] = None) -> ChatMessage:
        return cls(role=MessageRole.USER.value, content=content, name=name)

    @classmethod
    def assistant(cls, content: Optional[str] = None, tool_calls: Optional[List[ToolCall]] = None) -> ChatMessage:
        return cls(role=MessageRole.ASSISTANT.value, content=content, tool_calls=tool_calls)

    @classmethod
    def tool_result(cls, tool_call_id: str, content: str) -> ChatMessage:
        """Message carrying a tool's output back to the model."""
        return cls(role=MessageRole.TOOL.value, content=content, tool_call_id=tool_call_id)


@dataclass(frozen=True)
class FunctionDefinition(WireModel):
    """Schema of a callable function exposed to the model."""
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Tool(WireModel):
    """Tool definition sent with a chat request."""
    NESTED = {"function": (FunctionDefinition, False)}

    function: FunctionDefinition
    type: str = "function"

    @classmethod
    def function_tool(
        cls,
        name: str,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Tool:
        return cls(function=FunctionDefinition(name=name, description=description, parameters=parameters))


@dataclass(frozen=True)
class ResponseFormat(WireModel):
    """Output format constraint, e.g. {"type": "json_object"}."""
    type: str = "text"


@dataclass(frozen=True)
class ChatCompletionRequest(WireModel):
    """Body of POST chat/completions."""
    NESTED = {
        "messages": (ChatMessage, True),
        "tools": (Tool, True),
        "response_format": (ResponseFormat, False),
    }

    model: str
    messages: List[ChatMessage]
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    stream: bool = False
    n: Optional[int] = None
    stop: Optional[List[str]] = None
    response_format: Optional[ResponseFormat] = None
    user: Optional[str] = None
    # "none" | "auto" | "required" or {"type": "function", "function": {"name": ...}}
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    tools: Optional[List[Tool]] = None

    def with_stream(self, stream: bool) -> ChatCompletionRequest:
        return replace(self, stream=stream)


@dataclass(frozen=True)
class ChatChoice(WireModel):
    """One completion alternative of a unary chat response."""
    NESTED = {"message": (ChatMessage, False)}

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


@dataclass(frozen=True)
class ChatCompletionResponse(WireModel):
    """Unary chat completion result."""
    WIRE_NAMES = {"object_type": "object"}
    NESTED = {"choices": (ChatChoice, True), "usage": (Usage, False)}

    id: str
    created: int
    model: str
    choices: List[ChatChoice]
    object_type: str = "chat.completion"
    usage: Optional[Usage] = None
    system_fingerprint: Optional[str] = None

    @property
    def content(self) -> str:
        """Text of the first choice, or '' when there is none."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""

    @property
    def tool_calls(self) -> List[ToolCall]:
        if not self.choices:
            return []
        return list(self.choices[0].message.tool_calls or [])


@dataclass(frozen=True)
class ChatMessageDelta(WireModel):
    """Incremental message fragment carried by a stream chunk."""
    NESTED = {"tool_calls": (ToolCall, True)}

    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


@dataclass(frozen=True)
class ChatStreamChoice(WireModel):
    NESTED = {"delta": (ChatMessageDelta, False)}

    index: int
    delta: ChatMessageDelta = field(default_factory=ChatMessageDelta)
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


@dataclass(frozen=True)
class ChatCompletionChunk(WireModel):
    """One server-sent event of a streaming chat completion."""
    WIRE_NAMES = {"object_type": "object"}
    NESTED = {"choices": (ChatStreamChoice, True), "usage": (Usage, False)}

    id: str
    created: int
    model: str
    choices: List[ChatStreamChoice]
    object_type: str = "chat.completion.chunk"
    system_fingerprint: Optional[str] = None
    usage: Optional[Usage] = None
