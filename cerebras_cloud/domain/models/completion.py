"""
Text completion domain models (POST completions).
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Union

from .base import WireModel
from .shared import Usage


@dataclass(frozen=True)
class TextCompletionRequest(WireModel):
    """Body of POST completions. Prompt and stop accept a string or a list of strings."""
    model: str
    prompt: Union[str, List[str]]
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    stream: bool = False
    logprobs: Optional[int] = None
    echo: Optional[bool] = None
    stop: Optional[Union[str, List[str]]] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    best_of: Optional[int] = None
    logit_bias: Optional[Dict[str, float]] = None
    user: Optional[str] = None
    suffix: Optional[str] = None
    seed: Optional[int] = None

    def with_stream(self, stream: bool) -> TextCompletionRequest:
        return replace(self, stream=stream)


@dataclass(frozen=True)
class LogprobResult(WireModel):
    tokens: Optional[List[str]] = None
    token_logprobs: Optional[List[Optional[float]]] = None
    top_logprobs: Optional[List[Optional[Dict[str, float]]]] = None
    text_offset: Optional[List[int]] = None


@dataclass(frozen=True)
class TextCompletionChoice(WireModel):
    NESTED = {"logprobs": (LogprobResult, False)}

    text: str
    index: int
    logprobs: Optional[LogprobResult] = None
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class TextCompletionResponse(WireModel):
    """Unary text completion result."""
    WIRE_NAMES = {"object_type": "object"}
    NESTED = {"choices": (TextCompletionChoice, True), "usage": (Usage, False)}

    id: str
    created: int
    model: str
    choices: List[TextCompletionChoice]
    object_type: str = "text_completion"
    usage: Optional[Usage] = None

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""


@dataclass(frozen=True)
class TextCompletionStreamChoice(WireModel):
    NESTED = {"logprobs": (LogprobResult, False)}

    index: int
    text: str = ""
    logprobs: Optional[LogprobResult] = None
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class TextCompletionChunk(WireModel):
    """One server-sent event of a streaming text completion."""
    WIRE_NAMES = {"object_type": "object"}
    NESTED = {"choices": (TextCompletionStreamChoice, True)}

    id: str
    created: int
    model: str
    choices: List[TextCompletionStreamChoice]
    object_type: str = "text_completion"
