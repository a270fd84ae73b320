"""
Single-prompt models kept for callers of the older prompt -> text API.
They are mapped onto chat completions by cerebras_cloud.legacy.compat.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .shared import Usage


@dataclass(frozen=True)
class CompletionRequest:
    """Prompt-style request; unset sampling values fall back to settings defaults."""
    prompt: str
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    seed: Optional[int] = None


@dataclass(frozen=True)
class CompletionResponse:
    id: str
    model: str
    text: str
    created_at: datetime
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None


@dataclass(frozen=True)
class CompletionChunk:
    """Flattened stream fragment: text of the first choice's delta."""
    text: str
    is_finished: bool = False
    finish_reason: Optional[str] = None
