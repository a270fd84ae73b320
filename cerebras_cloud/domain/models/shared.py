"""
Models shared by several endpoints: token usage and model descriptors.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .base import WireModel


@dataclass(frozen=True)
class Usage(WireModel):
    """Token accounting returned with unary completions."""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self):
        data = super().to_dict()
        data["total_tokens"] = self.total_tokens
        return data


@dataclass(frozen=True)
class Model(WireModel):
    """A model available to the account."""
    WIRE_NAMES = {"context_window": "context_length", "object_type": "object"}

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    context_window: Optional[int] = None
    is_available: bool = True
    owned_by: Optional[str] = None
    created: Optional[int] = None
    object_type: str = "model"

    def __post_init__(self):
        # Listings often omit a display name; fall back to the id
        if not self.name:
            object.__setattr__(self, "name", self.id)
