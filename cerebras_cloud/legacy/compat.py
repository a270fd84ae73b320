"""
Single-prompt compatibility - maps the older prompt -> text calls onto chat completions.
Pure functions; the facade wires them to the chat service.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, Optional

from ..domain.errors import InvalidArgumentError
from ..domain.models.chat import ChatCompletionChunk, ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from ..domain.models.prompt import CompletionChunk, CompletionRequest, CompletionResponse


def to_chat_request(
    request: CompletionRequest,
    default_model: str,
    default_max_tokens: Optional[int] = None,
    default_temperature: Optional[float] = None,
    stream: bool = False,
) -> ChatCompletionRequest:
    """Wrap the prompt in a single user message; unset values take the defaults."""
    if request is None or request.prompt is None:
        raise InvalidArgumentError("prompt is required")
    return ChatCompletionRequest(
        model=request.model or default_model,
        messages=[ChatMessage.user(request.prompt)],
        max_tokens=request.max_tokens if request.max_tokens is not None else default_max_tokens,
        temperature=request.temperature if request.temperature is not None else default_temperature,
        top_p=request.top_p,
        seed=request.seed,
        stream=stream,
    )


def to_completion_response(response: ChatCompletionResponse) -> CompletionResponse:
    """Flatten a chat response to the first choice's text."""
    first = response.choices[0] if response.choices else None
    return CompletionResponse(
        id=response.id,
        model=response.model,
        text=(first.message.content or "") if first else "",
        finish_reason=first.finish_reason if first else None,
        usage=response.usage,
        created_at=datetime.fromtimestamp(response.created, tz=timezone.utc),
    )


def to_completion_chunk(chunk: ChatCompletionChunk) -> Optional[CompletionChunk]:
    """First choice's delta as a flat chunk; None for chunks without choices."""
    if not chunk.choices:
        return None
    choice = chunk.choices[0]
    return CompletionChunk(
        text=choice.delta.content or "",
        is_finished=choice.finish_reason is not None,
        finish_reason=choice.finish_reason,
    )


def to_completion_chunks(chunks: Iterable[ChatCompletionChunk]) -> Iterator[CompletionChunk]:
    for chunk in chunks:
        flat = to_completion_chunk(chunk)
        if flat is not None:
            yield flat


async def ato_completion_chunks(chunks: AsyncIterable[ChatCompletionChunk]) -> AsyncIterator[CompletionChunk]:
    async for chunk in chunks:
        flat = to_completion_chunk(chunk)
        if flat is not None:
            yield flat


def join_text(chunks: Iterable[CompletionChunk]) -> str:
    """Concatenate streamed text fragments."""
    return "".join(c.text for c in chunks)
