"""ReasoningProvider protocol — the single contract the agent talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mimir.core.interface.models import ChatMessage, ChatResponse
    from mimir.core.interface.streaming import ChunkChannel


@runtime_checkable
class ReasoningProvider(Protocol):
    """A language model the agent reasons with.

    ``tools`` are OpenAI-compatible function schemas as produced by
    :meth:`~mimir.tools.ToolRegistry.get_schemas`.
    """

    async def chat(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None = None
    ) -> ChatResponse:
        """Return the model's complete reply."""
        ...

    def stream_chat(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None = None
    ) -> ChunkChannel:
        """Start a streamed reply and return its chunk channel."""
        ...

    def count_tokens(self, text: str) -> int: ...

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float: ...
