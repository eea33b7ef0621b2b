"""Message and response models exchanged with a reasoning provider."""

from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single OpenAI-style chat message."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""

    @classmethod
    def system(cls, text: str) -> "ChatMessage":
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        return cls(role="user", content=text)

    @classmethod
    def assistant(cls, text: str) -> "ChatMessage":
        return cls(role="assistant", content=text)


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    name: str
    arguments: dict[str, Any] = {}


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ChatResponse(BaseModel):
    """The model's reply to one reasoning call."""

    content: str = ""
    tool_calls: list[ToolCall] = []
    usage: Usage | None = None
    metadata: dict[str, Any] = {}


class ChatChunk(BaseModel):
    """One element of a streamed reply.  ``done`` marks the terminal chunk."""

    content: str = ""
    done: bool = False
    error: str | None = None
