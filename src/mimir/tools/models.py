"""Data models for tools and their invocation."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from mimir.runtime.execution import Executor


class ToolSource(str, Enum):
    BUILT_IN = "built-in"
    CUSTOM = "custom"


class ToolMetadata(BaseModel):
    """Registry bookkeeping for a tool."""

    source: ToolSource = ToolSource.BUILT_IN
    enabled: bool = True
    token_cost: int = Field(default=0, description="Estimated tokens the schema adds to a prompt.")
    version: str | None = None
    tags: list[str] = Field(default_factory=list)


class ToolDefinition(BaseModel):
    """Name, description and argument model of a tool."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: type[BaseModel]
    metadata: ToolMetadata = Field(default_factory=ToolMetadata)


class ToolResult(BaseModel):
    """Outcome of a tool invocation.  Failures are values, not exceptions."""

    success: bool
    output: Any = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ToolContext(BaseModel):
    """Ambient information handed to a tool on every call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    conversation_id: str | None = None
    agent_id: str | None = None
    working_directory: str | None = None
    executor: Any = Field(default=None, description="The Executor performing side effects.")
    metadata: dict[str, Any] = Field(default_factory=dict)

    def require_executor(self) -> Executor:
        if self.executor is None:
            raise RuntimeError("Executor not available in context")
        return self.executor
