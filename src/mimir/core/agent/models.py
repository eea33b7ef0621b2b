"""Data models for the agent loop.

Everything except the stream callback is a plain pydantic model, so an
:class:`AgentState` survives ``model_dump()`` / ``model_validate()``
unchanged and can be handed to :meth:`Agent.resume` on a fresh instance.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_ITERATIONS = 20
DEFAULT_COMPLETION_PHRASES = ["task completed", "final answer"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AgentStatus(str, Enum):
    IDLE = "idle"
    REASONING = "reasoning"
    ACTING = "acting"
    OBSERVING = "observing"
    COMPLETED = "completed"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


class Budget(BaseModel):
    """Independent ceilings on a single run.  Unset means unlimited."""

    max_iterations: int | None = Field(default=None, ge=1)
    max_tokens: int | None = Field(default=None, ge=0)
    max_cost: float | None = Field(default=None, ge=0)
    max_duration_ms: float | None = Field(default=None, ge=0)


class AgentActionType(str, Enum):
    TOOL = "tool"
    FINISH = "finish"
    THINK = "think"
    ASK = "ask"


class AgentAction(BaseModel):
    """What the agent decided to do.  ``tool`` and ``input`` are set for tool actions."""

    type: AgentActionType
    tool: str | None = None
    input: dict[str, Any] = Field(default_factory=dict)
    thought: str = ""
    response: str | None = None


class AgentObservation(BaseModel):
    success: bool
    output: Any = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class AgentStep(BaseModel):
    """One reason-act-observe cycle.  ``tokens``/``cost`` cover this step's reasoning call."""

    model_config = ConfigDict(frozen=True)

    step_number: int = Field(..., ge=1)
    timestamp: datetime = Field(default_factory=_now)
    thought: str = ""
    action: AgentAction
    observation: AgentObservation | None = None
    tokens: int = 0
    cost: float = 0.0


class StreamEventType(str, Enum):
    STEP_START = "step_start"
    THOUGHT = "thought"
    ACTION = "action"
    OBSERVATION = "observation"
    STEP_END = "step_end"
    PROGRESS = "progress"
    ERROR = "error"


class StreamEvent(BaseModel):
    type: StreamEventType
    agent_id: str
    timestamp: datetime = Field(default_factory=_now)
    data: dict[str, Any] = Field(default_factory=dict)


StreamCallback = Callable[[StreamEvent], Any]


class AgentContext(BaseModel):
    """Caller-supplied context for a run.  ``on_stream`` is never serialised."""

    conversation_id: str | None = None
    parent_agent_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    on_stream: StreamCallback | None = Field(default=None, exclude=True)


class AgentState(BaseModel):
    """Snapshot of an agent, produced by ``get_status()`` / ``pause()``."""

    agent_id: str
    status: AgentStatus
    current_step: int = 0
    steps: list[AgentStep] = Field(default_factory=list)
    context: AgentContext = Field(default_factory=AgentContext)
    budget: Budget = Field(default_factory=Budget)
    start_time: datetime = Field(default_factory=_now)
    total_tokens: int = 0
    total_cost: float = 0.0


class AgentResult(BaseModel):
    success: bool
    status: AgentStatus
    steps: list[AgentStep] = Field(default_factory=list)
    final_response: str | None = None
    error: str | None = None
    total_tokens: int = 0
    total_cost: float = 0.0
    duration_ms: float = 0.0


class AgentConfig(BaseModel):
    """Static configuration of an agent."""

    name: str = "Agent"
    role: str = "general"
    model: str | None = Field(
        default=None, description="Preferred model; informational, the provider decides."
    )
    system_prompt: str | None = None
    budget: Budget = Field(default_factory=Budget)
    tools: list[str] | None = Field(
        default=None, description="Tool names this agent may use; None means every enabled tool."
    )
    completion_phrases: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPLETION_PHRASES))
