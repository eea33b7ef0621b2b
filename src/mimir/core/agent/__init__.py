"""ReAct agent loop, roles and the agent factory."""

from mimir.core.agent.agent import Agent
from mimir.core.agent.factory import AgentFactory, AgentFactoryOptions, AgentOverrides
from mimir.core.agent.models import (
    AgentAction,
    AgentActionType,
    AgentConfig,
    AgentContext,
    AgentObservation,
    AgentResult,
    AgentState,
    AgentStatus,
    AgentStep,
    Budget,
    StreamEvent,
    StreamEventType,
)
from mimir.core.agent.roles import RoleConfig, RoleRegistry, ToolAccessLevel, standard_roles

__all__ = [
    "Agent",
    "AgentAction",
    "AgentActionType",
    "AgentConfig",
    "AgentContext",
    "AgentFactory",
    "AgentFactoryOptions",
    "AgentObservation",
    "AgentOverrides",
    "AgentResult",
    "AgentState",
    "AgentStatus",
    "AgentStep",
    "Budget",
    "RoleConfig",
    "RoleRegistry",
    "StreamEvent",
    "StreamEventType",
    "ToolAccessLevel",
    "standard_roles",
]
