"""AgentFactory — builds role-specialised :class:`Agent` instances."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from pydantic import BaseModel

from mimir.core.agent.agent import Agent
from mimir.core.agent.models import AgentConfig, Budget
from mimir.core.agent.roles import ACCESS_LEVEL_TOOLS, RoleConfig, RoleRegistry

if TYPE_CHECKING:
    from mimir.core.interface.provider import ReasoningProvider
    from mimir.runtime.execution import Executor
    from mimir.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class AgentOverrides(BaseModel):
    """Per-agent adjustments applied on top of a role."""

    name: str | None = None
    model: str | None = None
    system_prompt: str | None = None
    budget: Budget | None = None
    tools: list[str] | None = None


class AgentFactoryOptions(BaseModel):
    model_override: str | None = None
    allow_tool_override: bool = False


class AgentFactory:
    """Creates agents from roles in an injected :class:`RoleRegistry`.

    Usage::

        factory = AgentFactory(RoleRegistry.with_standard_roles(), provider, registry, executor)
        finder = factory.create_agent("finder")

    Tool selection, in order:

    1. Override tools, only when ``allow_tool_override`` is set.
    2. The role's ``allowed_tools`` (``*`` patterns matched against the registry).
    3. The tools granted by the role's ``tool_access_level``.
    4. Every registered tool.

    The result is always restricted to registered tools and never contains
    a tool the role forbids.
    """

    def __init__(
        self,
        roles: RoleRegistry,
        provider: ReasoningProvider,
        tools: ToolRegistry,
        executor: Executor,
        options: AgentFactoryOptions | None = None,
    ) -> None:
        self.roles = roles
        self.provider = provider
        self.tools = tools
        self.executor = executor
        self.options = options or AgentFactoryOptions()

    def create_agent(self, role: str, overrides: AgentOverrides | None = None) -> Agent:
        return Agent(self.build_config(role, overrides), self.provider, self.tools, self.executor)

    def create_from_config(self, config: AgentConfig) -> Agent:
        return Agent(config, self.provider, self.tools, self.executor)

    def build_config(self, role: str, overrides: AgentOverrides | None = None) -> AgentConfig:
        """Resolve *role* plus *overrides* into a concrete :class:`AgentConfig`."""
        role_config = self.roles.require(role)
        ov = overrides or AgentOverrides()

        budget = role_config.default_budget
        if ov.budget is not None:
            budget = budget.model_copy(update=ov.budget.model_dump(exclude_unset=True))

        config = AgentConfig(
            name=ov.name or f"{role}-agent",
            role=role,
            model=ov.model or self.options.model_override or role_config.recommended_model,
            system_prompt=ov.system_prompt or role_config.system_prompt,
            budget=budget,
            tools=self._select_tools(role_config, ov.tools),
        )
        logger.debug("Built %s agent with tools %s", role, config.tools)
        return config

    def get_available_roles(self) -> list[str]:
        return self.roles.names()

    def get_role_config(self, role: str) -> RoleConfig | None:
        return self.roles.get(role)

    def has_role(self, role: str) -> bool:
        return self.roles.has(role)

    def _select_tools(self, role: RoleConfig, requested: list[str] | None) -> list[str]:
        registered = [tool.name for tool in self.tools.list()]

        if requested is not None and self.options.allow_tool_override:
            candidates = requested
        elif role.allowed_tools is not None:
            candidates = _expand_patterns(role.allowed_tools, registered)
        elif role.tool_access_level is not None:
            granted = ACCESS_LEVEL_TOOLS[role.tool_access_level]
            candidates = registered if granted is None else granted
        else:
            candidates = registered

        forbidden = set(role.forbidden_tools)
        return [name for name in candidates if name in registered and name not in forbidden]


def _expand_patterns(patterns: list[str], registered: list[str]) -> list[str]:
    selected: list[str] = []
    for pattern in patterns:
        if "*" in pattern:
            matches = [name for name in registered if fnmatchcase(name, pattern)]
        else:
            matches = [pattern]
        selected.extend(name for name in matches if name not in selected)
    return selected
