"""AgentRunner — wires a :class:`MimirConfig` into a running agent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mimir.config import MimirConfig, load_config
from mimir.core.agent.factory import AgentFactory, AgentOverrides
from mimir.core.agent.models import AgentContext, AgentResult, StreamCallback
from mimir.core.agent.roles import RoleRegistry
from mimir.core.interface.litellm_provider import LiteLLMProvider
from mimir.runtime.execution.factory import create_executor, detect_mode
from mimir.runtime.execution.models import ExecutionMode
from mimir.runtime.permissions import PermissionManager
from mimir.tools.builtin import builtin_tools
from mimir.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from pathlib import Path

    from mimir.core.interface.provider import ReasoningProvider
    from mimir.runtime.execution import Executor
    from mimir.runtime.permissions import Approver

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "thinker"


class AgentRunner:
    """Execute one task end-to-end from a :class:`MimirConfig`.

    Usage::

        runner = AgentRunner.from_project(".")
        result = await runner.run("Find where the config is loaded")

    Each :meth:`run` initialises the executor, builds the agent for the
    requested role, executes the task and cleans the executor up again,
    even when the run fails.
    """

    def __init__(
        self,
        config: MimirConfig,
        *,
        provider: ReasoningProvider | None = None,
        approver: Approver | None = None,
        roles: RoleRegistry | None = None,
    ) -> None:
        self.config = config
        self.provider = provider or LiteLLMProvider(config.model)
        self.roles = roles or RoleRegistry.with_standard_roles()
        self.permissions = PermissionManager(config.permissions, approver=approver)

    @classmethod
    def from_project(
        cls,
        project_dir: str | Path = ".",
        *,
        config_path: str | Path | None = None,
        approver: Approver | None = None,
    ) -> AgentRunner:
        return cls(load_config(project_dir, config_path), approver=approver)

    def build_executor(self) -> Executor:
        execution = self.config.execution
        devcontainer = execution.devcontainer
        if execution.mode == ExecutionMode.NATIVE and devcontainer.auto_detect:
            mode = detect_mode(execution.project_dir, devcontainer.config_path)
            if mode != execution.mode:
                logger.info("Dev container descriptor detected; using %s mode", mode.value)
                execution = execution.model_copy(update={"mode": mode})
        return create_executor(execution, self.permissions)

    def build_registry(self) -> ToolRegistry:
        registry = ToolRegistry()
        for tool in builtin_tools(self.config.execution.project_dir):
            registry.register(tool)
        return registry

    async def run(
        self,
        task: str,
        *,
        role: str | None = None,
        on_stream: StreamCallback | None = None,
    ) -> AgentResult:
        executor = self.build_executor()
        await executor.initialize()
        try:
            factory = AgentFactory(self.roles, self.provider, self.build_registry(), executor)
            role_name = role or self.config.role or DEFAULT_ROLE
            budget = self.config.budget if self.config.budget.model_fields_set else None
            agent = factory.create_agent(role_name, AgentOverrides(budget=budget))
            logger.debug("Running %s in %s mode", agent.config.name, executor.get_mode().value)
            return await agent.execute(task, AgentContext(on_stream=on_stream))
        finally:
            await executor.cleanup()
