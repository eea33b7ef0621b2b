"""Tests for AgentRunner wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mimir.config import MimirConfig
from mimir.core.agent import AgentStatus, Budget, StreamEvent
from mimir.core.interface.models import ChatResponse, ToolCall, Usage
from mimir.errors import ConfigError
from mimir.runner import AgentRunner
from mimir.runtime.execution import DevContainerExecutor, NativeExecutor

if TYPE_CHECKING:
    from pathlib import Path


def _provider(*responses: ChatResponse) -> MagicMock:
    provider = MagicMock()
    provider.chat = AsyncMock(side_effect=list(responses))
    provider.count_tokens.return_value = 1
    provider.calculate_cost.return_value = 0.0
    return provider


def _config(project: Path, **data: Any) -> MimirConfig:
    config = MimirConfig.model_validate(data)
    config.execution.project_dir = str(project)
    return config


class TestBuild:
    def test_native_by_default(self, tmp_path: Path) -> None:
        runner = AgentRunner(_config(tmp_path), provider=_provider())
        assert isinstance(runner.build_executor(), NativeExecutor)

    def test_auto_detects_devcontainer(self, tmp_path: Path) -> None:
        (tmp_path / ".devcontainer.json").write_text('{"image": "python:3.12"}')
        runner = AgentRunner(_config(tmp_path), provider=_provider())
        assert isinstance(runner.build_executor(), DevContainerExecutor)

    def test_auto_detect_disabled(self, tmp_path: Path) -> None:
        (tmp_path / ".devcontainer.json").write_text('{"image": "python:3.12"}')
        config = _config(tmp_path, execution={"devcontainer": {"auto_detect": False}})
        runner = AgentRunner(config, provider=_provider())
        assert isinstance(runner.build_executor(), NativeExecutor)

    def test_registry_has_builtin_tools(self, tmp_path: Path) -> None:
        registry = AgentRunner(_config(tmp_path), provider=_provider()).build_registry()
        assert registry.has("bash")
        assert len(registry.list()) == 7

    def test_from_project(self, tmp_path: Path) -> None:
        (tmp_path / ".mimir").mkdir()
        (tmp_path / ".mimir" / "config.yml").write_text("role: finder\n")
        with patch("mimir.runner.LiteLLMProvider") as mock_provider_cls:
            runner = AgentRunner.from_project(tmp_path)
        assert runner.config.role == "finder"
        mock_provider_cls.assert_called_once_with(runner.config.model)


class TestRun:
    async def test_runs_tool_then_finishes(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("remember the milk\n")
        provider = _provider(
            ChatResponse(
                tool_calls=[ToolCall(name="read_file", arguments={"path": "notes.txt"})],
                usage=Usage(input_tokens=20, output_tokens=5),
            ),
            ChatResponse(content="Task completed: it says milk", usage=Usage(input_tokens=30, output_tokens=6)),
        )
        events: list[StreamEvent] = []
        runner = AgentRunner(_config(tmp_path), provider=provider)

        result = await runner.run("What does notes.txt say?", role="finder", on_stream=events.append)

        assert result.status is AgentStatus.COMPLETED
        assert result.final_response == "Task completed: it says milk"
        assert result.steps[0].observation is not None
        assert result.steps[0].observation.output == "1\tremember the milk\n2\t"
        assert result.total_tokens == 61
        assert events

        tool_names = [s["function"]["name"] for s in provider.chat.call_args_list[0].args[1]]
        assert tool_names == ["read_file", "glob", "grep", "diff"]

    async def test_role_precedence(self, tmp_path: Path) -> None:
        runner = AgentRunner(_config(tmp_path, role="tester"), provider=_provider())
        with patch("mimir.runner.AgentFactory") as mock_factory_cls:
            agent = mock_factory_cls.return_value.create_agent.return_value
            agent.execute = AsyncMock()

            await runner.run("t")
            assert mock_factory_cls.return_value.create_agent.call_args.args[0] == "tester"

            await runner.run("t", role="finder")
            assert mock_factory_cls.return_value.create_agent.call_args.args[0] == "finder"

    async def test_default_role(self, tmp_path: Path) -> None:
        runner = AgentRunner(_config(tmp_path), provider=_provider())
        with patch("mimir.runner.AgentFactory") as mock_factory_cls:
            mock_factory_cls.return_value.create_agent.return_value.execute = AsyncMock()
            await runner.run("t")

        role, overrides = mock_factory_cls.return_value.create_agent.call_args.args
        assert role == "thinker"
        assert overrides.budget is None

    async def test_configured_budget_overrides_role(self, tmp_path: Path) -> None:
        runner = AgentRunner(_config(tmp_path, budget={"max_iterations": 2}), provider=_provider())
        with patch("mimir.runner.AgentFactory") as mock_factory_cls:
            mock_factory_cls.return_value.create_agent.return_value.execute = AsyncMock()
            await runner.run("t")

        overrides = mock_factory_cls.return_value.create_agent.call_args.args[1]
        assert overrides.budget == Budget(max_iterations=2)

    async def test_unknown_role_still_cleans_up(self, tmp_path: Path) -> None:
        runner = AgentRunner(_config(tmp_path), provider=_provider())
        executor = MagicMock()
        executor.initialize = AsyncMock()
        executor.cleanup = AsyncMock()

        with patch.object(runner, "build_executor", return_value=executor):
            with pytest.raises(ConfigError, match="Unknown role"):
                await runner.run("t", role="ghost")

        executor.initialize.assert_awaited_once()
        executor.cleanup.assert_awaited_once()
