"""Tests for ToolRegistry and BaseTool."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from mimir.errors import PermissionDeniedError, SecurityError, ToolRegistrationError
from mimir.tools import BaseTool, ToolContext, ToolRegistry, ToolResult


class EchoTool(BaseTool):
    name = "echo"
    description = "Echo the input back."
    token_cost = 10

    class Args(BaseModel):
        text: str

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        return self.success(args.text, agent=context.agent_id)


class BoomTool(BaseTool):
    name = "boom"
    description = "Always raises."

    class Args(BaseModel):
        pass

    def __init__(self, exc: Exception, **kwargs) -> None:
        super().__init__(**kwargs)
        self._exc = exc

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        raise self._exc


class TestRegistration:
    def test_register_and_get(self) -> None:
        registry = ToolRegistry()
        tool = EchoTool()
        registry.register(tool)

        assert registry.has("echo")
        assert registry.get("echo") is tool
        assert registry.list() == [tool]

    def test_duplicate_rejected(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        with pytest.raises(ToolRegistrationError, match="'echo' is already registered"):
            registry.register(EchoTool())

    def test_unregister(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        assert registry.unregister("echo") is True
        assert registry.unregister("echo") is False
        assert registry.get("echo") is None

    def test_list_enabled(self) -> None:
        registry = ToolRegistry()
        enabled = EchoTool()
        disabled = BoomTool(RuntimeError(), enabled=False)
        registry.register(enabled)
        registry.register(disabled)

        assert registry.list_enabled() == [enabled]
        disabled.enabled = True
        assert len(registry.list_enabled()) == 2

    def test_clear(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        registry.clear()
        assert registry.list() == []


class TestSchemas:
    def test_schema_shape(self) -> None:
        schema = EchoTool().get_schema()

        assert schema["type"] == "function"
        assert schema["function"]["name"] == "echo"
        assert schema["function"]["parameters"]["properties"]["text"]["type"] == "string"
        assert "title" not in schema["function"]["parameters"]
        assert schema["token_cost"] == 10

    def test_get_schemas_enabled_only(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        registry.register(BoomTool(RuntimeError(), enabled=False))

        assert [s["function"]["name"] for s in registry.get_schemas()] == ["echo"]

    def test_get_schemas_by_name(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        assert registry.get_schemas(["missing", "echo"])[0]["function"]["name"] == "echo"
        assert registry.get_schemas([]) == []

    def test_named_selection_skips_disabled(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        registry.register(BoomTool(RuntimeError(), enabled=False))

        assert [s["function"]["name"] for s in registry.get_schemas(["echo", "boom"])] == ["echo"]
        assert registry.total_token_cost(["boom"]) == 0

    def test_total_token_cost(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        assert registry.total_token_cost() == 10
        assert registry.total_token_cost([]) == 0


class TestExecute:
    async def test_success(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())

        result = await registry.execute("echo", {"text": "hi"}, ToolContext(agent_id="a1"))

        assert result.success is True
        assert result.output == "hi"
        assert result.metadata["agent"] == "a1"
        assert result.metadata["execution_time_ms"] >= 0

    async def test_unknown_tool(self) -> None:
        result = await ToolRegistry().execute("nope", {}, ToolContext())
        assert result.success is False
        assert result.error == "Tool 'nope' not found"
        assert "execution_time_ms" in result.metadata

    async def test_disabled_tool(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool(enabled=False))
        result = await registry.execute("echo", {"text": "hi"}, ToolContext())
        assert result.error == "Tool 'echo' is disabled"

    async def test_invalid_arguments(self) -> None:
        registry = ToolRegistry()
        registry.register(EchoTool())
        result = await registry.execute("echo", {"text": 5}, ToolContext())
        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Invalid arguments:")

    async def test_tool_exception_captured(self) -> None:
        registry = ToolRegistry()
        registry.register(BoomTool(ValueError("bad input")))
        result = await registry.execute("boom", {}, ToolContext())
        assert result.success is False
        assert result.error == "bad input"

    @pytest.mark.parametrize("exc", [PermissionDeniedError("Command denied", "blocked"), SecurityError("escape")])
    async def test_security_errors_propagate(self, exc: Exception) -> None:
        registry = ToolRegistry()
        registry.register(BoomTool(exc))
        with pytest.raises(type(exc)):
            await registry.execute("boom", {}, ToolContext())


class TestToolContext:
    def test_require_executor(self) -> None:
        with pytest.raises(RuntimeError, match="Executor not available"):
            ToolContext().require_executor()
        executor = AsyncMock()
        assert ToolContext(executor=executor).require_executor() is executor
