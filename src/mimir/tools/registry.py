"""ToolRegistry — name-to-tool map with validated, non-throwing execution."""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import ValidationError

from mimir.errors import PermissionDeniedError, SecurityError, ToolRegistrationError
from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maintains the available tools and dispatches calls to them.

    Usage::

        registry = ToolRegistry()
        registry.register(ReadFileTool())
        schemas = registry.get_schemas()               # for the model
        result = await registry.execute("read_file", {"path": "a.py"}, ctx)

    :meth:`execute` returns failures as :class:`ToolResult` values.  The one
    exception is a permission or sandbox violation raised by the executor,
    which is re-raised so the caller can abort the run.
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            raise ToolRegistrationError(tool.name)
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def list(self) -> list[BaseTool]:
        return list(self._tools.values())

    def list_enabled(self) -> list[BaseTool]:
        return [tool for tool in self._tools.values() if tool.enabled]

    def get_schemas(self, names: list[str] | None = None) -> list[dict[str, Any]]:
        return [tool.get_schema() for tool in self._select(names)]

    def total_token_cost(self, names: list[str] | None = None) -> int:
        return sum(tool.definition.metadata.token_cost for tool in self._select(names))

    def clear(self) -> None:
        self._tools.clear()

    def _select(self, names: list[str] | None) -> list[BaseTool]:
        if names is None:
            return self.list_enabled()
        selected = (self._tools.get(name) for name in names)
        return [tool for tool in selected if tool is not None and tool.enabled]

    async def execute(self, name: str, args: dict[str, Any], context: ToolContext) -> ToolResult:
        start = time.monotonic()

        def finish(result: ToolResult) -> ToolResult:
            elapsed = (time.monotonic() - start) * 1000
            return result.model_copy(
                update={"metadata": {**result.metadata, "execution_time_ms": elapsed}}
            )

        tool = self._tools.get(name)
        if tool is None:
            return finish(ToolResult(success=False, error=f"Tool '{name}' not found"))
        if not tool.enabled:
            return finish(ToolResult(success=False, error=f"Tool '{name}' is disabled"))

        try:
            parsed = tool.validate(args or {})
        except ValidationError as exc:
            return finish(ToolResult(success=False, error=f"Invalid arguments: {exc}"))

        try:
            result = await tool.run(parsed, context)
        except (PermissionDeniedError, SecurityError):
            raise
        except Exception as exc:
            logger.debug("Tool %s raised %s", name, exc, exc_info=True)
            return finish(ToolResult(success=False, error=str(exc) or type(exc).__name__))
        return finish(result)
