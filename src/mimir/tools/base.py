"""BaseTool — the common shape of every tool."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel

from mimir.tools.models import ToolContext, ToolDefinition, ToolMetadata, ToolResult, ToolSource


class BaseTool(ABC):
    """A capability the agent can invoke.

    Subclasses declare ``name``, ``description`` and an ``Args`` pydantic
    model, and implement :meth:`run`.  Arguments are validated against
    ``Args`` by the registry before :meth:`run` is called.

    Example::

        class EchoTool(BaseTool):
            name = "echo"
            description = "Echo the input back."

            class Args(BaseModel):
                text: str

            async def run(self, args, context):
                return self.success(args.text)
    """

    name: ClassVar[str]
    description: ClassVar[str]
    Args: ClassVar[type[BaseModel]]
    token_cost: ClassVar[int] = 0
    tags: ClassVar[list[str]] = []

    def __init__(self, *, enabled: bool = True, source: ToolSource = ToolSource.BUILT_IN) -> None:
        self._definition = ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.Args,
            metadata=ToolMetadata(
                source=source,
                enabled=enabled,
                token_cost=self.token_cost,
                tags=list(self.tags),
            ),
        )

    @property
    def definition(self) -> ToolDefinition:
        return self._definition

    @property
    def enabled(self) -> bool:
        return self._definition.metadata.enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._definition.metadata.enabled = value

    def validate(self, args: dict[str, Any]) -> BaseModel:
        """Parse *args* into the ``Args`` model.  Raises ``ValidationError``."""
        return self.Args.model_validate(args)

    def get_schema(self) -> dict[str, Any]:
        """OpenAI-compatible function schema."""
        parameters = self.Args.model_json_schema()
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
            "token_cost": self._definition.metadata.token_cost,
        }

    @abstractmethod
    async def run(self, args: Any, context: ToolContext) -> ToolResult:
        """Execute with validated *args*."""

    @staticmethod
    def success(output: Any, **metadata: Any) -> ToolResult:
        return ToolResult(success=True, output=output, metadata=metadata)

    @staticmethod
    def error(message: str, **metadata: Any) -> ToolResult:
        return ToolResult(success=False, error=message, metadata=metadata)
