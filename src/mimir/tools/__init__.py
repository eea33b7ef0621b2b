"""Tool layer — capability definitions, validation and dispatch."""

from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolDefinition, ToolMetadata, ToolResult, ToolSource
from mimir.tools.registry import ToolRegistry

__all__ = [
    "BaseTool",
    "ToolContext",
    "ToolDefinition",
    "ToolMetadata",
    "ToolRegistry",
    "ToolResult",
    "ToolSource",
]
