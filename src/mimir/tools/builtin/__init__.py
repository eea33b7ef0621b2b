"""Built-in tools."""

from __future__ import annotations

from pathlib import Path

from mimir.tools.base import BaseTool
from mimir.tools.builtin.bash import BashTool
from mimir.tools.builtin.diff import DiffTool
from mimir.tools.builtin.glob import GlobTool
from mimir.tools.builtin.grep import GrepTool
from mimir.tools.builtin.read_file import ReadFileTool
from mimir.tools.builtin.todo import InMemoryTodoStore, TodoItem, TodoStore, TodoTool
from mimir.tools.builtin.write_file import WriteFileTool


def builtin_tools(project_dir: str | Path = ".", todo_store: TodoStore | None = None) -> list[BaseTool]:
    """One instance of every built-in tool, rooted at *project_dir*."""
    return [
        BashTool(),
        ReadFileTool(),
        WriteFileTool(),
        GlobTool(),
        GrepTool(project_dir),
        DiffTool(),
        TodoTool(todo_store),
    ]


__all__ = [
    "BashTool",
    "DiffTool",
    "GlobTool",
    "GrepTool",
    "InMemoryTodoStore",
    "ReadFileTool",
    "TodoItem",
    "TodoStore",
    "TodoTool",
    "WriteFileTool",
    "builtin_tools",
]
