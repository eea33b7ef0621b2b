"""todo — per-conversation task list."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field, model_validator

from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

DEFAULT_CONVERSATION = "default"


class TodoItem(BaseModel):
    content: str = Field(..., description="Task description")
    status: Literal["pending", "in_progress", "completed"] = Field(..., description="Task status")
    active_form: str = Field(..., description='Present continuous form (e.g. "Running tests")')


@runtime_checkable
class TodoStore(Protocol):
    """Where todo lists live between calls."""

    async def get_todos(self, conversation_id: str) -> list[TodoItem]: ...

    async def set_todos(self, conversation_id: str, todos: list[TodoItem]) -> None: ...


class InMemoryTodoStore:
    """Satisfies :class:`TodoStore`; lists are lost with the process."""

    def __init__(self) -> None:
        self._todos: dict[str, list[TodoItem]] = {}

    async def get_todos(self, conversation_id: str) -> list[TodoItem]:
        return list(self._todos.get(conversation_id, []))

    async def set_todos(self, conversation_id: str, todos: list[TodoItem]) -> None:
        self._todos[conversation_id] = list(todos)


def _counts(todos: list[TodoItem]) -> dict[str, int]:
    return {
        "count": len(todos),
        "pending": sum(t.status == "pending" for t in todos),
        "in_progress": sum(t.status == "in_progress" for t in todos),
        "completed": sum(t.status == "completed" for t in todos),
    }


class TodoTool(BaseTool):
    name = "todo"
    description = "Manage a todo list for tracking task progress. Use it often to show progress."
    token_cost = 60

    class Args(BaseModel):
        action: Literal["read", "write", "update"] = Field(..., description="Action to perform")
        todos: list[TodoItem] | None = Field(default=None, description="Todo items (required for write/update)")

        @model_validator(mode="after")
        def _todos_for_write(self) -> TodoTool.Args:
            if self.action != "read" and self.todos is None:
                raise ValueError("todos is required for write/update")
            return self

    def __init__(self, store: TodoStore | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._store = store or InMemoryTodoStore()

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        conversation_id = context.conversation_id or DEFAULT_CONVERSATION
        if args.action == "read":
            todos = await self._store.get_todos(conversation_id)
            return self.success([t.model_dump() for t in todos], **_counts(todos))

        todos = args.todos or []
        await self._store.set_todos(conversation_id, todos)
        return self.success(
            {"message": "Todos updated successfully", "todos": [t.model_dump() for t in todos]},
            **_counts(todos),
        )
