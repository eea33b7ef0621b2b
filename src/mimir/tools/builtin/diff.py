"""diff — show differences between two files or strings."""

from __future__ import annotations

import difflib

from pydantic import BaseModel, Field, model_validator

from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

NO_CHANGES = "(no changes)"


class DiffTool(BaseTool):
    name = "diff"
    description = "Show differences between two files or strings as a unified diff."
    token_cost = 80

    class Args(BaseModel):
        old_path: str | None = Field(default=None, description="Path to the old file (or give old_content)")
        new_path: str | None = Field(default=None, description="Path to the new file (or give new_content)")
        old_content: str | None = Field(default=None, description="Old content as a string")
        new_content: str | None = Field(default=None, description="New content as a string")
        unified: bool = Field(default=True, description="Unified diff format (default: true)")
        context_lines: int = Field(default=3, ge=0, description="Lines of context around changes")

        @model_validator(mode="after")
        def _require_sides(self) -> DiffTool.Args:
            if self.old_content is None and not self.old_path:
                raise ValueError("Either old_path or old_content must be provided")
            if self.new_content is None and not self.new_path:
                raise ValueError("Either new_path or new_content must be provided")
            return self

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        old = await _side(args.old_content, args.old_path, context)
        new = await _side(args.new_content, args.new_path, context)
        old_label = args.old_path or "a/content"
        new_label = args.new_path or "b/content"

        old_lines = old.splitlines(keepends=True)
        new_lines = new.splitlines(keepends=True)
        if args.unified:
            lines = list(
                difflib.unified_diff(old_lines, new_lines, old_label, new_label, n=args.context_lines)
            )
        else:
            lines = [ln for ln in difflib.ndiff(old_lines, new_lines) if ln[:1] in "+-"]

        text = "".join(ln if ln.endswith("\n") else ln + "\n" for ln in lines).rstrip("\n")
        added = sum(1 for ln in lines if ln.startswith("+") and not ln.startswith("+++"))
        removed = sum(1 for ln in lines if ln.startswith("-") and not ln.startswith("---"))
        return self.success(
            text or NO_CHANGES,
            old_path=args.old_path or "(content)",
            new_path=args.new_path or "(content)",
            has_changes=old != new,
            lines_added=added,
            lines_removed=removed,
        )


async def _side(content: str | None, path: str | None, context: ToolContext) -> str:
    if content is not None:
        return content
    if not path:
        raise ValueError("Either a path or content must be provided")
    return await context.require_executor().read_file(path)
