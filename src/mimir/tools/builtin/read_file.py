"""read_file — read file contents with line numbers and size protection."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

MAX_CHARS = 30_000
DEFAULT_LINES = 2000
TRUNCATION_NOTICE = "\n\n[FILE TRUNCATED - Use offset/limit to read more]"


def _number(lines: list[str], first: int) -> str:
    return "\n".join(f"{first + idx}\t{line}" for idx, line in enumerate(lines))


class ReadFileTool(BaseTool):
    name = "read_file"
    description = (
        "Read file contents. Files over 30k characters are truncated; use offset/limit "
        "to read specific line ranges and the grep tool to search large files."
    )
    token_cost = 50

    class Args(BaseModel):
        path: str = Field(..., description="Path to the file to read")
        offset: int | None = Field(default=None, ge=1, description="Line number to start reading from (1-indexed)")
        limit: int | None = Field(default=None, ge=1, description="Maximum number of lines to read")

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        content = await context.require_executor().read_file(args.path)

        if args.offset is not None or args.limit is not None:
            lines = content.split("\n")
            start = (args.offset or 1) - 1
            end = min(len(lines), start + (args.limit or DEFAULT_LINES))
            selected = lines[start:end]
            return self.success(
                _number(selected, start + 1),
                path=args.path,
                total_lines=len(lines),
                start_line=start + 1,
                end_line=end,
                lines_read=len(selected),
                truncated=end < len(lines),
            )

        if not content:
            return self.success("", path=args.path, size=0, total_lines=0)

        if len(content) > MAX_CHARS:
            head = content[:MAX_CHARS]
            return self.success(
                _number(head.split("\n"), 1) + TRUNCATION_NOTICE,
                path=args.path,
                size=len(content),
                total_lines=content.count("\n") + 1,
                truncated=True,
            )

        lines = content.split("\n")
        return self.success(
            _number(lines, 1), path=args.path, size=len(content), total_lines=len(lines)
        )
