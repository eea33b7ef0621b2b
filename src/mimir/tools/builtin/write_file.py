"""write_file — write content to a file through the executor."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mimir.runtime.execution.models import WriteOptions
from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult


class WriteFileTool(BaseTool):
    name = "write_file"
    description = "Write content to a file, replacing it if it exists."
    token_cost = 60

    class Args(BaseModel):
        path: str = Field(..., description="Path to the file to write")
        content: str = Field(..., description="Content to write to the file")
        create_dirs: bool = Field(default=True, description="Create missing parent directories")

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        await context.require_executor().write_file(
            args.path, args.content, WriteOptions(create_dirs=args.create_dirs)
        )
        return self.success(
            {"path": args.path, "bytes_written": len(args.content.encode())},
            path=args.path,
            size=len(args.content),
        )
