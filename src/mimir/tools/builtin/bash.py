"""bash — run a shell command through the executor."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mimir.runtime.execution.models import ExecuteOptions
from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult


class BashTool(BaseTool):
    name = "bash"
    description = (
        "Execute bash commands. IMPORTANT: Use the grep/glob tools for searching "
        "instead of grep/find in bash."
    )
    token_cost = 90

    class Args(BaseModel):
        command: str = Field(..., description="Bash command to execute")
        cwd: str | None = Field(default=None, description="Working directory (default: current directory)")
        timeout: float = Field(default=120.0, gt=0, description="Timeout in seconds (default: 120)")

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        executor = context.require_executor()
        result = await executor.execute(
            args.command, ExecuteOptions(cwd=args.cwd, timeout=args.timeout)
        )
        return ToolResult(
            success=True,
            output={
                "stdout": result.stdout,
                "stderr": result.stderr,
                "exit_code": result.exit_code,
            },
            metadata={"command": args.command, "exit_code": result.exit_code},
        )
