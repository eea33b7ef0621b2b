"""glob — find files under the project matching a path pattern."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from pydantic import BaseModel, Field

from mimir.runtime.execution.paths import glob_to_regex
from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

DEFAULT_IGNORE = ["node_modules/**", ".git/**", "dist/**", "build/**"]


class GlobTool(BaseTool):
    name = "glob"
    description = "Find files matching glob patterns (e.g. **/*.py, src/*.md). Paths are relative to the search root."
    token_cost = 70

    class Args(BaseModel):
        pattern: str = Field(..., description="Glob pattern to match files")
        path: str = Field(default=".", description="Directory to search, relative to the project (default: .)")
        max_results: int = Field(default=1000, ge=1, description="Maximum number of results")
        ignore: list[str] = Field(
            default_factory=lambda: list(DEFAULT_IGNORE),
            description="Patterns to skip (e.g. node_modules/**)",
        )

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        root = context.require_executor().check_read(args.path)
        if not root.is_dir():
            return self.error(f"Not a directory: {args.path}")
        matches = await asyncio.to_thread(self._find, root, args)
        return self.success(
            matches,
            pattern=args.pattern,
            match_count=len(matches),
            truncated=len(matches) >= args.max_results,
        )

    @staticmethod
    def _find(root: Path, args: GlobTool.Args) -> list[str]:
        pattern = glob_to_regex(args.pattern)
        ignored = [glob_to_regex(p) for p in args.ignore]

        def is_ignored(rel: str) -> bool:
            # A directory "x" is ignored by "x/**" as well.
            return any(rx.match(rel) or rx.match(rel + "/") for rx in ignored)

        matches: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if rel_dir == "." else rel_dir + "/"
            dirnames[:] = sorted(d for d in dirnames if not is_ignored(prefix + d))
            for filename in sorted(filenames):
                rel = prefix + filename
                if is_ignored(rel) or not pattern.match(rel):
                    continue
                matches.append(rel)
                if len(matches) >= args.max_results:
                    return matches
        return matches
