"""grep — regex search over project files."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from pydantic import BaseModel, Field

from mimir.tools.base import BaseTool
from mimir.tools.models import ToolContext, ToolResult

NO_MATCHES = "(no matches found)"


class _Match(BaseModel):
    file: str
    line: int
    column: int
    text: str


class GrepTool(BaseTool):
    name = "grep"
    description = "Search for a regular expression in files. Use this instead of grep in bash commands."
    token_cost = 100

    class Args(BaseModel):
        pattern: str = Field(..., description="Regular expression to search for")
        paths: list[str] = Field(default_factory=lambda: ["."], description="Files or directories to search")
        recursive: bool = Field(default=False, description="Search directories recursively")
        ignore_case: bool = Field(default=False, description="Case-insensitive search")
        invert_match: bool = Field(default=False, description="Report lines that do NOT match")
        max_results: int = Field(default=100, ge=1, description="Maximum number of matches to collect")
        head_limit: int | None = Field(default=None, ge=0, description="Only show the first N matches")

    def __init__(self, project_dir: str | Path = ".", **kwargs) -> None:
        super().__init__(**kwargs)
        self._project_dir = Path(project_dir).resolve()

    async def run(self, args: Args, context: ToolContext) -> ToolResult:
        try:
            regex = re.compile(args.pattern, re.IGNORECASE if args.ignore_case else 0)
        except re.error as exc:
            return self.error(f"Invalid regular expression: {exc}")

        executor = context.require_executor()
        targets = [executor.check_read(raw) for raw in args.paths]
        matches = await asyncio.to_thread(self._search, regex, targets, args)
        shown = matches if args.head_limit is None else matches[: args.head_limit]
        truncated = len(matches) >= args.max_results or len(shown) < len(matches)
        return self.success(
            self._format(shown, len(matches)),
            match_count=len(shown),
            truncated=truncated,
            pattern=args.pattern,
            paths=args.paths,
        )

    def _search(
        self, regex: re.Pattern[str], targets: list[Path], args: GrepTool.Args
    ) -> list[_Match]:
        matches: list[_Match] = []
        for target in targets:
            if target.is_file():
                files = [target]
            elif target.is_dir() and args.recursive:
                files = sorted(p for p in target.rglob("*") if p.is_file())
            else:
                continue
            for file in files:
                self._search_file(file, regex, args, matches)
                if len(matches) >= args.max_results:
                    return matches
        return matches

    def _search_file(
        self, file: Path, regex: re.Pattern[str], args: GrepTool.Args, matches: list[_Match]
    ) -> None:
        try:
            content = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return
        label = file.relative_to(self._project_dir).as_posix() if file.is_relative_to(self._project_dir) else str(file)
        for lineno, line in enumerate(content.split("\n"), start=1):
            found = regex.search(line)
            if (found is not None) == args.invert_match:
                continue
            matches.append(
                _Match(file=label, line=lineno, column=found.start() if found else 0, text=line)
            )
            if len(matches) >= args.max_results:
                return

    @staticmethod
    def _format(shown: list[_Match], total: int) -> str:
        if not shown:
            return NO_MATCHES
        lines = [f"{m.file}:{m.line}:{m.column}: {m.text}" for m in shown]
        if total > len(shown):
            lines.append(f"\n[Output limited to {len(shown)} lines. {total - len(shown)} more matches omitted]")
        return "\n".join(lines)
