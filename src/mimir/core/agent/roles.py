"""Role definitions — named presets of prompt, budget and tool access.

A :class:`RoleRegistry` is an ordinary object: build one (usually with
:meth:`RoleRegistry.with_standard_roles`) and hand it to the
:class:`~mimir.core.agent.factory.AgentFactory` that needs it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mimir.core.agent.models import Budget
from mimir.errors import ConfigError


class ToolAccessLevel(str, Enum):
    READ_ONLY = "read-only"
    READ_WRITE = "read-write"
    READ_GIT = "read-git"
    READ_WRITE_BASH = "read-write-bash"
    ALL = "all"


READ_ONLY_TOOLS = ["read_file", "glob", "grep", "diff"]

ACCESS_LEVEL_TOOLS: dict[ToolAccessLevel, list[str] | None] = {
    ToolAccessLevel.READ_ONLY: READ_ONLY_TOOLS,
    ToolAccessLevel.READ_WRITE: [*READ_ONLY_TOOLS, "write_file"],
    ToolAccessLevel.READ_GIT: [*READ_ONLY_TOOLS, "git"],
    ToolAccessLevel.READ_WRITE_BASH: [*READ_ONLY_TOOLS, "write_file", "bash"],
    ToolAccessLevel.ALL: None,
}
"""Tool names granted by each access level.  ``None`` grants every registered tool."""


class RoleConfig(BaseModel):
    """A reusable agent persona."""

    role: str
    description: str = ""
    system_prompt: str | None = None
    recommended_model: str | None = None
    tool_access_level: ToolAccessLevel | None = None
    allowed_tools: list[str] | None = Field(
        default=None, description="Explicit tool names; '*' wildcards are expanded."
    )
    forbidden_tools: list[str] = Field(default_factory=list)
    default_budget: Budget = Field(default_factory=Budget)


class RoleRegistry:
    """Name-to-:class:`RoleConfig` map."""

    def __init__(self, roles: list[RoleConfig] | None = None) -> None:
        self._roles: dict[str, RoleConfig] = {}
        for role in roles or []:
            self.register(role)

    @classmethod
    def with_standard_roles(cls) -> RoleRegistry:
        return cls(standard_roles())

    def register(self, role: RoleConfig) -> None:
        """Add *role*, replacing any existing role with the same name."""
        self._roles[role.role] = role

    def get(self, name: str) -> RoleConfig | None:
        return self._roles.get(name)

    def require(self, name: str) -> RoleConfig:
        role = self._roles.get(name)
        if role is None:
            known = ", ".join(sorted(self._roles)) or "none"
            raise ConfigError(f"Unknown role '{name}' (available: {known})")
        return role

    def has(self, name: str) -> bool:
        return name in self._roles

    def names(self) -> list[str]:
        return list(self._roles)

    def list(self) -> list[RoleConfig]:
        return list(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)


_FINDER_PROMPT = """\
You are a fast code search specialist. Locate files, symbols and usages in \
the project as quickly as possible and report exact paths and line numbers.

Prefer glob for file names and grep for contents. Do not modify anything.
When you have the answer, reply with 'Task completed: ' followed by the \
locations you found."""

_THINKER_PROMPT = """\
You are a senior engineer who reasons carefully about hard problems. Break \
the task into steps, gather evidence with the available tools, weigh \
alternatives, and explain your conclusion.

When you are confident in the answer, reply with 'Task completed: ' followed \
by your analysis and recommendation."""

_LIBRARIAN_PROMPT = """\
You are a research librarian for a codebase. Read documentation, source \
files and, where available, external references to answer questions about \
how things work and how they should be used.

Cite the files you relied on. Do not modify anything. Reply with \
'Task completed: ' followed by your answer when done."""

_REFACTORING_PROMPT = """\
You are a refactoring specialist. Improve the structure of existing code \
without changing its behavior: rename, extract, inline and simplify.

Read every file before you change it and keep edits minimal and focused. \
Reply with 'Task completed: ' followed by a summary of the changes when done."""

_REVIEWER_PROMPT = """\
You are a meticulous code reviewer. Examine the requested changes for \
correctness, readability, security issues and missing tests. Use diff and \
git history to understand what changed.

Do not modify files. Reply with 'Task completed: ' followed by your review, \
listing findings by severity."""

_TESTER_PROMPT = """\
You are a test engineer. Write and run tests that exercise the requested \
behavior, including edge cases and failure paths, and report the results.

Run the test suite with bash after every change. Reply with \
'Task completed: ' followed by a summary of the tests and their outcome."""


def standard_roles() -> list[RoleConfig]:
    """The built-in role presets."""
    return [
        RoleConfig(
            role="finder",
            description="Fast file and symbol search",
            system_prompt=_FINDER_PROMPT,
            tool_access_level=ToolAccessLevel.READ_ONLY,
            allowed_tools=["read_file", "glob", "grep", "diff"],
            default_budget=Budget(
                max_iterations=5, max_tokens=10_000, max_cost=0.05, max_duration_ms=30_000
            ),
        ),
        RoleConfig(
            role="thinker",
            description="Deep reasoning over complex problems",
            system_prompt=_THINKER_PROMPT,
            tool_access_level=ToolAccessLevel.ALL,
            default_budget=Budget(
                max_iterations=20, max_tokens=200_000, max_cost=5.0, max_duration_ms=600_000
            ),
        ),
        RoleConfig(
            role="librarian",
            description="Documentation and reference research",
            system_prompt=_LIBRARIAN_PROMPT,
            tool_access_level=ToolAccessLevel.READ_ONLY,
            allowed_tools=["read_file", "glob", "grep", "web_search", "web_fetch"],
            default_budget=Budget(
                max_iterations=10, max_tokens=50_000, max_cost=0.5, max_duration_ms=120_000
            ),
        ),
        RoleConfig(
            role="refactoring",
            description="Behavior-preserving code restructuring",
            system_prompt=_REFACTORING_PROMPT,
            tool_access_level=ToolAccessLevel.READ_WRITE,
            allowed_tools=["read_file", "write_file", "glob", "grep", "diff", "git"],
            forbidden_tools=["bash"],
            default_budget=Budget(
                max_iterations=15, max_tokens=100_000, max_cost=1.0, max_duration_ms=300_000
            ),
        ),
        RoleConfig(
            role="reviewer",
            description="Code review of changes",
            system_prompt=_REVIEWER_PROMPT,
            tool_access_level=ToolAccessLevel.READ_GIT,
            allowed_tools=["read_file", "glob", "grep", "diff", "git"],
            default_budget=Budget(
                max_iterations=10, max_tokens=80_000, max_cost=0.8, max_duration_ms=180_000
            ),
        ),
        RoleConfig(
            role="tester",
            description="Test authoring and execution",
            system_prompt=_TESTER_PROMPT,
            tool_access_level=ToolAccessLevel.READ_WRITE_BASH,
            default_budget=Budget(
                max_iterations=15, max_tokens=100_000, max_cost=1.0, max_duration_ms=300_000
            ),
        ),
    ]
