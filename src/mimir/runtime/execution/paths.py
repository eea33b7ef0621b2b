"""PathPolicy — project boundary and glob allow/deny rules for file access.

Pure logic, no I/O beyond :meth:`pathlib.Path.resolve`.  Both executors use
the same policy; the devcontainer backend evaluates it against the host path
equivalent of a container path.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path, PurePosixPath

from mimir.errors import PermissionDeniedError
from mimir.runtime.execution.models import FilesystemConfig

PROJECT_DIR_VAR = "${PROJECT_DIR}"


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob into an anchored regex.

    ``**/`` matches zero or more leading directories, ``**`` matches anything,
    ``*`` matches within one path segment and ``?`` matches one non-separator
    character.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


class PathPolicy:
    """Decide whether a path may be read, written, or deleted."""

    def __init__(self, project_dir: str | Path, filesystem: FilesystemConfig | None = None) -> None:
        self._project_dir = Path(project_dir).resolve()
        self._fs = filesystem or FilesystemConfig()

    @property
    def project_dir(self) -> Path:
        return self._project_dir

    def resolve(self, path: str | Path, cwd: str | Path | None = None) -> Path:
        """Resolve *path* against *cwd* (default: the project directory)."""
        base = Path(cwd) if cwd is not None else self._project_dir
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = base / candidate
        return candidate.resolve()

    def is_within_project(self, path: str | Path) -> bool:
        return Path(path).resolve().is_relative_to(self._project_dir)

    def matches(self, path: Path, pattern: str) -> bool:
        """Match *path* against *pattern* as absolute and project-relative."""
        expanded = pattern.replace(PROJECT_DIR_VAR, self._project_dir.as_posix()).replace("\\", "/")
        regex = glob_to_regex(expanded)
        candidates = [path.as_posix()]
        if path.is_relative_to(self._project_dir):
            candidates.append(PurePosixPath(path.relative_to(self._project_dir)).as_posix())
        return any(regex.match(candidate) for candidate in candidates)

    def write_violation(self, path: Path) -> str | None:
        """Return why a write/delete of *path* is refused, or ``None``."""
        if not path.is_relative_to(self._project_dir):
            return "Outside project directory"
        for pattern in self._fs.denied_paths:
            if self.matches(path, pattern):
                return f"Matches denied path pattern: {pattern}"
        allow = self._fs.write_access
        if allow and not any(self.matches(path, pattern) for pattern in allow):
            return "Not in allowed write paths"
        return None

    def check_read(self, path: Path) -> None:
        if self._fs.read_access == "project-only" and not path.is_relative_to(self._project_dir):
            raise PermissionDeniedError(f"Cannot read {path}", "outside project directory")
