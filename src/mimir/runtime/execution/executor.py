"""Executor protocol — the common interface for execution backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from mimir.runtime.execution.models import (
        AuditEntry,
        ExecuteOptions,
        ExecuteResult,
        ExecutionMode,
        WriteOptions,
    )


@runtime_checkable
class Executor(Protocol):
    """Performs command and filesystem side effects behind a security boundary.

    Implementations gate every mutating operation through a
    :class:`~mimir.runtime.permissions.PermissionManager` and record every
    attempted operation in :attr:`audit_log`.
    """

    async def initialize(self) -> None:
        """Prepare the backend.  Must be called before any other operation."""
        ...

    async def execute(self, command: str, options: ExecuteOptions | None = None) -> ExecuteResult:
        """Run a shell command and return its result."""
        ...

    async def read_file(self, path: str) -> str: ...

    def check_read(self, path: str) -> Path:
        """Authorize reading *path* and return the host path it refers to.

        Raises :class:`~mimir.errors.PermissionDeniedError` when the read
        policy refuses it.
        """
        ...

    async def write_file(self, path: str, content: str, options: WriteOptions | None = None) -> None: ...

    async def exists(self, path: str) -> bool: ...

    async def list_dir(self, path: str) -> list[str]: ...

    async def delete_file(self, path: str) -> None: ...

    def get_cwd(self) -> str: ...

    def set_cwd(self, path: str) -> None: ...

    async def cleanup(self) -> None:
        """Release any resources held by this executor."""
        ...

    def get_mode(self) -> ExecutionMode: ...

    @property
    def audit_log(self) -> list[AuditEntry]: ...

    def clear_audit_log(self) -> None: ...
