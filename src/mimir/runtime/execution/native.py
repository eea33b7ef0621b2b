"""NativeExecutor — runs commands and file operations directly on the host.

Security model:

- every command and every write/delete goes through the
  :class:`~mimir.runtime.permissions.PermissionManager` first,
- writes/deletes must stay inside the project and satisfy the
  :class:`~mimir.runtime.execution.paths.PathPolicy`,
- command working directories must stay inside the project,
- every attempted operation lands in the audit log.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from mimir.errors import ExecutionError, PermissionDeniedError, SecurityError
from mimir.runtime.execution.audit import AuditLog
from mimir.runtime.execution.models import (
    AuditEntry,
    ExecuteOptions,
    ExecuteResult,
    ExecutionConfig,
    ExecutionMode,
    WriteOptions,
)
from mimir.runtime.execution.paths import PathPolicy
from mimir.runtime.execution.process import run_shell
from mimir.runtime.permissions import (
    OperationType,
    PermissionManager,
    PermissionRequest,
)

logger = logging.getLogger(__name__)


class NativeExecutor:
    """Host executor.

    Satisfies the :class:`~mimir.runtime.execution.executor.Executor`
    protocol.
    """

    def __init__(self, config: ExecutionConfig, permission_manager: PermissionManager) -> None:
        self._config = config
        self._permissions = permission_manager
        self._policy = PathPolicy(config.project_dir, config.filesystem)
        self._cwd = self._policy.project_dir
        self._audit = AuditLog()

    @property
    def project_dir(self) -> Path:
        return self._policy.project_dir

    async def initialize(self) -> None:
        if not self.project_dir.is_dir():
            raise SecurityError(f"Project directory does not exist: {self.project_dir}")
        logger.debug("NativeExecutor ready in %s", self.project_dir)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def execute(self, command: str, options: ExecuteOptions | None = None) -> ExecuteResult:
        opts = options or ExecuteOptions()
        cwd = self._policy.resolve(opts.cwd, self._cwd) if opts.cwd else self._cwd

        if not self._policy.is_within_project(cwd):
            self._audit.record(
                "bash", command, "denied", reason="Working directory outside project"
            )
            raise SecurityError(f"Working directory outside project: {cwd}")

        permission = await self._permissions.check_permission(
            PermissionRequest(type=OperationType.BASH, command=command, working_dir=str(cwd))
        )
        if not permission.allowed:
            self._audit.record("bash", command, "denied", reason=permission.reason)
            raise PermissionDeniedError(f"Command denied: {command}", permission.reason)

        start = time.monotonic()
        try:
            result = await self._run_command(command, str(cwd), opts)
        except ExecutionError as exc:
            self._audit.record(
                "bash",
                command,
                "failure",
                error=str(exc),
                duration_ms=(time.monotonic() - start) * 1000,
            )
            raise

        self._audit.record(
            "bash",
            command,
            "success",
            exit_code=result.exit_code,
            duration_ms=result.duration_ms,
        )
        return result

    async def _run_command(self, command: str, cwd: str, options: ExecuteOptions) -> ExecuteResult:
        return await run_shell(
            command,
            cwd=cwd,
            env=options.env,
            timeout=options.timeout,
            stdin=options.stdin,
        )

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def check_read(self, path: str) -> Path:
        target = self._policy.resolve(path, self._cwd)
        try:
            self._policy.check_read(target)
        except PermissionDeniedError as exc:
            self._audit.record("file_read", str(target), "denied", reason=exc.reason)
            raise
        return target

    async def read_file(self, path: str) -> str:
        target = self.check_read(path)
        try:
            content = await asyncio.to_thread(target.read_text, encoding="utf-8")
        except OSError as exc:
            self._audit.record("file_read", str(target), "failure", error=str(exc))
            raise
        self._audit.record("file_read", str(target), "success")
        return content

    async def write_file(self, path: str, content: str, options: WriteOptions | None = None) -> None:
        opts = options or WriteOptions()
        target = self._policy.resolve(path, self._cwd)
        await self._authorize_mutation(OperationType.FILE_WRITE, target, "write to")

        try:
            await asyncio.to_thread(self._write_text, target, content, opts.create_dirs)
        except OSError as exc:
            self._audit.record("file_write", str(target), "failure", error=str(exc))
            raise
        self._audit.record("file_write", str(target), "success")

    @staticmethod
    def _write_text(target: Path, content: str, create_dirs: bool) -> None:
        if create_dirs:
            target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    async def delete_file(self, path: str) -> None:
        target = self._policy.resolve(path, self._cwd)
        await self._authorize_mutation(OperationType.FILE_DELETE, target, "delete")

        try:
            await asyncio.to_thread(target.unlink)
        except OSError as exc:
            self._audit.record("file_delete", str(target), "failure", error=str(exc))
            raise
        self._audit.record("file_delete", str(target), "success")

    async def exists(self, path: str) -> bool:
        return self._policy.resolve(path, self._cwd).exists()

    async def list_dir(self, path: str) -> list[str]:
        target = self._policy.resolve(path, self._cwd)
        self._policy.check_read(target)
        return sorted(entry.name for entry in target.iterdir())

    async def _authorize_mutation(self, op: OperationType, target: Path, verb: str) -> None:
        violation = self._policy.write_violation(target)
        if violation is not None:
            self._audit.record(op.value, str(target), "denied", reason=violation)
            raise PermissionDeniedError(f"Cannot {verb} {target}", violation)

        permission = await self._permissions.check_permission(
            PermissionRequest(type=op, path=str(target))
        )
        if not permission.allowed:
            self._audit.record(op.value, str(target), "denied", reason=permission.reason)
            raise PermissionDeniedError(f"Cannot {verb} {target}", permission.reason)

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def get_cwd(self) -> str:
        return str(self._cwd)

    def set_cwd(self, path: str) -> None:
        target = self._policy.resolve(path, self._cwd)
        if not self._policy.is_within_project(target):
            raise SecurityError(f"Cannot set cwd outside project: {target}")
        self._cwd = target

    def get_mode(self) -> ExecutionMode:
        return ExecutionMode.NATIVE

    async def cleanup(self) -> None:
        """No-op — nothing to release for host execution."""

    @property
    def audit_log(self) -> list[AuditEntry]:
        return self._audit.entries

    def clear_audit_log(self) -> None:
        self._audit.clear()
