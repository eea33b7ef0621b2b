"""Tests for NativeExecutor."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from mimir.errors import ExecutionError, PermissionDeniedError, SecurityError
from mimir.runtime.execution.models import (
    ExecuteOptions,
    ExecuteResult,
    ExecutionConfig,
    ExecutionMode,
    FilesystemConfig,
)
from mimir.runtime.execution.native import NativeExecutor
from mimir.runtime.permissions import PermissionConfig, PermissionManager

if TYPE_CHECKING:
    from pathlib import Path


def _executor(
    project: Path,
    *,
    filesystem: FilesystemConfig | None = None,
    permissions: PermissionConfig | None = None,
) -> NativeExecutor:
    config = ExecutionConfig(project_dir=str(project), filesystem=filesystem or FilesystemConfig())
    return NativeExecutor(config, PermissionManager(permissions))


class TestLifecycle:
    async def test_initialize_requires_project_dir(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path / "missing")
        with pytest.raises(SecurityError, match="does not exist"):
            await executor.initialize()

    async def test_mode_and_cwd(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        await executor.initialize()
        assert executor.get_mode() == ExecutionMode.NATIVE
        assert executor.get_cwd() == str(tmp_path.resolve())

    def test_set_cwd_inside_project(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        executor = _executor(tmp_path)
        executor.set_cwd("src")
        assert executor.get_cwd() == str((tmp_path / "src").resolve())

    def test_set_cwd_outside_project(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path / "project")
        with pytest.raises(SecurityError):
            executor.set_cwd("..")


class TestExecute:
    async def test_runs_command(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        result = await executor.execute("echo hello")

        assert result.exit_code == 0
        assert result.stdout.strip() == "hello"
        [entry] = executor.audit_log
        assert entry.result == "success"
        assert entry.exit_code == 0

    async def test_default_cwd_is_project(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        result = await executor.execute("pwd")
        assert result.stdout.strip() == str(tmp_path.resolve())

    async def test_denied_command_never_runs(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path, permissions=PermissionConfig(blocklist=["rm *"]))

        with patch.object(NativeExecutor, "_run_command", new_callable=AsyncMock) as mock_run:
            with pytest.raises(PermissionDeniedError) as exc_info:
                await executor.execute("rm important.txt")

        mock_run.assert_not_called()
        assert "blocklist" in exc_info.value.reason
        assert [e.result for e in executor.audit_log] == ["denied"]

    async def test_high_risk_requires_approval(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        with patch.object(NativeExecutor, "_run_command", new_callable=AsyncMock) as mock_run:
            with pytest.raises(PermissionDeniedError, match="requires approval"):
                await executor.execute("git reset --hard")
        mock_run.assert_not_called()

    async def test_cwd_outside_project(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path / "project")
        with pytest.raises(SecurityError, match="outside project"):
            await executor.execute("ls", ExecuteOptions(cwd=str(tmp_path)))
        assert executor.audit_log[0].result == "denied"

    async def test_execution_failure_is_audited(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        with patch.object(
            NativeExecutor,
            "_run_command",
            new_callable=AsyncMock,
            side_effect=ExecutionError("Command timed out after 1s: sleep 5"),
        ):
            with pytest.raises(ExecutionError):
                await executor.execute("sleep 5")

        [entry] = executor.audit_log
        assert entry.result == "failure"
        assert "timed out" in (entry.error or "")

    async def test_run_command_receives_options(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        fake = ExecuteResult(exit_code=0, stdout="ok")
        with patch.object(
            NativeExecutor, "_run_command", new_callable=AsyncMock, return_value=fake
        ) as mock_run:
            result = await executor.execute("make", ExecuteOptions(timeout=5, env={"A": "1"}))

        assert result is fake
        command, cwd, opts = mock_run.call_args.args
        assert command == "make"
        assert cwd == str(tmp_path.resolve())
        assert opts.timeout == 5
        assert opts.env == {"A": "1"}


class TestFiles:
    async def test_write_then_read(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        await executor.write_file("pkg/mod.py", "print('hi')\n")

        assert (tmp_path / "pkg" / "mod.py").read_text() == "print('hi')\n"
        assert await executor.read_file("pkg/mod.py") == "print('hi')\n"
        assert [e.type for e in executor.audit_log] == ["file_write", "file_read"]

    async def test_write_outside_project_rejected(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        executor = _executor(project)

        with pytest.raises(PermissionDeniedError, match="Outside project directory"):
            await executor.write_file("../escape.txt", "x")

        assert not (tmp_path / "escape.txt").exists()
        assert executor.audit_log[0].result == "denied"

    async def test_denied_path_never_written(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path, filesystem=FilesystemConfig(denied_paths=["**/.env"]))

        with patch.object(NativeExecutor, "_write_text") as mock_write:
            with pytest.raises(PermissionDeniedError, match="denied path pattern"):
                await executor.write_file("config/.env", "SECRET=1")

        mock_write.assert_not_called()

    async def test_write_permission_denied_by_blocklist(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path, permissions=PermissionConfig(blocklist=["*.lock"]))
        with pytest.raises(PermissionDeniedError, match="blocklist"):
            await executor.write_file("poetry.lock", "")

    async def test_write_without_create_dirs(self, tmp_path: Path) -> None:
        from mimir.runtime.execution.models import WriteOptions

        executor = _executor(tmp_path)
        with pytest.raises(OSError):
            await executor.write_file("missing/a.txt", "x", WriteOptions(create_dirs=False))
        assert executor.audit_log[-1].result == "failure"

    async def test_delete(self, tmp_path: Path) -> None:
        (tmp_path / "old.txt").write_text("bye")
        executor = _executor(tmp_path)

        await executor.delete_file("old.txt")

        assert not (tmp_path / "old.txt").exists()
        assert executor.audit_log[-1].type == "file_delete"

    async def test_read_missing_file(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        with pytest.raises(FileNotFoundError):
            await executor.read_file("nope.txt")
        assert executor.audit_log[-1].result == "failure"

    async def test_read_project_only(self, tmp_path: Path) -> None:
        (tmp_path / "outside.txt").write_text("x")
        project = tmp_path / "project"
        project.mkdir()
        executor = _executor(project, filesystem=FilesystemConfig(read_access="project-only"))

        with pytest.raises(PermissionDeniedError):
            await executor.read_file("../outside.txt")

    def test_check_read(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        executor = _executor(project, filesystem=FilesystemConfig(read_access="project-only"))

        assert executor.check_read("src/a.py") == project.resolve() / "src" / "a.py"
        assert executor.audit_log == []
        with pytest.raises(PermissionDeniedError):
            executor.check_read(str(tmp_path))
        entry = executor.audit_log[-1]
        assert (entry.type, entry.result) == ("file_read", "denied")

    async def test_exists_and_list_dir(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("")
        (tmp_path / "a.txt").write_text("")
        executor = _executor(tmp_path)

        assert await executor.exists("a.txt") is True
        assert await executor.exists("c.txt") is False
        assert await executor.list_dir(".") == ["a.txt", "b.txt"]

    async def test_clear_audit_log(self, tmp_path: Path) -> None:
        executor = _executor(tmp_path)
        await executor.write_file("a.txt", "x")
        executor.clear_audit_log()
        assert executor.audit_log == []
