"""Async subprocess helpers shared by the executors and the docker client."""

from __future__ import annotations

import asyncio
import logging
import os
import time

from mimir.errors import ExecutionError
from mimir.runtime.execution.models import ExecuteResult

logger = logging.getLogger(__name__)


async def run_shell(
    command: str,
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    timeout: float = 120.0,
    stdin: str | None = None,
) -> ExecuteResult:
    """Run *command* through the system shell."""
    merged_env = {**os.environ, **env} if env else None
    start = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            cwd=cwd,
            env=merged_env,
            stdin=asyncio.subprocess.PIPE if stdin is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ExecutionError(f"Failed to spawn command: {exc}") from exc
    return await _communicate(proc, command, stdin, timeout, start)


async def run_exec(
    argv: list[str],
    *,
    timeout: float | None = None,
    stdin: str | None = None,
) -> ExecuteResult:
    """Run *argv* directly (no shell)."""
    start = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if stdin is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ExecutionError(f"Failed to run {argv[0]}: {exc}") from exc
    return await _communicate(proc, " ".join(argv), stdin, timeout, start)


async def _communicate(
    proc: asyncio.subprocess.Process,
    label: str,
    stdin: str | None,
    timeout: float | None,
    start: float,
) -> ExecuteResult:
    stdin_bytes = stdin.encode() if stdin is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(input=stdin_bytes), timeout=timeout)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning("Command timed out after %ss: %s", timeout, label)
        raise ExecutionError(f"Command timed out after {timeout}s: {label}") from None

    return ExecuteResult(
        exit_code=proc.returncode if proc.returncode is not None else 1,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
        duration_ms=(time.monotonic() - start) * 1000,
    )
