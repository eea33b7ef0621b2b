"""Executor selection — a closed switch over :class:`ExecutionMode`."""

from __future__ import annotations

import logging
from pathlib import Path

from mimir.errors import SecurityError
from mimir.runtime.execution.devcontainer import DevContainerExecutor, find_descriptor
from mimir.runtime.execution.docker_client import DockerClient
from mimir.runtime.execution.executor import Executor
from mimir.runtime.execution.models import ExecutionConfig, ExecutionMode
from mimir.runtime.execution.native import NativeExecutor
from mimir.runtime.permissions import PermissionManager

logger = logging.getLogger(__name__)


def create_executor(
    config: ExecutionConfig,
    permission_manager: PermissionManager,
    docker: DockerClient | None = None,
) -> Executor:
    """Build the executor for ``config.mode``.

    The executor is returned uninitialised; callers must
    ``await executor.initialize()`` before use.
    """
    mode = config.mode
    if mode == ExecutionMode.NATIVE:
        return NativeExecutor(config, permission_manager)
    if mode == ExecutionMode.DEVCONTAINER:
        return DevContainerExecutor(config, permission_manager, docker)
    raise SecurityError(f"Unknown execution mode: {mode}")


def detect_mode(project_dir: str | Path, config_path: str | None = None) -> ExecutionMode:
    """Devcontainer when a descriptor exists, native otherwise."""
    descriptor = find_descriptor(project_dir, config_path)
    if descriptor is not None:
        logger.debug("Dev container descriptor found at %s", descriptor)
        return ExecutionMode.DEVCONTAINER
    return ExecutionMode.NATIVE
