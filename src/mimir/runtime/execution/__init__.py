"""Execution subsystem — permission-gated command and file side effects."""

from mimir.runtime.execution.devcontainer import DevContainerConfig, DevContainerExecutor
from mimir.runtime.execution.docker_client import ContainerInfo, ContainerSpec, DockerClient
from mimir.runtime.execution.executor import Executor
from mimir.runtime.execution.factory import create_executor, detect_mode
from mimir.runtime.execution.models import (
    AuditEntry,
    ContainerState,
    ContainerStatus,
    DevContainerSettings,
    ExecuteOptions,
    ExecuteResult,
    ExecutionConfig,
    ExecutionMode,
    FilesystemConfig,
    WriteOptions,
)
from mimir.runtime.execution.native import NativeExecutor
from mimir.runtime.execution.paths import PathPolicy

__all__ = [
    "AuditEntry",
    "ContainerInfo",
    "ContainerSpec",
    "ContainerState",
    "ContainerStatus",
    "DevContainerConfig",
    "DevContainerExecutor",
    "DevContainerSettings",
    "DockerClient",
    "ExecuteOptions",
    "ExecuteResult",
    "ExecutionConfig",
    "ExecutionMode",
    "Executor",
    "FilesystemConfig",
    "NativeExecutor",
    "PathPolicy",
    "WriteOptions",
    "create_executor",
    "detect_mode",
]
