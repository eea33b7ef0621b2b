"""Data models for the execution subsystem."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DENIED_PATHS = ["**/.env", "**/.git/**", "**/node_modules/**"]


class ExecutionMode(str, Enum):
    """Which executor backend performs side effects."""

    NATIVE = "native"
    DEVCONTAINER = "devcontainer"


class FilesystemConfig(BaseModel):
    """Path policy shared by both executors."""

    read_access: Literal["anywhere", "project-only"] = "anywhere"
    write_access: list[str] = Field(
        default_factory=list,
        description="Glob allow-list for writes/deletes; empty means the whole project.",
    )
    denied_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DENIED_PATHS),
        description="Glob deny-list for writes/deletes; deny always wins.",
    )


class DevContainerSettings(BaseModel):
    """How the devcontainer backend finds and manages its container."""

    auto_detect: bool = True
    config_path: str | None = Field(default=None, description="Descriptor path, relative to the project.")
    workspace_folder: str | None = Field(default=None, description="Override the descriptor's workspaceFolder.")
    stop_on_exit: bool = False


class ExecutionConfig(BaseModel):
    """Executor selection and sandbox policy."""

    mode: ExecutionMode = ExecutionMode.NATIVE
    project_dir: str = "."
    filesystem: FilesystemConfig = Field(default_factory=FilesystemConfig)
    devcontainer: DevContainerSettings = Field(default_factory=DevContainerSettings)


class ExecuteOptions(BaseModel):
    """Per-command options."""

    cwd: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=120.0, description="Seconds before the command is killed.")
    stdin: str | None = None


class ExecuteResult(BaseModel):
    """Outcome of a command.  Non-zero exits are results, not errors."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0


class WriteOptions(BaseModel):
    create_dirs: bool = True


class ContainerStatus(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    PAUSED = "paused"


class ContainerState(BaseModel):
    """A devcontainer known to the docker daemon."""

    id: str
    name: str
    status: ContainerStatus
    image: str = ""


class AuditEntry(BaseModel):
    """One operation an executor attempted, with its outcome."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: str
    operation: str
    result: Literal["success", "failure", "denied"]
    exit_code: int | None = None
    duration_ms: float | None = None
    error: str | None = None
    reason: str | None = None
