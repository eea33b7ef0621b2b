"""DevContainerExecutor — runs commands inside the project's dev container.

Lifecycle of :meth:`DevContainerExecutor.initialize`:

1. locate and parse the ``devcontainer.json`` descriptor,
2. find the container with the project's deterministic name,
3. reuse it when running, start it when stopped (unpause when paused),
   otherwise pull/build the image and create a fresh container,
4. run ``postCreateCommand`` (fresh containers only) and
   ``postStartCommand`` (every start).

All command and file operations are ``docker exec`` calls.  Writes and
deletes are checked against the same path policy and permission manager as
the native executor, using the host path that corresponds to the container
path.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from mimir.errors import (
    ConfigError,
    DockerError,
    ExecutionError,
    PermissionDeniedError,
    SecurityError,
)
from mimir.runtime.execution.audit import AuditLog
from mimir.runtime.execution.docker_client import ContainerSpec, DockerClient
from mimir.runtime.execution.models import (
    AuditEntry,
    ContainerState,
    ContainerStatus,
    ExecuteOptions,
    ExecuteResult,
    ExecutionConfig,
    ExecutionMode,
    WriteOptions,
)
from mimir.runtime.execution.paths import PathPolicy
from mimir.runtime.permissions import (
    OperationType,
    PermissionManager,
    PermissionRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE = "/workspace"
DESCRIPTOR_CANDIDATES = (".devcontainer/devcontainer.json", ".devcontainer.json")
KEEP_ALIVE = "while sleep 1000; do :; done"
CONTAINER_LABEL = "dev.mimir.project"

_CAP_ADD = "--cap-add="


class DevContainerConfig(BaseModel):
    """The subset of ``devcontainer.json`` this executor understands."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    image: str | None = None
    docker_file: str | None = Field(default=None, alias="dockerFile")
    build: dict[str, Any] | None = None
    docker_compose_file: str | list[str] | None = Field(default=None, alias="dockerComposeFile")
    workspace_folder: str | None = Field(default=None, alias="workspaceFolder")
    mounts: list[str] = Field(default_factory=list)
    run_args: list[str] = Field(default_factory=list, alias="runArgs")
    container_env: dict[str, str] = Field(default_factory=dict, alias="containerEnv")
    remote_user: str | None = Field(default=None, alias="remoteUser")
    post_create_command: str | list[str] | None = Field(default=None, alias="postCreateCommand")
    post_start_command: str | list[str] | None = Field(default=None, alias="postStartCommand")

    @model_validator(mode="after")
    def _require_source(self) -> DevContainerConfig:
        if not (self.image or self.dockerfile or self.docker_compose_file):
            raise ValueError("devcontainer.json must specify 'image', 'dockerFile', or 'dockerComposeFile'")
        return self

    @property
    def dockerfile(self) -> str | None:
        if self.docker_file:
            return self.docker_file
        if self.build and isinstance(self.build.get("dockerfile"), str):
            return self.build["dockerfile"]
        return None

    @property
    def build_context(self) -> str:
        if self.build and isinstance(self.build.get("context"), str):
            return self.build["context"]
        return "."

    @property
    def cap_add(self) -> list[str]:
        return [arg[len(_CAP_ADD):] for arg in self.run_args if arg.startswith(_CAP_ADD)]


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and trailing commas outside strings."""
    out: list[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return _strip_trailing_commas("".join(out))


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    in_string = False
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\" and i + 1 < n:
                out.append(text[i : i + 2])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def find_descriptor(project_dir: str | Path, config_path: str | None = None) -> Path | None:
    """Locate the devcontainer descriptor for *project_dir*."""
    root = Path(project_dir)
    if config_path:
        explicit = Path(config_path)
        if not explicit.is_absolute():
            explicit = root / explicit
        return explicit if explicit.is_file() else None
    for candidate in DESCRIPTOR_CANDIDATES:
        path = root / candidate
        if path.is_file():
            return path
    return None


def load_descriptor(path: Path) -> DevContainerConfig:
    try:
        raw = json.loads(strip_json_comments(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read devcontainer descriptor {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Devcontainer descriptor {path} must be a JSON object")
    try:
        return DevContainerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid devcontainer descriptor {path}: {exc}") from exc


def container_name_for(project_dir: str | Path) -> str:
    """Deterministic container name: sanitised basename plus a path hash."""
    resolved = Path(project_dir).resolve()
    slug = re.sub(r"[^a-z0-9_.-]+", "-", resolved.name.lower()).strip("-.") or "project"
    digest = hashlib.sha1(str(resolved).encode()).hexdigest()[:8]
    return f"mimir-devcontainer-{slug}-{digest}"


def _status_from_state(state: str) -> ContainerStatus:
    if state in ("running", "restarting"):
        return ContainerStatus.RUNNING
    if state == "paused":
        return ContainerStatus.PAUSED
    return ContainerStatus.STOPPED


class DevContainerExecutor:
    """Dev container executor.

    Satisfies the :class:`~mimir.runtime.execution.executor.Executor`
    protocol.
    """

    def __init__(
        self,
        config: ExecutionConfig,
        permission_manager: PermissionManager,
        docker: DockerClient | None = None,
    ) -> None:
        self._config = config
        self._permissions = permission_manager
        self._docker = docker or DockerClient()
        self._policy = PathPolicy(config.project_dir, config.filesystem)
        self._audit = AuditLog()
        self._descriptor: DevContainerConfig | None = None
        self._workspace = config.devcontainer.workspace_folder or DEFAULT_WORKSPACE
        self._container: ContainerState | None = None

    @property
    def container(self) -> ContainerState | None:
        return self._container

    @property
    def workspace_folder(self) -> str:
        return self._workspace

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        settings = self._config.devcontainer
        self._container = None
        descriptor_path = find_descriptor(self._policy.project_dir, settings.config_path)
        if descriptor_path is None:
            raise SecurityError(
                "No .devcontainer/devcontainer.json found. "
                "Use native mode or provide a devcontainer config."
            )
        descriptor = load_descriptor(descriptor_path)
        self._descriptor = descriptor
        self._workspace = settings.workspace_folder or descriptor.workspace_folder or DEFAULT_WORKSPACE

        name = container_name_for(self._policy.project_dir)
        existing = await self._find_existing(name)

        if existing is not None and existing.status == ContainerStatus.RUNNING:
            self._container = existing
            logger.info("Using existing dev container: %s", name)
            return

        if existing is not None:
            if existing.status == ContainerStatus.PAUSED:
                await self._docker.unpause(existing.id)
            else:
                await self._docker.start(existing.id)
            self._container = existing.model_copy(update={"status": ContainerStatus.RUNNING})
            logger.info("Started dev container: %s", name)
        else:
            self._container = await self._create_and_start(name, descriptor, descriptor_path)
            await self._run_lifecycle("postCreateCommand", descriptor.post_create_command)

        await self._run_lifecycle("postStartCommand", descriptor.post_start_command)

    async def _find_existing(self, name: str) -> ContainerState | None:
        for info in await self._docker.list_containers(name=name):
            if info.name == name:
                return ContainerState(
                    id=info.id,
                    name=info.name,
                    status=_status_from_state(info.state),
                    image=info.image,
                )
        return None

    async def _create_and_start(
        self, name: str, descriptor: DevContainerConfig, descriptor_path: Path
    ) -> ContainerState:
        if descriptor.image:
            image = descriptor.image
            await self._docker.pull_image(image)
        elif descriptor.dockerfile:
            base = descriptor_path.parent
            image = f"{name}:latest"
            await self._docker.build_image(
                str((base / descriptor.build_context).resolve()),
                image,
                dockerfile=str((base / descriptor.dockerfile).resolve()),
            )
        else:
            raise SecurityError("Docker Compose dev containers are not supported; use 'image' or 'dockerFile'")

        project = self._policy.project_dir
        spec = ContainerSpec(
            name=name,
            image=image,
            workdir=self._workspace,
            binds=[f"{project}:{self._workspace}"],
            mounts=descriptor.mounts,
            env=descriptor.container_env,
            user=descriptor.remote_user,
            cap_add=descriptor.cap_add,
            labels={CONTAINER_LABEL: str(project)},
            entrypoint="sh",
            command=["-c", KEEP_ALIVE],
        )
        container_id = await self._docker.create_container(spec)
        try:
            await self._docker.start(container_id)
        except DockerError:
            logger.warning("Failed to start dev container %s, removing it", name)
            try:
                await self._docker.remove(container_id, force=True)
            except DockerError as exc:
                logger.warning("Failed to remove dev container %s: %s", name, exc)
            raise

        logger.info("Created dev container: %s (%s)", name, image)
        return ContainerState(id=container_id, name=name, status=ContainerStatus.RUNNING, image=image)

    async def _run_lifecycle(self, label: str, command: str | list[str] | None) -> None:
        if not command:
            return
        argv = ["sh", "-c", command] if isinstance(command, str) else list(command)
        result = await self._docker.exec(
            self._require_container().id,
            argv,
            workdir=self._workspace,
            user=self._remote_user,
        )
        if result.exit_code != 0:
            logger.warning("%s exited with %d: %s", label, result.exit_code, result.stderr.strip())
        else:
            logger.debug("%s completed", label)

    async def cleanup(self) -> None:
        if self._container is None or not self._config.devcontainer.stop_on_exit:
            return
        logger.info("Stopping dev container: %s", self._container.name)
        await self._docker.stop(self._container.id)
        self._container = None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def execute(self, command: str, options: ExecuteOptions | None = None) -> ExecuteResult:
        container = self._require_container()
        opts = options or ExecuteOptions()
        cwd = self.container_path(opts.cwd) if opts.cwd else self._workspace

        permission = await self._permissions.check_permission(
            PermissionRequest(type=OperationType.BASH, command=command, working_dir=cwd)
        )
        if not permission.allowed:
            self._audit.record("bash", command, "denied", reason=permission.reason)
            raise PermissionDeniedError(f"Command denied: {command}", permission.reason)

        start = time.monotonic()
        try:
            result = await self._docker.exec(
                container.id,
                ["sh", "-c", command],
                workdir=cwd,
                env=opts.env,
                user=self._remote_user,
                stdin=opts.stdin,
                timeout=opts.timeout,
            )
        except ExecutionError as exc:
            self._audit.record(
                "bash", command, "failure", error=str(exc), duration_ms=(time.monotonic() - start) * 1000
            )
            raise ExecutionError(
                f"Command failed in dev container: {command}",
                exit_code=exc.exit_code,
                stdout=exc.stdout,
                stderr=exc.stderr,
            ) from exc

        self._audit.record(
            "bash", command, "success", exit_code=result.exit_code, duration_ms=result.duration_ms
        )
        return result

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def check_read(self, path: str) -> Path:
        container_path = self.container_path(path)
        host = self.host_path(container_path)
        try:
            self._policy.check_read(host)
        except PermissionDeniedError as exc:
            self._audit.record("file_read", container_path, "denied", reason=exc.reason)
            raise
        return host

    async def read_file(self, path: str) -> str:
        self._require_container()
        self.check_read(path)
        container_path = self.container_path(path)
        result = await self._exec(["cat", container_path])
        if result.exit_code != 0:
            self._audit.record("file_read", container_path, "failure", error=result.stderr.strip())
            raise ExecutionError(
                f"Failed to read {container_path}: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        self._audit.record("file_read", container_path, "success")
        return result.stdout

    async def write_file(self, path: str, content: str, options: WriteOptions | None = None) -> None:
        self._require_container()
        opts = options or WriteOptions()
        container_path = self.container_path(path)
        await self._authorize_mutation(OperationType.FILE_WRITE, container_path, "write to")

        if opts.create_dirs:
            parent = str(PurePosixPath(container_path).parent)
            await self._exec(["mkdir", "-p", parent])

        result = await self._exec(["sh", "-c", 'cat > "$1"', "sh", container_path], stdin=content)
        if result.exit_code != 0:
            self._audit.record("file_write", container_path, "failure", error=result.stderr.strip())
            raise ExecutionError(
                f"Failed to write {container_path}: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        self._audit.record("file_write", container_path, "success")

    async def delete_file(self, path: str) -> None:
        self._require_container()
        container_path = self.container_path(path)
        await self._authorize_mutation(OperationType.FILE_DELETE, container_path, "delete")

        result = await self._exec(["rm", container_path])
        if result.exit_code != 0:
            self._audit.record("file_delete", container_path, "failure", error=result.stderr.strip())
            raise ExecutionError(
                f"Failed to delete {container_path}: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        self._audit.record("file_delete", container_path, "success")

    async def exists(self, path: str) -> bool:
        result = await self._exec(["test", "-e", self.container_path(path)])
        return result.exit_code == 0

    async def list_dir(self, path: str) -> list[str]:
        container_path = self.container_path(path)
        result = await self._exec(["ls", "-1A", container_path])
        if result.exit_code != 0:
            raise ExecutionError(
                f"Failed to list {container_path}: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return sorted(line for line in result.stdout.splitlines() if line)

    async def _authorize_mutation(self, op: OperationType, container_path: str, verb: str) -> None:
        violation = self._policy.write_violation(self.host_path(container_path))
        if violation is not None:
            self._audit.record(op.value, container_path, "denied", reason=violation)
            raise PermissionDeniedError(f"Cannot {verb} {container_path}", violation)

        permission = await self._permissions.check_permission(
            PermissionRequest(type=op, path=container_path)
        )
        if not permission.allowed:
            self._audit.record(op.value, container_path, "denied", reason=permission.reason)
            raise PermissionDeniedError(f"Cannot {verb} {container_path}", permission.reason)

    async def _exec(self, argv: list[str], *, stdin: str | None = None) -> ExecuteResult:
        return await self._docker.exec(
            self._require_container().id,
            argv,
            workdir=self._workspace,
            user=self._remote_user,
            stdin=stdin,
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def container_path(self, path: str) -> str:
        """Translate a host or relative path into a container path."""
        workspace = PurePosixPath(self._workspace)
        candidate = PurePosixPath(path.replace("\\", "/"))
        if not candidate.is_absolute():
            return _normalize(workspace / candidate)
        host = Path(path)
        if host.is_relative_to(self._policy.project_dir):
            rel = host.relative_to(self._policy.project_dir)
            return _normalize(workspace / PurePosixPath(rel.as_posix()))
        return _normalize(candidate)

    def host_path(self, container_path: str) -> Path:
        """The host path a container path refers to (for policy checks)."""
        workspace = PurePosixPath(self._workspace)
        candidate = PurePosixPath(container_path)
        if candidate.is_relative_to(workspace):
            return self._policy.resolve(candidate.relative_to(workspace).as_posix())
        return Path(str(candidate))

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def get_cwd(self) -> str:
        return self._workspace

    def set_cwd(self, path: str) -> None:
        raise SecurityError("Changing the working directory is not supported in dev containers")

    def get_mode(self) -> ExecutionMode:
        return ExecutionMode.DEVCONTAINER

    @property
    def audit_log(self) -> list[AuditEntry]:
        return self._audit.entries

    def clear_audit_log(self) -> None:
        self._audit.clear()

    @property
    def _remote_user(self) -> str | None:
        return self._descriptor.remote_user if self._descriptor else None

    def _require_container(self) -> ContainerState:
        if self._container is None:
            raise SecurityError("Dev container not initialized")
        return self._container


def _normalize(path: PurePosixPath) -> str:
    """Collapse ``.`` and ``..`` segments without touching the filesystem."""
    parts: list[str] = []
    for part in path.parts[1:] if path.is_absolute() else path.parts:
        if part == "..":
            if parts:
                parts.pop()
        elif part != ".":
            parts.append(part)
    return "/" + "/".join(parts)
