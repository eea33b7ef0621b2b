"""DockerClient — thin async wrapper over the ``docker`` CLI.

Uses the ``docker`` CLI via subprocess (no docker-py dependency).  Every
lifecycle call raises :class:`~mimir.errors.DockerError` on a non-zero exit;
:meth:`DockerClient.exec` returns the command's exit status instead.
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, Field

from mimir.errors import DockerError, ExecutionError
from mimir.runtime.execution.models import ExecuteResult
from mimir.runtime.execution.process import run_exec

logger = logging.getLogger(__name__)


class ContainerInfo(BaseModel):
    """A row of ``docker ps`` output."""

    id: str
    name: str
    image: str = ""
    state: str = Field(default="", description="Raw docker state: running, exited, paused, ...")


class ContainerSpec(BaseModel):
    """Arguments for ``docker create``."""

    name: str
    image: str
    workdir: str | None = None
    binds: list[str] = Field(default_factory=list, description="host:container volume binds.")
    mounts: list[str] = Field(default_factory=list, description="Raw --mount specifications.")
    env: dict[str, str] = Field(default_factory=dict)
    user: str | None = None
    cap_add: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    entrypoint: str | None = None
    command: list[str] = Field(default_factory=list)


class DockerClient:
    """Async ``docker`` CLI client."""

    def __init__(self, binary: str = "docker") -> None:
        self._binary = binary

    async def list_containers(self, *, name: str | None = None, all: bool = True) -> list[ContainerInfo]:
        args = ["ps", "--no-trunc", "--format", "{{json .}}"]
        if all:
            args.append("-a")
        if name:
            args.extend(["--filter", f"name=^{name}$"])
        out = await self._run_docker(args)

        containers: list[ContainerInfo] = []
        for line in out.stdout.splitlines():
            if not line.strip():
                continue
            row = json.loads(line)
            info = ContainerInfo(
                id=row.get("ID", ""),
                name=row.get("Names", "").lstrip("/"),
                image=row.get("Image", ""),
                state=row.get("State", "").lower(),
            )
            # docker's name filter is a substring match on older engines.
            if name and info.name != name:
                continue
            containers.append(info)
        return containers

    async def create_container(self, spec: ContainerSpec) -> str:
        """``docker create`` and return the new container id."""
        out = await self._run_docker(self._build_create_args(spec))
        return out.stdout.strip()

    async def start(self, container_id: str) -> None:
        await self._run_docker(["start", container_id])

    async def stop(self, container_id: str, timeout: int = 10) -> None:
        await self._run_docker(["stop", "-t", str(timeout), container_id])

    async def unpause(self, container_id: str) -> None:
        await self._run_docker(["unpause", container_id])

    async def remove(self, container_id: str, *, force: bool = True) -> None:
        args = ["rm"]
        if force:
            args.append("-f")
        args.append(container_id)
        await self._run_docker(args)

    async def exec(
        self,
        container_id: str,
        cmd: list[str],
        *,
        workdir: str | None = None,
        env: dict[str, str] | None = None,
        user: str | None = None,
        stdin: str | None = None,
        timeout: float | None = None,
    ) -> ExecuteResult:
        """Run *cmd* inside a running container.  Non-zero exits are returned."""
        args = ["exec"]
        if stdin is not None:
            args.append("-i")
        if workdir:
            args.extend(["-w", workdir])
        if user:
            args.extend(["--user", user])
        for key, value in (env or {}).items():
            args.extend(["-e", f"{key}={value}"])
        args.append(container_id)
        args.extend(cmd)
        return await self._run_docker(args, stdin=stdin, timeout=timeout, check=False)

    async def build_image(self, context: str, tag: str, *, dockerfile: str | None = None) -> None:
        args = ["build", "-t", tag]
        if dockerfile:
            args.extend(["-f", dockerfile])
        args.append(context)
        logger.info("Building image %s from %s", tag, context)
        await self._run_docker(args)

    async def server_version(self) -> str | None:
        """The daemon version, or None when docker is missing or the daemon is down."""
        try:
            result = await self._run_docker(
                ["version", "--format", "{{.Server.Version}}"], timeout=10, check=False
            )
        except ExecutionError:
            return None
        if result.exit_code != 0:
            return None
        return result.stdout.strip() or None

    async def pull_image(self, image: str) -> None:
        logger.info("Pulling image %s", image)
        await self._run_docker(["pull", image])

    @staticmethod
    def _build_create_args(spec: ContainerSpec) -> list[str]:
        args: list[str] = ["create", "--name", spec.name]
        if spec.workdir:
            args.extend(["-w", spec.workdir])
        for bind in spec.binds:
            args.extend(["-v", bind])
        for mount in spec.mounts:
            args.extend(["--mount", mount])
        for key, value in spec.env.items():
            args.extend(["-e", f"{key}={value}"])
        if spec.user:
            args.extend(["--user", spec.user])
        for cap in spec.cap_add:
            args.append(f"--cap-add={cap}")
        for key, value in spec.labels.items():
            args.extend(["--label", f"{key}={value}"])
        if spec.entrypoint:
            args.extend(["--entrypoint", spec.entrypoint])
        args.append(spec.image)
        args.extend(spec.command)
        return args

    async def _run_docker(
        self,
        args: list[str],
        *,
        stdin: str | None = None,
        timeout: float | None = None,
        check: bool = True,
    ) -> ExecuteResult:
        """Run a docker CLI command and return its output."""
        cmd = [self._binary, *args]
        try:
            result = await run_exec(cmd, stdin=stdin, timeout=timeout)
        except ExecutionError as exc:
            if exc.__cause__ is not None:
                raise DockerError(str(exc.__cause__)) from exc
            raise

        if check and result.exit_code != 0:
            raise DockerError(
                f"{args[0]} failed (rc={result.exit_code}): {result.stderr.strip() or result.stdout.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return result
