"""Tests for DockerClient (subprocess mocked)."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from mimir.errors import DockerError, ExecutionError
from mimir.runtime.execution.docker_client import ContainerSpec, DockerClient
from mimir.runtime.execution.models import ExecuteResult

_RUN_EXEC = "mimir.runtime.execution.docker_client.run_exec"


def _ok(stdout: str = "") -> ExecuteResult:
    return ExecuteResult(exit_code=0, stdout=stdout)


class TestDockerClient:
    async def test_list_containers_exact_name(self) -> None:
        rows = [
            {"ID": "1", "Names": "proj", "Image": "img", "State": "running"},
            {"ID": "2", "Names": "proj-old", "Image": "img", "State": "exited"},
        ]
        stdout = "\n".join(json.dumps(r) for r in rows) + "\n"
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=_ok(stdout)) as mock_run:
            containers = await DockerClient().list_containers(name="proj")

        assert [c.id for c in containers] == ["1"]
        assert containers[0].state == "running"
        argv = mock_run.await_args.args[0]
        assert argv[:2] == ["docker", "ps"]
        assert "-a" in argv
        assert "name=^proj$" in argv

    async def test_create_returns_id(self) -> None:
        spec = ContainerSpec(name="c", image="python:3.12")
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=_ok("abc123\n")):
            assert await DockerClient().create_container(spec) == "abc123"

    def test_build_create_args(self) -> None:
        spec = ContainerSpec(
            name="c",
            image="python:3.12",
            workdir="/workspace",
            binds=["/host:/workspace"],
            mounts=["type=volume,source=cache,target=/cache"],
            env={"A": "1"},
            user="dev",
            cap_add=["SYS_PTRACE"],
            labels={"dev.mimir.project": "/host"},
            entrypoint="sh",
            command=["-c", "sleep infinity"],
        )
        args = DockerClient._build_create_args(spec)

        assert args[:3] == ["create", "--name", "c"]
        assert ["-w", "/workspace"] == args[args.index("-w") : args.index("-w") + 2]
        assert "/host:/workspace" in args
        assert "type=volume,source=cache,target=/cache" in args
        assert "A=1" in args
        assert "--cap-add=SYS_PTRACE" in args
        assert "dev.mimir.project=/host" in args
        assert args[-3:] == ["python:3.12", "-c", "sleep infinity"]

    async def test_exec_with_stdin_is_interactive(self) -> None:
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=_ok()) as mock_run:
            await DockerClient().exec("cid", ["cat"], workdir="/w", user="dev", stdin="data")

        argv = mock_run.await_args.args[0]
        assert argv == ["docker", "exec", "-i", "-w", "/w", "--user", "dev", "cid", "cat"]
        assert mock_run.await_args.kwargs["stdin"] == "data"

    async def test_exec_returns_nonzero(self) -> None:
        failed = ExecuteResult(exit_code=2, stderr="nope")
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=failed):
            result = await DockerClient().exec("cid", ["false"])
        assert result.exit_code == 2

    async def test_lifecycle_failure_raises(self) -> None:
        failed = ExecuteResult(exit_code=1, stderr="No such container")
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=failed):
            with pytest.raises(DockerError, match="start failed \\(rc=1\\): No such container"):
                await DockerClient().start("cid")

    async def test_missing_binary(self) -> None:
        err = ExecutionError("Failed to run docker")
        err.__cause__ = FileNotFoundError("docker")
        with patch(_RUN_EXEC, new_callable=AsyncMock, side_effect=err):
            with pytest.raises(DockerError):
                await DockerClient().pull_image("python:3.12")

    async def test_stop_and_remove(self) -> None:
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=_ok()) as mock_run:
            client = DockerClient()
            await client.stop("cid", timeout=3)
            await client.remove("cid")

        calls = [c.args[0] for c in mock_run.await_args_list]
        assert calls == [["docker", "stop", "-t", "3", "cid"], ["docker", "rm", "-f", "cid"]]

    async def test_server_version(self) -> None:
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=_ok("27.1.0\n")):
            assert await DockerClient().server_version() == "27.1.0"

        down = ExecuteResult(exit_code=1, stderr="Cannot connect")
        with patch(_RUN_EXEC, new_callable=AsyncMock, return_value=down):
            assert await DockerClient().server_version() is None
