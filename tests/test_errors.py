"""Tests for the shared error hierarchy."""

from __future__ import annotations

import pytest

from mimir.errors import (
    AgentPausedError,
    ConfigError,
    DockerError,
    ExecutionError,
    MimirError,
    PermissionDeniedError,
    SecurityError,
    ToolRegistrationError,
)


@pytest.mark.parametrize(
    "error",
    [
        ConfigError("bad"),
        PermissionDeniedError("no"),
        SecurityError("escape"),
        ExecutionError("failed"),
        DockerError("boom"),
        ToolRegistrationError("bash"),
        AgentPausedError(),
    ],
)
def test_all_errors_share_a_base(error: Exception) -> None:
    assert isinstance(error, MimirError)


class TestPermissionDeniedError:
    def test_reason_in_message(self) -> None:
        err = PermissionDeniedError("Command denied: rm -rf /", "blocklist")
        assert err.reason == "blocklist"
        assert str(err) == "Command denied: rm -rf / (blocklist)"

    def test_without_reason(self) -> None:
        assert str(PermissionDeniedError("Cannot write")) == "Cannot write"


class TestExecutionErrors:
    def test_execution_error_fields(self) -> None:
        err = ExecutionError("failed", exit_code=2, stdout="out", stderr="err")
        assert (err.exit_code, err.stdout, err.stderr) == (2, "out", "err")

    def test_docker_error_is_execution_error(self) -> None:
        err = DockerError("no such container", exit_code=1, stderr="Error: No such container")
        assert isinstance(err, ExecutionError)
        assert str(err) == "Docker error: no such container"
        assert err.detail == "no such container"
        assert err.stderr == "Error: No such container"

    def test_docker_error_without_detail(self) -> None:
        assert str(DockerError()) == "Docker error"


def test_tool_registration_error() -> None:
    err = ToolRegistrationError("grep")
    assert err.name == "grep"
    assert str(err) == "Tool 'grep' is already registered"


def test_agent_paused_error() -> None:
    assert str(AgentPausedError()) == "Agent paused"
