"""Tests for ``mimir check`` CLI command."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from mimir.cli import main

if TYPE_CHECKING:
    from pathlib import Path


class TestCheckCommand:
    def test_native_project(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "Mimir Environment" in result.output
        assert "native" in result.output
        assert "(defaults)" in result.output

    def test_detects_devcontainer(self, tmp_path: Path) -> None:
        (tmp_path / ".devcontainer").mkdir()
        (tmp_path / ".devcontainer" / "devcontainer.json").write_text('{"image": "python:3.12"}')

        with patch(
            "mimir.runtime.execution.docker_client.DockerClient.server_version",
            new=AsyncMock(return_value="27.0.3"),
        ):
            result = CliRunner().invoke(main, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "devcontainer" in result.output
        assert "27.0.3" in result.output

    def test_docker_unavailable(self, tmp_path: Path) -> None:
        (tmp_path / ".devcontainer.json").write_text('{"image": "python:3.12"}')

        with patch(
            "mimir.runtime.execution.docker_client.DockerClient.server_version",
            new=AsyncMock(return_value=None),
        ):
            result = CliRunner().invoke(main, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "unavailable" in result.output

    def test_uses_project_config(self, tmp_path: Path) -> None:
        (tmp_path / ".mimir").mkdir()
        (tmp_path / ".mimir" / "config.yml").write_text(
            "model:\n  model: anthropic/claude-3-5-haiku\npermissions:\n  accept_risk_level: low\n"
        )

        result = CliRunner().invoke(main, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 0
        assert "claude-3-5-haiku" in result.output
        assert "low" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        (tmp_path / ".mimir").mkdir()
        (tmp_path / ".mimir" / "config.yml").write_text("- not\n- a mapping\n")

        result = CliRunner().invoke(main, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "Config error" in result.output
