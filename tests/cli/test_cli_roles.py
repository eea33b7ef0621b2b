"""Tests for ``mimir roles`` CLI command."""

from __future__ import annotations

from click.testing import CliRunner

from mimir.cli import main


class TestRolesCommand:
    def test_lists_roles(self) -> None:
        result = CliRunner().invoke(main, ["roles"])

        assert result.exit_code == 0
        assert "Agent Roles" in result.output
        for name in ["finder", "thinker", "librarian", "refactoring", "reviewer", "tester"]:
            assert name in result.output

    def test_role_details(self) -> None:
        result = CliRunner().invoke(main, ["roles", "refactoring"])

        assert result.exit_code == 0
        assert "Forbidden: bash" in result.output
        assert "max_iterations" in result.output
        assert "refactoring specialist" in result.output

    def test_unknown_role(self) -> None:
        result = CliRunner().invoke(main, ["roles", "ghost"])

        assert result.exit_code == 1
        assert "Unknown role" in result.output


class TestMainGroup:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "mimir" in result.output
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ["run", "tools", "roles", "check"]:
            assert command in result.output
