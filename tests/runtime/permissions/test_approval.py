"""Tests for the Approver protocol and implementations."""

import asyncio
from unittest.mock import patch

from mimir.runtime.permissions import (
    ApprovalRequest,
    Approver,
    AutoApprover,
    CLIApprover,
    OperationType,
    PermissionRequest,
    RiskAssessment,
)


def _request() -> ApprovalRequest:
    return ApprovalRequest(
        request=PermissionRequest(type=OperationType.BASH, command="rm -rf build"),
        assessment=RiskAssessment(),
    )


class TestApproverProtocol:
    def test_auto_approver_satisfies_protocol(self) -> None:
        assert isinstance(AutoApprover(), Approver)

    def test_cli_approver_satisfies_protocol(self) -> None:
        assert isinstance(CLIApprover(), Approver)


class TestAutoApprover:
    async def test_always_approves(self) -> None:
        result = await AutoApprover().request_approval(_request())
        assert result.approved is True
        assert result.reason == "auto-approved"


class TestCLIApprover:
    async def test_approve_yes(self) -> None:
        with patch.object(CLIApprover, "_read_input", return_value="YES"):
            with patch.object(CLIApprover, "_print_summary"):
                result = await CLIApprover().request_approval(_request())

        assert result.approved is True
        assert result.reason == "approved by user"

    async def test_deny_empty_input(self) -> None:
        with patch.object(CLIApprover, "_read_input", return_value=""):
            with patch.object(CLIApprover, "_print_summary"):
                result = await CLIApprover().request_approval(_request())

        assert result.approved is False
        assert result.reason == "denied by user"

    async def test_timeout_denies(self) -> None:
        def slow_input() -> str:
            import time

            time.sleep(0.5)
            return "y"

        with patch.object(CLIApprover, "_read_input", side_effect=slow_input):
            with patch.object(CLIApprover, "_print_summary"):
                result = await CLIApprover(timeout=0.05).request_approval(_request())

        assert result.approved is False
        assert "timed out" in result.reason
        await asyncio.sleep(0.5)
