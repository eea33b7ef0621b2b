"""Approver protocol and implementations.

- ``Approver`` — runtime-checkable protocol for interactive approval gates.
- ``CLIApprover`` — prompts the user via stdin/stdout.
- ``AutoApprover`` — always approves (for testing/CI).
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Protocol, runtime_checkable

from mimir.runtime.permissions.models import ApprovalRequest, ApprovalResult

logger = logging.getLogger(__name__)


@runtime_checkable
class Approver(Protocol):
    """Decides whether an operation the policy did not allow may proceed."""

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResult:
        """Ask for approval and return the decision."""
        ...


class AutoApprover:
    """Always approves.

    Satisfies the :class:`Approver` protocol.
    """

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResult:
        logger.debug("AutoApprover: auto-approving %s", request.request.operation)
        return ApprovalResult(approved=True, reason="auto-approved")


class CLIApprover:
    """Prompts the user at the terminal for approval.

    Satisfies the :class:`Approver` protocol.

    Uses ``loop.run_in_executor(None, input)`` to read from stdin without
    blocking the event loop.  Denies if no response within *timeout*.
    """

    def __init__(self, *, timeout: float = 300.0) -> None:
        self._timeout = timeout

    async def request_approval(self, request: ApprovalRequest) -> ApprovalResult:
        self._print_summary(request)

        loop = asyncio.get_running_loop()
        try:
            answer: str = await asyncio.wait_for(
                loop.run_in_executor(None, self._read_input),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.warning("Approval timed out after %ss, denying", self._timeout)
            return ApprovalResult(approved=False, reason=f"approval timed out after {self._timeout}s")

        approved = answer.strip().lower() in ("y", "yes")
        reason = "approved by user" if approved else "denied by user"
        return ApprovalResult(approved=approved, reason=reason)

    @staticmethod
    def _print_summary(request: ApprovalRequest) -> None:
        """Print a human-readable operation summary to stdout."""
        sep = "-" * 60
        req = request.request
        sys.stdout.write(f"\n{sep}\n")
        sys.stdout.write(f"  Operation: {req.type.value}\n")
        sys.stdout.write(f"  Target:    {req.operation}\n")
        if req.working_dir:
            sys.stdout.write(f"  Cwd:       {req.working_dir}\n")
        sys.stdout.write(
            f"  Risk:      {request.assessment.level.value} ({request.assessment.score}/100)\n"
        )
        for reason in request.assessment.reasons:
            sys.stdout.write(f"             - {reason}\n")
        sys.stdout.write(f"{sep}\n")
        sys.stdout.write("  Approve? [y/N]: ")
        sys.stdout.flush()

    @staticmethod
    def _read_input() -> str:
        """Blocking read from stdin (run in executor)."""
        return input()
