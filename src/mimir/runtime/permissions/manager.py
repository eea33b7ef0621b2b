"""PermissionManager — allow/deny decisions for requested operations.

Resolution order:

1. assess the risk of the operation,
2. ``blocklist`` — first match denies,
3. ``allowlist`` — first match allows,
4. auto-accept when the risk is at or below ``accept_risk_level``,
5. the optional :class:`Approver`,
6. otherwise deny with "requires approval".

The manager knows nothing about which executor is asking.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from typing import TYPE_CHECKING

from mimir.runtime.permissions.models import (
    ApprovalRequest,
    PermissionConfig,
    PermissionRequest,
    PermissionResult,
)
from mimir.runtime.permissions.risk import RiskAssessor

if TYPE_CHECKING:
    from mimir.runtime.permissions.approval import Approver

logger = logging.getLogger(__name__)


class PermissionManager:
    """Evaluate a :class:`PermissionRequest` against a :class:`PermissionConfig`."""

    def __init__(
        self,
        config: PermissionConfig | None = None,
        *,
        assessor: RiskAssessor | None = None,
        approver: Approver | None = None,
    ) -> None:
        self._config = config or PermissionConfig()
        self._assessor = assessor or RiskAssessor()
        self._approver = approver

    @property
    def config(self) -> PermissionConfig:
        return self._config

    async def check_permission(self, request: PermissionRequest) -> PermissionResult:
        operation = request.operation
        assessment = self._assessor.assess(request)

        def verdict(allowed: bool, reason: str) -> PermissionResult:
            logger.debug(
                "Permission %s for %s %r: %s",
                "granted" if allowed else "denied",
                request.type.value,
                operation,
                reason,
            )
            return PermissionResult(
                allowed=allowed,
                reason=reason,
                risk_level=assessment.level,
                assessment=assessment,
            )

        for pattern in self._config.blocklist:
            if matches_pattern(operation, pattern):
                return verdict(False, f"Operation matches blocklist pattern: {pattern}")

        for pattern in self._config.allowlist:
            if matches_pattern(operation, pattern):
                return verdict(True, f"Operation matches allowlist pattern: {pattern}")

        if self._config.auto_accept and assessment.level.rank <= self._config.accept_risk_level.rank:
            return verdict(True, f"Risk level {assessment.level.value} is within accepted threshold")

        if self._approver is not None:
            approval = await self._approver.request_approval(
                ApprovalRequest(request=request, assessment=assessment)
            )
            return verdict(approval.approved, approval.reason or ("approved" if approval.approved else "denied"))

        logger.warning(
            "Operation requires approval (risk %s): %s", assessment.level.value, operation
        )
        return verdict(False, f"Operation requires approval (risk level: {assessment.level.value})")


def matches_pattern(operation: str, pattern: str) -> bool:
    """Match *operation* against an exact string, ``fnmatch`` glob, or ``/regex/``."""
    if len(pattern) > 1 and pattern.startswith("/") and pattern.endswith("/"):
        try:
            return re.search(pattern[1:-1], operation) is not None
        except re.error:
            logger.warning("Invalid regex pattern in permission list: %s", pattern)
            return False
    if operation == pattern:
        return True
    return fnmatch.fnmatchcase(operation, pattern)
