"""Permission subsystem — risk assessment and allow/deny decisions."""

from mimir.runtime.permissions.approval import Approver, AutoApprover, CLIApprover
from mimir.runtime.permissions.manager import PermissionManager, matches_pattern
from mimir.runtime.permissions.models import (
    ApprovalRequest,
    ApprovalResult,
    OperationType,
    PermissionConfig,
    PermissionRequest,
    PermissionResult,
    RiskAssessment,
    RiskLevel,
)
from mimir.runtime.permissions.risk import RiskAssessor

__all__ = [
    "ApprovalRequest",
    "ApprovalResult",
    "Approver",
    "AutoApprover",
    "CLIApprover",
    "OperationType",
    "PermissionConfig",
    "PermissionManager",
    "PermissionRequest",
    "PermissionResult",
    "RiskAssessment",
    "RiskAssessor",
    "RiskLevel",
    "matches_pattern",
]
