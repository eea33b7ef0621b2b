"""Data models for the permission subsystem."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Ordered risk classification of an operation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2, RiskLevel.CRITICAL: 3}


class OperationType(str, Enum):
    """Kinds of operation an executor asks permission for."""

    BASH = "bash"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    FILE_DELETE = "file_delete"


class RiskAssessment(BaseModel):
    """Risk level with the reasons that produced it."""

    level: RiskLevel = RiskLevel.LOW
    reasons: list[str] = Field(default_factory=list)
    score: int = Field(default=0, ge=0, le=100, description="0-100, higher is riskier.")


class PermissionRequest(BaseModel):
    """A typed request to perform an operation."""

    type: OperationType
    command: str | None = None
    path: str | None = None
    working_dir: str | None = None

    @property
    def operation(self) -> str:
        """The string the policy is matched against."""
        return self.command or self.path or ""


class PermissionResult(BaseModel):
    """The allow/deny verdict for a :class:`PermissionRequest`."""

    allowed: bool
    reason: str = ""
    risk_level: RiskLevel = RiskLevel.LOW
    assessment: RiskAssessment = Field(default_factory=RiskAssessment)


class PermissionConfig(BaseModel):
    """Policy consulted by the :class:`PermissionManager`."""

    allowlist: list[str] = Field(
        default_factory=list,
        description="Operations always allowed (exact, glob, or /regex/).",
    )
    blocklist: list[str] = Field(
        default_factory=list,
        description="Operations always denied; checked before the allowlist.",
    )
    accept_risk_level: RiskLevel = Field(
        default=RiskLevel.MEDIUM,
        description="Auto-accept operations up to and including this level.",
    )
    auto_accept: bool = Field(default=True, description="Enable risk-based auto-accept.")


class ApprovalRequest(BaseModel):
    """A request for an approver to allow an operation the policy did not."""

    request: PermissionRequest
    assessment: RiskAssessment
    metadata: dict[str, Any] = Field(default_factory=dict)


class ApprovalResult(BaseModel):
    """The approver's decision."""

    approved: bool
    reason: str = ""
