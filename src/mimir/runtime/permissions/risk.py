"""RiskAssessor — pattern-based risk classification of operations.

Pure logic, no I/O.  Commands are scored against ordered regex tables
(critical, high, medium) plus a handful of heuristics; paths are scored by
operation type and sensitivity of the location.
"""

from __future__ import annotations

import re

from mimir.runtime.permissions.models import (
    OperationType,
    PermissionRequest,
    RiskAssessment,
    RiskLevel,
)

_Rule = tuple[re.Pattern[str], str]


def _rules(*pairs: tuple[str, str]) -> list[_Rule]:
    return [(re.compile(pattern, re.IGNORECASE), reason) for pattern, reason in pairs]


_CRITICAL = _rules(
    (r"rm\s+-rf\s+/(?!tmp|var/tmp)", "Deletes root filesystem"),
    (r"format\s+[a-z]:", "Formats entire drive"),
    (r"del\s+/[sf]", "Deletes system files (Windows)"),
    (r"\b(shutdown|reboot|poweroff)\b", "System shutdown/reboot"),
    (r"dd\s+.*of=/dev/(sda|hda|nvme)", "Direct disk write"),
    (r"\bmkfs", "Formats filesystem"),
    (r"(>|vim|vi|nano|emacs|edit).*/etc/(passwd|shadow|sudoers)", "Modifies critical system files"),
    (r"(curl|wget).*\|\s*(bash|sh|python)", "Executes remote script without inspection"),
)

_HIGH = _rules(
    (r"rm\s+-rf\s+(?!/($|\s))", "Recursive force delete"),
    (r"sudo\s+rm", "Elevated permissions file deletion"),
    (r"git\s+push\s+(-f|--force)", "Force push can overwrite history"),
    (r"npm\s+publish", "Publishes package to registry"),
    (r"docker\s+rmi.*-f", "Force removes Docker images"),
    (r"docker\s+system\s+prune\s+-a", "Removes all unused Docker data"),
    (r"git\s+reset\s+--hard", "Discards commits or working changes"),
    (r"git\s+clean\s+-[a-z]*f", "Deletes untracked files"),
    (r"chmod\s+777", "Makes files world-writable"),
    (r"chown\s+-R", "Recursive ownership change"),
)

_MEDIUM = _rules(
    (r"npm\s+install", "Installs dependencies"),
    (r"yarn\s+add", "Installs dependencies"),
    (r"pip\s+install", "Installs Python packages"),
    (r"git\s+push", "Pushes changes to remote"),
    (r"docker\s+run", "Runs Docker container"),
    (r"docker\s+exec", "Executes command in container"),
    (r"\bssh\s+", "Remote connection"),
    (r"\bscp\s+", "Remote file transfer"),
    (r"\brsync\s+", "File synchronization"),
    (r"npm\s+run\s+build", "Runs build scripts"),
)

_SENSITIVE_PATHS = _rules(
    (r"(^|/)etc/(passwd|shadow|sudoers|hosts)$", "System account or network file"),
    (r"(^|/)\.ssh(/|$)", "SSH keys and configuration"),
    (r"(^|/)\.aws/credentials$", "Cloud credentials"),
    (r"(^|/)\.env(\.[\w-]+)?$", "Environment secrets file"),
    (r"(^|/)\.git/", "Git internals"),
)

_LONG_COMMAND = 500
_MAX_CHAINS = 3


class RiskAssessor:
    """Classify a :class:`PermissionRequest` into a :class:`RiskAssessment`."""

    def assess(self, request: PermissionRequest) -> RiskAssessment:
        if request.type == OperationType.BASH:
            return self.assess_command(request.command or "")
        return self.assess_path(request.type, request.path or "")

    def assess_command(self, command: str) -> RiskAssessment:
        reasons: list[str] = []
        score = 0

        for rules, label, value in (
            (_CRITICAL, "CRITICAL", 100),
            (_HIGH, "HIGH", 75),
            (_MEDIUM, "MEDIUM", 50),
        ):
            for pattern, reason in rules:
                if pattern.search(command):
                    reasons.append(f"{label}: {reason}")
                    score = max(score, value)

        extra_reasons, extra_score = self._heuristics(command)
        reasons.extend(extra_reasons)
        score = max(score, extra_score)

        if not reasons:
            reasons.append("No specific risks detected")
        return RiskAssessment(level=score_to_level(score), reasons=reasons, score=score)

    def assess_path(self, op: OperationType, path: str) -> RiskAssessment:
        reasons: list[str] = []
        score = {
            OperationType.FILE_READ: 0,
            OperationType.FILE_WRITE: 10,
            OperationType.FILE_DELETE: 35,
        }.get(op, 0)
        if op == OperationType.FILE_DELETE:
            reasons.append("MEDIUM: Deletes a file")

        normalized = path.replace("\\", "/")
        for pattern, reason in _SENSITIVE_PATHS:
            if pattern.search(normalized):
                # Reading a sensitive file is less severe than changing it.
                bump = 60 if op == OperationType.FILE_READ else 80
                reasons.append(f"HIGH: {reason}")
                score = max(score, bump)

        if not reasons:
            reasons.append("No specific risks detected")
        return RiskAssessment(level=score_to_level(score), reasons=reasons, score=score)

    @staticmethod
    def _heuristics(command: str) -> tuple[list[str], int]:
        reasons: list[str] = []
        score = 0

        if len(command) > _LONG_COMMAND:
            reasons.append("Command is unusually long (possible obfuscation)")
            score = max(score, 30)

        chains = len(re.findall(r"[;&|]+", command))
        if chains > _MAX_CHAINS:
            reasons.append(f"Multiple chained commands ({chains} chains)")
            score = max(score, 40)

        if re.search(r">\s*/dev/null|2>&1", command):
            reasons.append("Output redirected (hiding results)")
            score = max(score, 20)

        if re.search(r"sudo\s*$", command):
            reasons.append("Elevated permissions without specific command")
            score = max(score, 60)

        if re.search(r"export\s+|setenv\s+", command) and "PATH" in command:
            reasons.append("Modifies PATH environment variable")
            score = max(score, 45)

        if re.search(r"base64\s+(-d|--decode)|echo\s+.*\|\s*base64", command):
            reasons.append("Uses Base64 encoding (possible obfuscation)")
            score = max(score, 35)

        if re.search(r"\beval\s+", command):
            reasons.append("Uses eval (dynamic code execution)")
            score = max(score, 65)

        return reasons, score


def score_to_level(score: int) -> RiskLevel:
    """Map a 0-100 score onto a :class:`RiskLevel`."""
    if score >= 80:
        return RiskLevel.CRITICAL
    if score >= 60:
        return RiskLevel.HIGH
    if score >= 30:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def summarize(assessment: RiskAssessment) -> str:
    """Human-readable multi-line summary of an assessment."""
    lines = [
        f"Risk level: {assessment.level.value.upper()} (score: {assessment.score}/100)",
        "",
        "Reasons:",
        *(f"  - {reason}" for reason in assessment.reasons),
    ]
    return "\n".join(lines)
