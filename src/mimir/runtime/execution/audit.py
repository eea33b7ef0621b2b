"""Per-executor audit log of attempted operations."""

from __future__ import annotations

import logging
from typing import Any

from mimir.runtime.execution.models import AuditEntry

logger = logging.getLogger(__name__)


class AuditLog:
    """Ordered, unbounded record of operations.  Cleared explicitly."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    def record(self, type: str, operation: str, result: str, **fields: Any) -> AuditEntry:
        entry = AuditEntry(type=type, operation=operation, result=result, **fields)
        self._entries.append(entry)
        logger.debug("audit %s %s %r", result, type, operation)
        return entry

    @property
    def entries(self) -> list[AuditEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
