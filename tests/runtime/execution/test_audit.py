"""Tests for AuditLog."""

from mimir.runtime.execution.audit import AuditLog


class TestAuditLog:
    def test_record_and_entries(self) -> None:
        log = AuditLog()
        entry = log.record("bash", "ls", "success", exit_code=0, duration_ms=1.5)

        assert entry.type == "bash"
        assert entry.exit_code == 0
        assert log.entries == [entry]
        assert len(log) == 1

    def test_entries_is_a_copy(self) -> None:
        log = AuditLog()
        log.record("bash", "ls", "success")
        log.entries.clear()
        assert len(log) == 1

    def test_preserves_order(self) -> None:
        log = AuditLog()
        for i in range(3):
            log.record("bash", f"cmd{i}", "success")
        assert [e.operation for e in log.entries] == ["cmd0", "cmd1", "cmd2"]

    def test_clear(self) -> None:
        log = AuditLog()
        log.record("file_write", "/p/a.txt", "denied", reason="nope")
        log.clear()
        assert log.entries == []
