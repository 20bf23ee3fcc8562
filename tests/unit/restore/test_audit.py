"""Tests for AuditStorage."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from src.models.remediation_record import (
    RemediationAction,
    RemediationRecord,
    RemediationStatus,
    StepResult,
)
from src.models.revert_operation import OperationMode, OperationStatus, RevertOperation
from src.restore.audit import AuditStorage


def _operation(operation_id: str, timestamp: datetime) -> RevertOperation:
    step = StepResult(name="namespaces", warnings=["ns2 not fully deleted yet."])
    step.add(
        RemediationRecord(
            step="namespaces",
            kind="namespace",
            identifier="ns2",
            action=RemediationAction.DELETE,
            status=RemediationStatus.SUCCEEDED,
            warning="ns2 not fully deleted yet.",
        )
    )
    operation = RevertOperation(
        operation_id=operation_id,
        baseline_dir=".oc-baseline",
        timestamp=timestamp,
        mode=OperationMode.EXECUTE,
        steps=[step],
        user="kube:admin",
        server="https://api.test.example.com:6443",
        started_at=timestamp,
        completed_at=timestamp,
        duration_seconds=0.0,
    )
    operation.resolve_status()
    return operation


class TestAuditStorage:
    """Test suite for AuditStorage."""

    def test_log_operation_layout(self, tmp_path: Path) -> None:
        """Test audit files are grouped by year and month."""
        storage = AuditStorage(tmp_path / "audit-logs")

        path = storage.log_operation(_operation("op_1", datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)))

        assert path == tmp_path / "audit-logs" / "2026" / "10" / "operation-op_1.yaml"
        assert path.is_file()

    def test_get_operation(self, tmp_path: Path) -> None:
        """Test a logged operation can be read back."""
        storage = AuditStorage(tmp_path)
        storage.log_operation(_operation("op_1", datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)))

        data = storage.get_operation("op_1")

        assert data["operation"]["status"] == OperationStatus.COMPLETED.value
        assert data["operation"]["succeeded_count"] == 1
        assert data["steps"] == [{"name": "namespaces", "warnings": ["ns2 not fully deleted yet."]}]
        assert data["records"][0]["identifier"] == "ns2"
        assert data["records"][0]["warning"] == "ns2 not fully deleted yet."

    def test_get_missing_operation(self, tmp_path: Path) -> None:
        """Test unknown IDs return None."""
        assert AuditStorage(tmp_path).get_operation("op_missing") is None

    def test_query_operations_by_range(self, tmp_path: Path) -> None:
        """Test date range filtering."""
        storage = AuditStorage(tmp_path)
        storage.log_operation(_operation("op_old", datetime(2026, 9, 1, tzinfo=timezone.utc)))
        storage.log_operation(_operation("op_new", datetime(2026, 10, 15, tzinfo=timezone.utc)))

        everything = storage.query_operations()
        recent = storage.query_operations(since=datetime(2026, 10, 1, tzinfo=timezone.utc))

        assert [d["operation"]["operation_id"] for d in everything] == ["op_old", "op_new"]
        assert [d["operation"]["operation_id"] for d in recent] == ["op_new"]
