"""Audit storage for revert operations.

Stores and retrieves audit logs in YAML format for troubleshooting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import yaml

from src.models.revert_operation import RevertOperation


class AuditStorage:
    """Audit log storage and retrieval.

    Stores revert operation audit logs as YAML files organized by year/month.

    Storage structure:
        .oc-baseline/audit-logs/
            2026/
                10/
                    operation-op_123.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Union[str, Path]) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (created lazily)
        """
        self.storage_dir = Path(storage_dir)

    def log_operation(self, operation: RevertOperation) -> Path:
        """Log revert operation to audit storage.

        Creates a YAML file with operation metadata and every remediation
        record. Overwrites an existing log with the same operation ID.

        Args:
            operation: Revert operation to log

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(operation.timestamp.year) / f"{operation.timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "cluster_revert",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "operation": {
                "operation_id": operation.operation_id,
                "baseline_dir": operation.baseline_dir,
                "timestamp": operation.timestamp.isoformat(),
                "user": operation.user,
                "server": operation.server,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "total_items": operation.total_items,
                "succeeded_count": operation.succeeded_count,
                "skipped_count": operation.skipped_count,
                "failed_count": operation.failed_count,
                "started_at": operation.started_at.isoformat() if operation.started_at else None,
                "completed_at": operation.completed_at.isoformat() if operation.completed_at else None,
                "duration_seconds": operation.duration_seconds,
            },
            "steps": [
                {"name": step.name, "warnings": step.warnings} for step in operation.steps
            ],
            "records": [record.to_dict() for record in operation.records],
        }

        audit_file = year_month_dir / f"operation-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)

        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/operation-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query operations within date range.

        Args:
            since: Start time (inclusive, timezone-aware), None for all
            until: End time (inclusive, timezone-aware), None for all

        Returns:
            List of operation audit logs matching criteria, oldest first
        """
        results = []

        for audit_file in sorted(self.storage_dir.glob("*/*/operation-*.yaml")):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            timestamp = datetime.fromisoformat(audit_data["operation"]["timestamp"])

            if since and timestamp < since:
                continue
            if until and timestamp > until:
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["operation"]["timestamp"])
        return results
