"""Revert operation model.

Represents a complete revert run with mode, outcome counts and step results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from src.models.remediation_record import RemediationRecord, RemediationStatus, StepResult


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Operation execution status."""

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class RevertOperation:
    """Revert operation entity.

    State transitions:
        dry-run → planned
        execute → completed (nothing failed)
        execute → partial (some items failed, some succeeded)
        execute → failed (items failed, none succeeded)

    Attributes:
        operation_id: Unique identifier for the operation
        baseline_dir: Directory of the baseline compared against
        timestamp: When operation was initiated (UTC)
        mode: dry-run or execute
        status: Final status
        steps: Step results in execution order
        user: Cluster user the revert ran as (optional)
        server: API server URL (optional)
        started_at: When execution started (optional)
        completed_at: When execution completed (optional)
        duration_seconds: Total execution duration (optional)
    """

    operation_id: str
    baseline_dir: str
    timestamp: datetime
    mode: OperationMode
    status: OperationStatus = OperationStatus.PLANNED
    steps: List[StepResult] = field(default_factory=list)
    user: Optional[str] = None
    server: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @property
    def records(self) -> List[RemediationRecord]:
        return [record for step in self.steps for record in step.records]

    @property
    def total_items(self) -> int:
        return len(self.records)

    def _count(self, status: RemediationStatus) -> int:
        return sum(step.count(status) for step in self.steps)

    @property
    def succeeded_count(self) -> int:
        return self._count(RemediationStatus.SUCCEEDED)

    @property
    def skipped_count(self) -> int:
        return self._count(RemediationStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(RemediationStatus.FAILED)

    @property
    def planned_count(self) -> int:
        return self._count(RemediationStatus.PLANNED)

    @property
    def is_dry_run(self) -> bool:
        return self.mode == OperationMode.DRY_RUN

    def resolve_status(self) -> OperationStatus:
        """Derive the final status from the recorded outcomes."""
        if self.mode == OperationMode.DRY_RUN:
            self.status = OperationStatus.PLANNED
        elif self.failed_count > 0:
            if self.succeeded_count > 0:
                self.status = OperationStatus.PARTIAL
            else:
                self.status = OperationStatus.FAILED
        else:
            self.status = OperationStatus.COMPLETED
        return self.status

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - per-status counts add up to the number of records
            - completed_at must be after started_at
            - dry-run mode must have planned status and no succeeded items

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        counted = self.succeeded_count + self.skipped_count + self.failed_count + self.planned_count
        if counted != self.total_items:
            raise ValueError("Record counts don't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN:
            if self.status != OperationStatus.PLANNED:
                raise ValueError("Dry-run mode must have planned status")
            if self.succeeded_count:
                raise ValueError("Dry-run mode cannot record succeeded items")

        return True
