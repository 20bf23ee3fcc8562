"""Remediation record model.

Individual plan item of a revert with its outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class RemediationAction(Enum):
    """What a plan item does to the cluster."""

    DELETE = "delete"
    RESTORE = "restore"
    ENSURE = "ensure"
    RESET = "reset"


class RemediationStatus(Enum):
    """Outcome of a plan item."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    PLANNED = "planned"


@dataclass
class RemediationRecord:
    """Remediation record entity.

    Represents one (kind, identifier, action) item of a remediation plan and
    what happened to it.

    Validation rules:
        - status=failed: requires error_message
        - status=skipped: requires skip_reason
        - status=succeeded/planned: no error_message

    Attributes:
        step: Revert step that produced the item
        kind: Resource kind (e.g., "namespace", "secret", "oauth")
        identifier: Object name
        action: delete, restore, ensure or reset
        status: succeeded, skipped, failed or planned (dry-run)
        namespace: Namespace scope of the object (optional)
        skip_reason: Why the item was not acted upon (optional)
        error_message: Failure detail (optional)
        warning: Non-fatal caveat, e.g. a deletion wait timeout (optional)
        timestamp: When the item was processed (UTC)
    """

    step: str
    kind: str
    identifier: str
    action: RemediationAction
    status: RemediationStatus
    namespace: Optional[str] = None
    skip_reason: Optional[str] = None
    error_message: Optional[str] = None
    warning: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == RemediationStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.status == RemediationStatus.SKIPPED:
            if not self.skip_reason:
                raise ValueError("Skipped status requires skip_reason")
        elif self.error_message:
            raise ValueError(f"{self.status.value} status cannot have an error message")

        if not self.identifier:
            raise ValueError("Record requires an identifier")

        return True

    def to_dict(self) -> dict:
        """Convert record to dictionary for serialization."""
        return {
            "step": self.step,
            "kind": self.kind,
            "identifier": self.identifier,
            "namespace": self.namespace,
            "action": self.action.value,
            "status": self.status.value,
            "skip_reason": self.skip_reason,
            "error_message": self.error_message,
            "warning": self.warning,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class StepResult:
    """Records and warnings produced by one revert step."""

    name: str
    records: List[RemediationRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add(self, record: RemediationRecord) -> RemediationRecord:
        record.validate()
        self.records.append(record)
        return record

    def count(self, status: RemediationStatus) -> int:
        return sum(1 for record in self.records if record.status == status)

    @property
    def has_failures(self) -> bool:
        return self.count(RemediationStatus.FAILED) > 0
