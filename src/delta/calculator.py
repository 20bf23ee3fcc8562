"""Delta calculator for comparing snapshots."""

import logging
from datetime import datetime, timezone
from typing import List

from ..models.delta_report import DeltaReport
from ..models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class DeltaCalculator:
    """Calculate differences between a baseline and a current snapshot."""

    def __init__(self, reference_snapshot: Snapshot, current_snapshot: Snapshot):
        """Initialize delta calculator.

        Args:
            reference_snapshot: The baseline snapshot to compare against
            current_snapshot: The current snapshot of the same kind

        Raises:
            ValueError: If the snapshots are of different kinds
        """
        if reference_snapshot.kind != current_snapshot.kind:
            raise ValueError(
                f"Cannot compare {reference_snapshot.kind} baseline to {current_snapshot.kind} snapshot"
            )

        self.reference = reference_snapshot
        self.current = current_snapshot

    def calculate(self) -> DeltaReport:
        """Calculate delta between reference and current snapshots.

        Returns:
            DeltaReport whose ``added`` is exactly current minus reference, sorted
        """
        reference_names = self.reference.name_set
        current_names = self.current.name_set

        added = sorted(current_names - reference_names)
        removed = sorted(reference_names - current_names)

        report = DeltaReport(
            kind=self.current.kind,
            generated_at=datetime.now(timezone.utc),
            added=added,
            removed=removed,
            baseline_count=self.reference.count,
            current_count=self.current.count,
        )

        logger.debug(f"Delta for {report.kind}: {len(added)} added, {len(removed)} removed")

        return report


def new_since_baseline(baseline: Snapshot, current: Snapshot) -> List[str]:
    """Return the names present in current but absent from baseline, sorted."""
    return DeltaCalculator(baseline, current).calculate().added
