"""Delta report model for tracking name-set changes since a baseline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class DeltaReport:
    """Differences between a baseline snapshot and the current state of one kind.

    ``added`` drives remediation; ``removed`` is informational only and is
    never acted upon.
    """

    kind: str
    generated_at: datetime
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    baseline_count: int = 0
    current_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind,
            "generated_at": self.generated_at.isoformat(),
            "added": self.added,
            "removed": self.removed,
            "baseline_count": self.baseline_count,
            "current_count": self.current_count,
        }

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)

    @property
    def unchanged_count(self) -> int:
        return self.current_count - len(self.added)
