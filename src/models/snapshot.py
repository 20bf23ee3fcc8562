"""Snapshot data models representing point-in-time captures of cluster state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import yaml

# Resource kinds tracked as name sets
NAMESPACES = "namespaces"
SECRETS = "secrets"
TEMPLATES = "templates"
TRACKED_KINDS = (NAMESPACES, SECRETS, TEMPLATES)

OAUTH_PLACEHOLDER = "# No oauth/cluster at snapshot time\n"


@dataclass
class Snapshot:
    """Set of object names of one resource kind captured at a point in time.

    Names are deduplicated and sorted on construction so two snapshots of the
    same cluster state always compare and serialize identically.
    """

    kind: str
    names: List[str] = field(default_factory=list)
    namespace: Optional[str] = None
    captured_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Normalize names into their unique sorted form."""
        self.names = sorted({name.strip() for name in self.names if name and name.strip()})

    @classmethod
    def from_names(cls, kind: str, names: Iterable[str], namespace: Optional[str] = None) -> "Snapshot":
        """Create a snapshot stamped with the current UTC time."""
        return cls(kind=kind, names=list(names), namespace=namespace, captured_at=datetime.now(timezone.utc))

    @property
    def name_set(self) -> frozenset:
        return frozenset(self.names)

    @property
    def count(self) -> int:
        return len(self.names)

    @property
    def is_empty(self) -> bool:
        return not self.names

    def to_text(self) -> str:
        """Serialize as newline-separated names (trailing newline when non-empty)."""
        return "".join(f"{name}\n" for name in self.names)

    @classmethod
    def from_text(cls, kind: str, text: str, namespace: Optional[str] = None) -> "Snapshot":
        """Parse newline-separated names, ignoring blank lines."""
        return cls(kind=kind, names=text.splitlines(), namespace=namespace)


@dataclass
class OAuthSnapshot:
    """Verbatim capture of the cluster OAuth configuration object.

    When no OAuth object existed at capture time the text is a placeholder
    comment, which restore treats as "nothing to restore".
    """

    text: str = OAUTH_PLACEHOLDER

    @classmethod
    def placeholder(cls) -> "OAuthSnapshot":
        return cls(text=OAUTH_PLACEHOLDER)

    @property
    def is_placeholder(self) -> bool:
        return self.document is None

    @property
    def document(self) -> Optional[Dict[str, Any]]:
        """Parsed OAuth object, or None when the capture holds no OAuth resource."""
        try:
            data = yaml.safe_load(self.text)
        except yaml.YAMLError:
            return None

        if not isinstance(data, dict) or data.get("kind") != "OAuth":
            return None
        return data


@dataclass
class BaselineMetadata:
    """Descriptive information written alongside a baseline."""

    captured_at: datetime
    user: str = "unknown"
    server: str = "unknown"
    counts: Dict[str, int] = field(default_factory=dict)
    oauth_captured: bool = False
    schema_version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary for serialization."""
        return {
            "schema_version": self.schema_version,
            "captured_at": self.captured_at.isoformat(),
            "user": self.user,
            "server": self.server,
            "oauth_captured": self.oauth_captured,
            "counts": self.counts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaselineMetadata":
        """Create metadata from dictionary."""
        return cls(
            captured_at=datetime.fromisoformat(data["captured_at"]),
            user=data.get("user", "unknown"),
            server=data.get("server", "unknown"),
            counts=data.get("counts", {}),
            oauth_captured=data.get("oauth_captured", False),
            schema_version=data.get("schema_version", "1.0"),
        )


@dataclass
class Baseline:
    """Complete baseline: one snapshot per tracked kind plus the OAuth capture."""

    snapshots: Dict[str, Snapshot]
    oauth: OAuthSnapshot
    metadata: Optional[BaselineMetadata] = None

    def snapshot(self, kind: str) -> Snapshot:
        """Return the snapshot of a kind, empty if the kind was not captured."""
        return self.snapshots.get(kind, Snapshot(kind=kind))
