"""Baseline storage on the local filesystem.

One directory holds one baseline. Name sets are plain newline-separated text
files so they stay readable and diffable by hand; the OAuth object is stored
verbatim as YAML.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from ..models.snapshot import (
    NAMESPACES,
    SECRETS,
    TEMPLATES,
    Baseline,
    BaselineMetadata,
    OAuthSnapshot,
    Snapshot,
)

logger = logging.getLogger(__name__)

OAUTH_FILE = "oauth.yaml"
METADATA_FILE = "metadata.yaml"


class BaselineNotFoundError(Exception):
    """Raised when a required baseline file is missing."""


class SnapshotStorage:
    """Read and write baseline files.

    Storage structure:
        .oc-baseline/
            namespaces.txt
            oauth.yaml
            openshift-config.secrets.txt
            openshift-config.templates.txt
            metadata.yaml

    Attributes:
        storage_dir: Baseline directory
        config_namespace: Namespace whose secrets and templates are tracked
    """

    def __init__(self, storage_dir: Union[str, Path] = ".oc-baseline", config_namespace: str = "openshift-config"):
        """Initialize snapshot storage.

        Args:
            storage_dir: Baseline directory (created on first save)
            config_namespace: Namespace used in secret and template file names
        """
        self.storage_dir = Path(storage_dir)
        self.config_namespace = config_namespace

    @property
    def files(self) -> Dict[str, Path]:
        """Required baseline files keyed by kind."""
        return {
            NAMESPACES: self.storage_dir / "namespaces.txt",
            "oauth": self.storage_dir / OAUTH_FILE,
            SECRETS: self.storage_dir / f"{self.config_namespace}.secrets.txt",
            TEMPLATES: self.storage_dir / f"{self.config_namespace}.templates.txt",
        }

    def path_for(self, kind: str) -> Path:
        try:
            return self.files[kind]
        except KeyError:
            raise ValueError(f"Unknown resource kind: {kind}")

    def missing_files(self) -> List[Path]:
        """List required baseline files that do not exist."""
        return [path for path in self.files.values() if not path.is_file()]

    def exists(self) -> bool:
        return not self.missing_files()

    def save_baseline(self, baseline: Baseline) -> Path:
        """Write every file of a baseline, replacing any previous capture.

        Args:
            baseline: Baseline to persist

        Returns:
            Baseline directory
        """
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        for kind in (NAMESPACES, SECRETS, TEMPLATES):
            self.save_snapshot(baseline.snapshot(kind))
        self.save_oauth(baseline.oauth)

        if baseline.metadata is not None:
            self._write_atomic(
                self.storage_dir / METADATA_FILE,
                yaml.safe_dump(baseline.metadata.to_dict(), default_flow_style=False, sort_keys=False),
            )

        logger.debug(f"Baseline saved to {self.storage_dir}")
        return self.storage_dir

    def save_snapshot(self, snapshot: Snapshot) -> Path:
        """Write one name-set snapshot, overwriting the previous file."""
        path = self.path_for(snapshot.kind)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_atomic(path, snapshot.to_text())
        return path

    def save_oauth(self, oauth: OAuthSnapshot) -> Path:
        path = self.files["oauth"]
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_atomic(path, oauth.text)
        return path

    def load_snapshot(self, kind: str) -> Snapshot:
        """Load a name-set snapshot.

        Raises:
            BaselineNotFoundError: If the file does not exist
        """
        path = self.path_for(kind)
        if not path.is_file():
            raise BaselineNotFoundError(f"Missing {path}. Run snapshot first.")

        with open(path, "r") as f:
            text = f.read()

        namespace = None if kind == NAMESPACES else self.config_namespace
        return Snapshot.from_text(kind, text, namespace=namespace)

    def load_oauth(self) -> OAuthSnapshot:
        """Load the OAuth capture.

        Raises:
            BaselineNotFoundError: If the file does not exist
        """
        path = self.files["oauth"]
        if not path.is_file():
            raise BaselineNotFoundError(f"Missing {path}. Run snapshot first.")

        with open(path, "r") as f:
            return OAuthSnapshot(text=f.read())

    def load_metadata(self) -> Optional[BaselineMetadata]:
        """Load capture metadata, or None for baselines written without it."""
        path = self.storage_dir / METADATA_FILE
        if not path.is_file():
            return None

        try:
            with open(path, "r") as f:
                return BaselineMetadata.from_dict(yaml.safe_load(f))
        except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable baseline metadata {path}: {e}")
            return None

    def load_baseline(self) -> Baseline:
        """Load every baseline file.

        Raises:
            BaselineNotFoundError: If any required file is missing
        """
        missing = self.missing_files()
        if missing:
            names = ", ".join(str(path) for path in missing)
            raise BaselineNotFoundError(f"Missing {names}. Run snapshot first.")

        return Baseline(
            snapshots={kind: self.load_snapshot(kind) for kind in (NAMESPACES, SECRETS, TEMPLATES)},
            oauth=self.load_oauth(),
            metadata=self.load_metadata(),
        )

    def _write_atomic(self, path: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
