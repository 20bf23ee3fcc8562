"""Capture of cluster state into snapshots."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from ..cli.config import Config
from ..cluster.client import OcClient, OcCommandError
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

# Tracked kind -> (oc resource, namespaced)
KIND_RESOURCES = {
    NAMESPACES: ("namespaces", False),
    SECRETS: ("secrets", True),
    TEMPLATES: ("templates.template.openshift.io", True),
}

OAUTH_RESOURCE = "oauth.config.openshift.io"
OAUTH_NAME = "cluster"


class StateCapturer:
    """Reads tracked resource collections from the cluster.

    Attributes:
        client: Cluster collaborator
        config: Runtime configuration
    """

    def __init__(self, client: OcClient, config: Config) -> None:
        self.client = client
        self.config = config

    def capture(self, kind: str) -> Snapshot:
        """Capture the current names of one tracked kind.

        Namespaced kinds are read from the config namespace. When that
        namespace is absent, or templates are not served by the cluster, the
        snapshot is empty.

        Args:
            kind: One of namespaces, secrets, templates

        Returns:
            Sorted, deduplicated snapshot

        Raises:
            ValueError: If the kind is not tracked
            OcCommandError: If listing a cluster-scoped kind fails
        """
        if kind not in KIND_RESOURCES:
            raise ValueError(f"Unknown resource kind: {kind}")

        resource, namespaced = KIND_RESOURCES[kind]
        namespace: Optional[str] = None

        if namespaced:
            namespace = self.config.config_namespace
            if not self.client.exists("namespace", namespace):
                logger.debug(f"Namespace {namespace} not found; {kind} snapshot is empty")
                return Snapshot.from_names(kind, [], namespace=namespace)

        try:
            names = self.client.list_names(resource, namespace=namespace)
        except OcCommandError as e:
            if kind != TEMPLATES:
                raise
            logger.debug(f"Templates not available in {namespace}: {e.stderr}")
            names = []

        return Snapshot.from_names(kind, names, namespace=namespace)

    def capture_oauth(self) -> OAuthSnapshot:
        """Capture the cluster OAuth object verbatim, or a placeholder if absent."""
        text = self.client.get_yaml(OAUTH_RESOURCE, OAUTH_NAME)
        if text is None:
            logger.warning(f"No {OAUTH_RESOURCE}/{OAUTH_NAME} found; writing placeholder.")
            return OAuthSnapshot.placeholder()
        return OAuthSnapshot(text=text)

    def create_baseline(self, identity: Optional[Dict[str, str]] = None) -> Baseline:
        """Capture every tracked kind plus the OAuth object.

        Args:
            identity: Authenticated user and server, recorded in metadata (optional)

        Returns:
            Baseline ready to be saved
        """
        snapshots: Dict[str, Snapshot] = {}
        for kind in (NAMESPACES, SECRETS, TEMPLATES):
            snapshot = self.capture(kind)
            scope = f" in {snapshot.namespace}" if snapshot.namespace else ""
            logger.info(f"Captured {snapshot.count} {kind}{scope}")
            snapshots[kind] = snapshot

        oauth = self.capture_oauth()
        if not oauth.is_placeholder:
            logger.info(f"Captured {OAUTH_RESOURCE}/{OAUTH_NAME}")

        identity = identity or {}
        metadata = BaselineMetadata(
            captured_at=datetime.now(timezone.utc),
            user=identity.get("user", "unknown"),
            server=identity.get("server", "unknown"),
            counts={kind: snapshot.count for kind, snapshot in snapshots.items()},
            oauth_captured=not oauth.is_placeholder,
        )

        return Baseline(snapshots=snapshots, oauth=oauth, metadata=metadata)
