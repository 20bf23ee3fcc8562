"""Cluster object deletion.

Maps tracked kinds to oc resources and deletes by name with retry on
transient API failures. Deleting an object that is already gone counts as
success.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from src.cluster.client import OcClient, OcCommandError, OcNotFoundError

logger = logging.getLogger(__name__)

# stderr fragments that indicate a transient API server problem
TRANSIENT_ERRORS = (
    "connection refused",
    "i/o timeout",
    "TLS handshake timeout",
    "etcdserver: request timed out",
    "the server is currently unable to handle the request",
    "Too many requests",
    "timed out after",
)


class ResourceDeleter:
    """Cluster object deletion orchestrator.

    Attributes:
        client: Cluster collaborator
        max_retries: Attempts per object for transient failures
    """

    # Deletion mapping: kind -> oc resource
    DELETION_METHODS = {
        "namespace": "namespace",
        "secret": "secret",
        "template": "templates.template.openshift.io",
    }

    def __init__(self, client: OcClient, max_retries: int = 3):
        """Initialize resource deleter.

        Args:
            client: Cluster collaborator
            max_retries: Maximum number of attempts (default: 3)
        """
        self.client = client
        self.max_retries = max_retries

    def delete_resource(self, kind: str, name: str, namespace: Optional[str] = None) -> tuple[bool, Optional[str]]:
        """Delete a cluster object by name.

        Args:
            kind: Tracked kind ("namespace", "secret", "template")
            name: Object name
            namespace: Namespace scope for namespaced kinds (optional)

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        if kind not in self.DELETION_METHODS:
            error_msg = f"Unsupported resource kind: {kind}"
            logger.warning(error_msg)
            return (False, error_msg)

        resource = self.DELETION_METHODS[kind]

        for attempt in range(self.max_retries):
            try:
                self.client.delete(resource, name, namespace=namespace)
                logger.debug(f"Deleted {kind}: {name}")
                return (True, None)

            except OcNotFoundError:
                logger.info(f"{kind} {name} already deleted")
                return (True, None)

            except OcCommandError as e:
                if self._is_transient(e.stderr) and attempt < self.max_retries - 1:
                    wait_time = 2**attempt
                    logger.debug(
                        f"Transient error deleting {kind} {name}, "
                        f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                    continue
                return (False, e.stderr or str(e))

        error_msg = f"Failed to delete {kind} {name} after {self.max_retries} attempts"
        logger.error(error_msg)
        return (False, error_msg)

    def wait_for_deletion(self, kind: str, names: list[str], timeout_seconds: int) -> list[str]:
        """Wait for each object to disappear.

        Args:
            kind: Tracked kind
            names: Objects whose deletion was requested
            timeout_seconds: Per-object wait bound

        Returns:
            Names still present when their wait timed out
        """
        resource = self.DELETION_METHODS.get(kind, kind)
        pending = []

        for name in names:
            if not self.client.wait_for_deletion(resource, name, timeout_seconds):
                pending.append(name)

        return pending

    def _is_transient(self, stderr: str) -> bool:
        lowered = stderr.lower()
        return any(marker.lower() in lowered for marker in TRANSIENT_ERRORS)
