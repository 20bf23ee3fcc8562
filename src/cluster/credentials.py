"""Preflight checks for the oc binary and cluster login."""

from __future__ import annotations

import logging
import shutil

from .client import OcClient, OcCommandError, ToolNotFoundError

logger = logging.getLogger(__name__)


class CredentialValidationError(Exception):
    """Raised when the current kubeconfig is not logged in to a cluster."""


def require_oc(binary: str = "oc") -> str:
    """Ensure the oc binary is on PATH.

    Args:
        binary: Executable name or path

    Returns:
        Resolved path of the executable

    Raises:
        ToolNotFoundError: If the binary cannot be found
    """
    path = shutil.which(binary)
    if path is None:
        raise ToolNotFoundError(f"{binary} not found in PATH")
    return path


def validate_credentials(client: OcClient) -> dict[str, str]:
    """Validate that the client is authenticated against a cluster.

    Args:
        client: oc client configured with the kubeconfig to check

    Returns:
        Identity dictionary with "user" and "server" keys

    Raises:
        CredentialValidationError: If oc whoami fails
    """
    try:
        user = client.whoami()
    except OcCommandError as e:
        raise CredentialValidationError(
            f"Not logged in or invalid KUBECONFIG: {client.kubeconfig or '$KUBECONFIG'}"
        ) from e

    server = client.server_url() or "unknown"
    logger.debug(f"Authenticated as {user} against {server}")
    return {"user": user, "server": server}
