"""OpenShift CLI client wrapper.

Thin collaborator around the ``oc`` binary. Every cluster read or write made by
the tool goes through :class:`OcClient`, so tests can swap it for a fake.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Markers oc prints on stderr when the requested object does not exist
NOT_FOUND_MARKERS = ("NotFound", "not found")


class OcCommandError(Exception):
    """Raised when an oc invocation exits non-zero."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(f"oc {' '.join(args)} failed (exit {returncode}): {self.stderr}")


class OcNotFoundError(OcCommandError):
    """Raised when the requested object does not exist."""


class ToolNotFoundError(Exception):
    """Raised when the oc binary cannot be executed."""


class OcClient:
    """Command-line collaborator for the cluster API.

    Attributes:
        binary: Name or path of the oc executable
        kubeconfig: Path exported as KUBECONFIG for every call (optional)
        request_timeout: Seconds before a single oc call is abandoned
    """

    def __init__(
        self,
        binary: str = "oc",
        kubeconfig: Optional[str] = None,
        request_timeout: int = 60,
    ) -> None:
        """Initialize oc client.

        Args:
            binary: oc executable name or path (default: oc)
            kubeconfig: Kubeconfig path (optional, inherits environment if None)
            request_timeout: Timeout in seconds for each call (default: 60)
        """
        self.binary = binary
        self.kubeconfig = kubeconfig
        self.request_timeout = request_timeout

    def run(
        self,
        args: list[str],
        input_text: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> str:
        """Run oc with the given arguments and return stdout.

        Args:
            args: Arguments passed after the binary name
            input_text: Text fed to stdin (optional)
            timeout: Override for request_timeout (optional)

        Returns:
            Captured standard output

        Raises:
            ToolNotFoundError: If the binary cannot be executed
            OcNotFoundError: If oc reports the object does not exist
            OcCommandError: For any other non-zero exit
        """
        command = [self.binary, *args]
        logger.debug(f"Running: {' '.join(command)}")

        env = os.environ.copy()
        if self.kubeconfig:
            env["KUBECONFIG"] = self.kubeconfig

        try:
            result = subprocess.run(
                command,
                input=input_text,
                capture_output=True,
                text=True,
                env=env,
                timeout=timeout or self.request_timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"{self.binary} not found in PATH") from e
        except subprocess.TimeoutExpired as e:
            raise OcCommandError(args, -1, f"timed out after {e.timeout}s") from e

        if result.returncode != 0:
            if any(marker in result.stderr for marker in NOT_FOUND_MARKERS):
                raise OcNotFoundError(args, result.returncode, result.stderr)
            raise OcCommandError(args, result.returncode, result.stderr)

        return result.stdout

    def _scope(self, namespace: Optional[str]) -> list[str]:
        return ["-n", namespace] if namespace else []

    # Read primitives

    def list_names(self, kind: str, namespace: Optional[str] = None) -> list[str]:
        """List the metadata.name of every object of a kind.

        Args:
            kind: Resource kind (e.g., "namespaces", "secret")
            namespace: Namespace scope (optional, cluster scope if None)

        Returns:
            Object names in the order oc returned them
        """
        output = self.run([*self._scope(namespace), "get", kind, "-o", "name"])
        # Each line reads "<resource>/<name>"
        return [line.split("/", 1)[-1] for line in output.splitlines() if line.strip()]

    def get_object(self, kind: str, name: str, namespace: Optional[str] = None) -> Optional[dict[str, Any]]:
        """Fetch a single object as a dict, or None if it does not exist."""
        try:
            output = self.run([*self._scope(namespace), "get", kind, name, "-o", "json"])
        except OcNotFoundError:
            return None
        return json.loads(output)

    def get_yaml(self, kind: str, name: str, namespace: Optional[str] = None) -> Optional[str]:
        """Fetch a single object serialized as YAML, or None if it does not exist."""
        try:
            return self.run([*self._scope(namespace), "get", kind, name, "-o", "yaml"])
        except OcNotFoundError:
            return None

    def exists(self, kind: str, name: str, namespace: Optional[str] = None) -> bool:
        """Check whether an object exists."""
        return self.get_object(kind, name, namespace) is not None

    def whoami(self) -> str:
        """Return the authenticated user name."""
        return self.run(["whoami"]).strip()

    def server_url(self) -> Optional[str]:
        """Return the API server URL, or None if oc cannot report it."""
        try:
            return self.run(["whoami", "--show-server"]).strip() or None
        except OcCommandError:
            return None

    # Mutating primitives

    def delete(self, kind: str, name: str, namespace: Optional[str] = None) -> None:
        """Delete an object by name. Deleting an absent object is a no-op."""
        self.run([*self._scope(namespace), "delete", kind, name, "--ignore-not-found=true"])

    def apply(self, manifest: dict[str, Any]) -> None:
        """Apply a manifest fed through stdin."""
        self.run(["apply", "-f", "-"], input_text=yaml.safe_dump(manifest, default_flow_style=False))

    def patch_merge(self, kind: str, name: str, patch: dict[str, Any], namespace: Optional[str] = None) -> None:
        """Apply a JSON merge patch to an object."""
        self.run([*self._scope(namespace), "patch", f"{kind}/{name}", "--type=merge", "-p", json.dumps(patch)])

    def add_cluster_role_to_group(self, role: str, group: str, binding_name: Optional[str] = None) -> None:
        """Grant a cluster role to a group through oc adm policy."""
        args = ["adm", "policy", "add-cluster-role-to-group", role, group]
        if binding_name:
            args.append(f"--rolebinding-name={binding_name}")
        self.run(args)

    def wait_for_deletion(self, kind: str, name: str, timeout_seconds: int) -> bool:
        """Block until an object is gone.

        Returns:
            True if the object disappeared (or was already gone), False on timeout
        """
        try:
            self.run(
                ["wait", f"{kind}/{name}", "--for=delete", f"--timeout={timeout_seconds}s"],
                timeout=timeout_seconds + 30,
            )
        except OcNotFoundError:
            return True
        except OcCommandError as e:
            logger.debug(f"Wait for {kind}/{name} deletion ended without confirmation: {e.stderr}")
            return False
        return True
