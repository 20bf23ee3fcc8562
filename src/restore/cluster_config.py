"""Restoration of cluster-scoped configuration objects.

Covers the self-provisioner role binding, the OAuth configuration and the
project request template. Each operation reads first and only mutates when the
live object differs from the wanted state, so repeated runs are no-ops.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from src.cli.config import Config
from src.cluster.client import OcClient, OcCommandError
from src.models.remediation_record import (
    RemediationAction,
    RemediationRecord,
    RemediationStatus,
    StepResult,
)
from src.models.snapshot import OAuthSnapshot

logger = logging.getLogger(__name__)

CLUSTER_ROLE_BINDING = "clusterrolebinding"
OAUTH_RESOURCE = "oauth.config.openshift.io"
PROJECT_CONFIG_RESOURCE = "project.config.openshift.io"
CLUSTER = "cluster"

# Metadata the API server owns; applying stale values causes conflicts
SERVER_MANAGED_METADATA = (
    "resourceVersion",
    "uid",
    "creationTimestamp",
    "generation",
    "managedFields",
    "selfLink",
)

DEFAULT_TEMPLATE_PATCH = {"spec": {"projectRequestTemplate": {"name": ""}}}

DEFAULT_PROJECT_MANIFEST = {
    "apiVersion": "config.openshift.io/v1",
    "kind": "Project",
    "metadata": {"name": CLUSTER},
    "spec": {"projectRequestTemplate": {"name": ""}},
}


class ClusterConfigRestorer:
    """Bring cluster configuration objects back to their expected state.

    Attributes:
        client: Cluster collaborator
        config: Runtime configuration (binding, role and group names)
    """

    def __init__(self, client: OcClient, config: Config) -> None:
        self.client = client
        self.config = config

    def ensure_role_binding(self, dry_run: bool = False) -> StepResult:
        """Make sure the self-provisioner binding grants the role to the group.

        Creates the binding when it is missing and adds the group subject when
        it lacks one. A binding whose roleRef names another role is deleted and
        recreated, since roleRef cannot be changed in place.
        """
        step = StepResult(name="role-binding")
        binding = self.config.role_binding_name
        role = self.config.role_name
        group = self.config.role_group

        current = self.client.get_object(CLUSTER_ROLE_BINDING, binding)

        if current is not None and self._binding_grants(current, role, group):
            logger.info(f"CRB '{binding}' already grants {role} to {group}.")
            step.add(
                self._record(
                    step.name,
                    "clusterrolebinding",
                    binding,
                    RemediationAction.ENSURE,
                    RemediationStatus.SKIPPED,
                    skip_reason=f"Already grants {role} to {group}",
                )
            )
            return step

        wrong_role = current is not None and self._role_ref(current) != role

        if current is None:
            plan = f"create CRB '{binding}' ({role} -> {group})"
        elif wrong_role:
            plan = f"recreate CRB '{binding}' (roleRef {self._role_ref(current)} -> {role}, group {group})"
        else:
            plan = f"(re)bind {role} to group {group} on CRB '{binding}'"

        if dry_run:
            logger.info(f"[DRY-RUN] Would {plan}")
            step.add(
                self._record(
                    step.name,
                    "clusterrolebinding",
                    binding,
                    RemediationAction.ENSURE,
                    RemediationStatus.PLANNED,
                )
            )
            return step

        logger.info(f"Restoring: {plan}")
        try:
            if wrong_role:
                self.client.delete(CLUSTER_ROLE_BINDING, binding)
            self.client.add_cluster_role_to_group(role, group, binding_name=binding)
        except OcCommandError as e:
            logger.warning(f"Failed to ensure CRB '{binding}': {e.stderr}")
            step.add(
                self._record(
                    step.name,
                    "clusterrolebinding",
                    binding,
                    RemediationAction.ENSURE,
                    RemediationStatus.FAILED,
                    error_message=e.stderr or str(e),
                )
            )
            return step

        step.add(
            self._record(
                step.name,
                "clusterrolebinding",
                binding,
                RemediationAction.ENSURE,
                RemediationStatus.SUCCEEDED,
            )
        )
        return step

    def restore_oauth(self, baseline: OAuthSnapshot, dry_run: bool = False) -> StepResult:
        """Restore the OAuth object from its baseline capture.

        A placeholder baseline means no OAuth object existed at snapshot time,
        so there is nothing to restore. A live object whose spec already
        matches the baseline is left alone.
        """
        step = StepResult(name="oauth")
        document = baseline.document

        if document is None:
            message = "Baseline OAuth file holds no OAuth resource; skipping."
            logger.warning(message)
            step.warnings.append(message)
            step.add(
                self._record(
                    step.name,
                    "oauth",
                    CLUSTER,
                    RemediationAction.RESTORE,
                    RemediationStatus.SKIPPED,
                    skip_reason="No OAuth object at snapshot time",
                )
            )
            return step

        live = self.client.get_object(OAUTH_RESOURCE, CLUSTER)
        if live is not None and live.get("spec") == document.get("spec"):
            logger.info("OAuth configuration already matches baseline.")
            step.add(
                self._record(
                    step.name,
                    "oauth",
                    CLUSTER,
                    RemediationAction.RESTORE,
                    RemediationStatus.SKIPPED,
                    skip_reason="Already matches baseline",
                )
            )
            return step

        if dry_run:
            logger.info("[DRY-RUN] Would restore OAuth configuration from baseline")
            step.add(
                self._record(
                    step.name,
                    "oauth",
                    CLUSTER,
                    RemediationAction.RESTORE,
                    RemediationStatus.PLANNED,
                )
            )
            return step

        logger.info("Restoring OAuth configuration from baseline…")
        try:
            self.client.apply(strip_server_metadata(document))
        except OcCommandError as e:
            logger.warning(f"Failed to restore OAuth configuration: {e.stderr}")
            step.add(
                self._record(
                    step.name,
                    "oauth",
                    CLUSTER,
                    RemediationAction.RESTORE,
                    RemediationStatus.FAILED,
                    error_message=e.stderr or str(e),
                )
            )
            return step

        step.add(
            self._record(
                step.name,
                "oauth",
                CLUSTER,
                RemediationAction.RESTORE,
                RemediationStatus.SUCCEEDED,
            )
        )
        return step

    def reset_project_defaults(self, dry_run: bool = False) -> StepResult:
        """Clear the project request template so the built-in bootstrap is used.

        Patches the project config first; only if the patch fails is a minimal
        default manifest applied. Failure of both is recorded, not raised.
        """
        step = StepResult(name="project-defaults")
        current = self.client.get_object(PROJECT_CONFIG_RESOURCE, CLUSTER)

        if current is None:
            message = f"{PROJECT_CONFIG_RESOURCE}/{CLUSTER} not found; skipping project defaults."
            logger.warning(message)
            step.warnings.append(message)
            step.add(
                self._record(
                    step.name,
                    "project.config",
                    CLUSTER,
                    RemediationAction.RESET,
                    RemediationStatus.SKIPPED,
                    skip_reason="Project config not found",
                )
            )
            return step

        template = (current.get("spec") or {}).get("projectRequestTemplate") or {}
        if not template.get("name"):
            logger.info("Project config already uses the default project request template.")
            step.add(
                self._record(
                    step.name,
                    "project.config",
                    CLUSTER,
                    RemediationAction.RESET,
                    RemediationStatus.SKIPPED,
                    skip_reason="Already default",
                )
            )
            return step

        if dry_run:
            logger.info(
                f"[DRY-RUN] Would reset {PROJECT_CONFIG_RESOURCE}/{CLUSTER} projectRequestTemplate "
                f"'{template['name']}' to default (empty)."
            )
            step.add(
                self._record(
                    step.name,
                    "project.config",
                    CLUSTER,
                    RemediationAction.RESET,
                    RemediationStatus.PLANNED,
                )
            )
            return step

        logger.info(f"Resetting {PROJECT_CONFIG_RESOURCE}/{CLUSTER} to defaults (clear projectRequestTemplate)…")
        error = self._patch_or_apply_default()
        if error:
            step.add(
                self._record(
                    step.name,
                    "project.config",
                    CLUSTER,
                    RemediationAction.RESET,
                    RemediationStatus.FAILED,
                    error_message=error,
                )
            )
        else:
            step.add(
                self._record(
                    step.name,
                    "project.config",
                    CLUSTER,
                    RemediationAction.RESET,
                    RemediationStatus.SUCCEEDED,
                )
            )
        return step

    def _patch_or_apply_default(self) -> Optional[str]:
        """Patch the project config, falling back to applying a default manifest.

        Returns:
            None on success, otherwise an error message covering both attempts
        """
        try:
            self.client.patch_merge(PROJECT_CONFIG_RESOURCE, CLUSTER, DEFAULT_TEMPLATE_PATCH)
            return None
        except OcCommandError as patch_error:
            logger.warning("Patch failed; attempting apply of minimal default manifest…")
            try:
                self.client.apply(copy.deepcopy(DEFAULT_PROJECT_MANIFEST))
                return None
            except OcCommandError as apply_error:
                message = f"patch: {patch_error.stderr}; apply: {apply_error.stderr}"
                logger.error(f"Project config reset failed ({message})")
                return message

    def _role_ref(self, binding: dict[str, Any]) -> Optional[str]:
        return (binding.get("roleRef") or {}).get("name")

    def _binding_grants(self, binding: dict[str, Any], role: str, group: str) -> bool:
        role_ref = self._role_ref(binding)
        subjects = binding.get("subjects") or []
        has_group = any(s.get("kind") == "Group" and s.get("name") == group for s in subjects)
        return role_ref == role and has_group

    def _record(
        self,
        step: str,
        kind: str,
        identifier: str,
        action: RemediationAction,
        status: RemediationStatus,
        skip_reason: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> RemediationRecord:
        return RemediationRecord(
            step=step,
            kind=kind,
            identifier=identifier,
            action=action,
            status=status,
            skip_reason=skip_reason,
            error_message=error_message,
        )


def strip_server_metadata(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a manifest without server-managed metadata or status."""
    manifest = copy.deepcopy(document)
    manifest.pop("status", None)

    metadata = manifest.get("metadata") or {}
    for key in SERVER_MANAGED_METADATA:
        metadata.pop(key, None)

    annotations = metadata.get("annotations") or {}
    annotations.pop("kubectl.kubernetes.io/last-applied-configuration", None)
    if "annotations" in metadata and not annotations:
        metadata.pop("annotations")

    return manifest
