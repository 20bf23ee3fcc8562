"""Resource cleaner for snapshot and revert operations.

Main orchestrator: captures baselines and reverts the cluster to them with
preview (dry-run) and execution modes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from src.cli.config import Config
from src.cluster.client import OcClient, OcCommandError
from src.delta.calculator import DeltaCalculator
from src.models.protection_rule import ProtectionRule, RuleType, default_namespace_rules
from src.models.remediation_record import (
    RemediationAction,
    RemediationRecord,
    RemediationStatus,
    StepResult,
)
from src.models.revert_operation import OperationMode, RevertOperation
from src.models.snapshot import NAMESPACES, SECRETS, TEMPLATES, Baseline, Snapshot
from src.restore.audit import AuditStorage
from src.restore.cluster_config import ClusterConfigRestorer
from src.restore.deleter import ResourceDeleter
from src.restore.safety import SafetyChecker
from src.snapshot.capturer import StateCapturer
from src.snapshot.storage import SnapshotStorage

logger = logging.getLogger(__name__)

# Tracked kind -> singular kind used in records and deletion
RECORD_KINDS = {
    NAMESPACES: "namespace",
    SECRETS: "secret",
    TEMPLATES: "template",
}

STEP_ACTIONS = {
    "role-binding": RemediationAction.ENSURE,
    "oauth": RemediationAction.RESTORE,
    "project-defaults": RemediationAction.RESET,
}


class ResourceCleaner:
    """Snapshot/revert orchestrator.

    Coordinates capture, diffing, protection checks, remediation and audit
    logging. Revert steps run in a fixed order and are isolated from each
    other: a failing step is recorded and the next one still runs.

    Attributes:
        client: Cluster collaborator
        snapshot_storage: Baseline storage
        config: Runtime configuration
        audit_storage: Audit storage for live reverts (optional)
        safety_checkers: Protection rules per tracked kind
    """

    def __init__(
        self,
        client: OcClient,
        snapshot_storage: SnapshotStorage,
        config: Config,
        audit_storage: Optional[AuditStorage] = None,
        safety_checkers: Optional[dict[str, SafetyChecker]] = None,
    ) -> None:
        """Initialize resource cleaner.

        Args:
            client: Cluster collaborator
            snapshot_storage: Baseline storage
            config: Runtime configuration
            audit_storage: Audit storage (optional, live reverts are not logged if None)
            safety_checkers: Per-kind safety checkers (default: built from config)
        """
        self.client = client
        self.snapshot_storage = snapshot_storage
        self.config = config
        self.audit_storage = audit_storage
        self.safety_checkers = safety_checkers or build_safety_checkers(config)
        self.capturer = StateCapturer(client, config)
        self.deleter = ResourceDeleter(client)
        self.config_restorer = ClusterConfigRestorer(client, config)

    def snapshot(self, identity: Optional[dict[str, str]] = None) -> Baseline:
        """Capture the current cluster state and persist it as the baseline.

        Re-running overwrites the previous baseline.

        Args:
            identity: Authenticated user and server for the metadata (optional)

        Returns:
            The saved baseline
        """
        logger.info(f"Capturing baseline -> {self.snapshot_storage.storage_dir}")
        baseline = self.capturer.create_baseline(identity)
        self.snapshot_storage.save_baseline(baseline)
        logger.info(f"Snapshot complete. Files in {self.snapshot_storage.storage_dir}")
        return baseline

    def preview(self, identity: Optional[dict[str, str]] = None) -> RevertOperation:
        """Compute and report the revert plan without mutating the cluster."""
        return self.revert(dry_run=True, identity=identity)

    def execute(self, identity: Optional[dict[str, str]] = None) -> RevertOperation:
        """Revert the cluster to the baseline."""
        return self.revert(dry_run=False, identity=identity)

    def revert(self, dry_run: bool = False, identity: Optional[dict[str, str]] = None) -> RevertOperation:
        """Revert the cluster to the stored baseline.

        Step order:
            1. ensure role binding
            2. restore OAuth
            3. reset project defaults
            4. delete new namespaces
            5. delete new secrets
            6. delete new templates

        Args:
            dry_run: Report planned actions without issuing mutating calls
            identity: Authenticated user and server (optional)

        Returns:
            RevertOperation with per-step results

        Raises:
            BaselineNotFoundError: If any baseline file is missing
        """
        # Every baseline file must exist before anything is touched
        baseline = self.snapshot_storage.load_baseline()

        identity = identity or {}
        started_at = datetime.now(timezone.utc)
        operation = RevertOperation(
            operation_id=f"op_{uuid.uuid4()}",
            baseline_dir=str(self.snapshot_storage.storage_dir),
            timestamp=started_at,
            mode=OperationMode.DRY_RUN if dry_run else OperationMode.EXECUTE,
            user=identity.get("user"),
            server=identity.get("server"),
            started_at=started_at,
        )

        steps: list[tuple[str, Callable[[], StepResult]]] = [
            ("role-binding", lambda: self.config_restorer.ensure_role_binding(dry_run=dry_run)),
            ("oauth", lambda: self.config_restorer.restore_oauth(baseline.oauth, dry_run=dry_run)),
            ("project-defaults", lambda: self.config_restorer.reset_project_defaults(dry_run=dry_run)),
            ("namespaces", lambda: self.delete_new(baseline.snapshot(NAMESPACES), dry_run=dry_run)),
            ("secrets", lambda: self.delete_new(baseline.snapshot(SECRETS), dry_run=dry_run)),
            ("templates", lambda: self.delete_new(baseline.snapshot(TEMPLATES), dry_run=dry_run)),
        ]

        for name, run_step in steps:
            operation.steps.append(self._run_step(name, run_step))

        completed_at = datetime.now(timezone.utc)
        operation.completed_at = completed_at
        operation.duration_seconds = (completed_at - started_at).total_seconds()
        operation.resolve_status()
        operation.validate()

        if not dry_run and self.audit_storage is not None:
            self.audit_storage.log_operation(operation)

        logger.info("Dry run complete; no changes made." if dry_run else "Revert complete.")
        return operation

    def delete_new(self, baseline: Snapshot, dry_run: bool = False) -> StepResult:
        """Delete objects of one kind created since the baseline.

        Args:
            baseline: Baseline snapshot of the kind
            dry_run: Report planned deletions only

        Returns:
            StepResult with a record per new object
        """
        kind = baseline.kind
        record_kind = RECORD_KINDS[kind]
        step = StepResult(name=kind)

        if kind != NAMESPACES and not self.client.exists("namespace", self.config.config_namespace):
            message = f"No {self.config.config_namespace}; skipping {kind}."
            logger.warning(message)
            step.warnings.append(message)
            return step

        scope = "" if kind == NAMESPACES else f" in {self.config.config_namespace}"
        logger.info(f"Finding {kind} created after snapshot{scope}…")

        current = self.capturer.capture(kind)
        delta = DeltaCalculator(baseline, current).calculate()

        if not delta.added:
            logger.info(f"No new {kind}.")
            return step

        logger.info(f"New {kind}{scope}: {', '.join(delta.added)}")

        partition = self.safety_checkers[kind].partition(delta.added)
        for name, reason in partition.skipped.items():
            logger.warning(f"Skipping protected {record_kind}: {name} ({reason})")
            step.add(
                RemediationRecord(
                    step=kind,
                    kind=record_kind,
                    identifier=name,
                    namespace=current.namespace,
                    action=RemediationAction.DELETE,
                    status=RemediationStatus.SKIPPED,
                    skip_reason=reason,
                )
            )

        if not partition.eligible:
            logger.info("Nothing eligible for deletion.")
            return step

        if dry_run:
            for name in partition.eligible:
                logger.info(f"[DRY-RUN] Would delete {record_kind}: {name}")
                step.add(
                    RemediationRecord(
                        step=kind,
                        kind=record_kind,
                        identifier=name,
                        namespace=current.namespace,
                        action=RemediationAction.DELETE,
                        status=RemediationStatus.PLANNED,
                    )
                )
            return step

        deleted: dict[str, RemediationRecord] = {}
        for name in partition.eligible:
            logger.info(f"Deleting {record_kind}: {name}")
            success, error = self.deleter.delete_resource(record_kind, name, namespace=current.namespace)
            record = RemediationRecord(
                step=kind,
                kind=record_kind,
                identifier=name,
                namespace=current.namespace,
                action=RemediationAction.DELETE,
                status=RemediationStatus.SUCCEEDED if success else RemediationStatus.FAILED,
                error_message=None if success else (error or "Deletion failed"),
            )
            if success:
                deleted[name] = record
            else:
                logger.warning(f"Failed to delete {record_kind} {name}: {record.error_message}")
            step.add(record)

        if kind == NAMESPACES and deleted:
            pending = self.deleter.wait_for_deletion(record_kind, list(deleted), self.config.wait_timeout)
            for name in pending:
                message = f"{name} not fully deleted yet."
                logger.warning(message)
                deleted[name].warning = message
                step.warnings.append(message)

        return step

    def _run_step(self, name: str, run_step: Callable[[], StepResult]) -> StepResult:
        """Run one step, turning any error it raises into a failed record."""
        try:
            return run_step()
        except Exception as e:
            if isinstance(e, OcCommandError):
                logger.error(f"Step '{name}' failed: {e}")
                message = e.stderr or str(e)
            else:
                logger.exception(f"Step '{name}' failed unexpectedly")
                message = str(e) or type(e).__name__
            step = StepResult(name=name)
            step.add(
                RemediationRecord(
                    step=name,
                    kind=name,
                    identifier=name,
                    action=STEP_ACTIONS.get(name, RemediationAction.DELETE),
                    status=RemediationStatus.FAILED,
                    error_message=message,
                )
            )
            return step


def build_safety_checkers(config: Config) -> dict[str, SafetyChecker]:
    """Build per-kind safety checkers from configuration."""
    namespace_rules = default_namespace_rules(
        prefixes=config.protected_namespace_prefixes,
        names=config.protected_namespace_names,
    )

    def configured_rules(kind: str, names: list[str], patterns: list[str]) -> list[ProtectionRule]:
        rules = []
        if names:
            rules.append(
                ProtectionRule(
                    rule_id=f"protected-{kind}-name",
                    rule_type=RuleType.LITERAL,
                    patterns=list(names),
                    priority=1,
                )
            )
        if patterns:
            rules.append(
                ProtectionRule(
                    rule_id=f"protected-{kind}-pattern",
                    rule_type=RuleType.REGEX,
                    patterns=list(patterns),
                    priority=3,
                )
            )
        return rules

    return {
        NAMESPACES: SafetyChecker(
            rules=namespace_rules + configured_rules("namespace", [], config.protected_namespace_patterns)
        ),
        SECRETS: SafetyChecker(
            rules=configured_rules("secret", config.protected_secret_names, config.protected_secret_patterns)
        ),
        TEMPLATES: SafetyChecker(
            rules=configured_rules("template", config.protected_template_names, config.protected_template_patterns)
        ),
    }
