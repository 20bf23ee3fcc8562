"""Cluster revert module.

This module provides functionality to revert an OpenShift cluster to a baseline
snapshot: delete objects created since the baseline and restore cluster
configuration, with protection rules and a dry-run preview.

Classes:
    ResourceCleaner: Main orchestrator for snapshot and revert operations
    ClusterConfigRestorer: Role binding, OAuth and project config restoration
    ResourceDeleter: Idempotent deletion by name
    SafetyChecker: Protection rule evaluation
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

__all__ = [
    "ResourceCleaner",
    "ClusterConfigRestorer",
    "ResourceDeleter",
    "SafetyChecker",
    "AuditStorage",
]
