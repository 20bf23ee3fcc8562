"""Tests for snapshot models."""

from __future__ import annotations

from datetime import datetime, timezone

import yaml

from src.models.snapshot import (
    NAMESPACES,
    OAUTH_PLACEHOLDER,
    SECRETS,
    Baseline,
    BaselineMetadata,
    OAuthSnapshot,
    Snapshot,
)
from tests.fixtures.cluster import create_oauth


class TestSnapshot:
    """Test suite for Snapshot model."""

    def test_names_are_sorted_and_deduplicated(self) -> None:
        """Test names are normalized on construction."""
        snapshot = Snapshot(kind=NAMESPACES, names=["ns-b", "default", "ns-a", "ns-b"])

        assert snapshot.names == ["default", "ns-a", "ns-b"]
        assert snapshot.count == 3

    def test_blank_and_padded_names_are_dropped_or_trimmed(self) -> None:
        """Test blank lines never become identifiers."""
        snapshot = Snapshot(kind=NAMESPACES, names=["", "  ", " ns-a ", "ns-a"])

        assert snapshot.names == ["ns-a"]

    def test_empty_snapshot(self) -> None:
        """Test empty snapshot properties."""
        snapshot = Snapshot(kind=SECRETS)

        assert snapshot.is_empty is True
        assert snapshot.name_set == frozenset()
        assert snapshot.to_text() == ""

    def test_to_text_one_name_per_line(self) -> None:
        """Test text serialization."""
        snapshot = Snapshot(kind=NAMESPACES, names=["ns2", "ns1"])

        assert snapshot.to_text() == "ns1\nns2\n"

    def test_from_text_ignores_blank_lines(self) -> None:
        """Test parsing tolerates hand-edited files."""
        snapshot = Snapshot.from_text(NAMESPACES, "ns2\n\nns1\nns2\n")

        assert snapshot.names == ["ns1", "ns2"]

    def test_from_names_stamps_capture_time(self) -> None:
        """Test from_names records a UTC capture time."""
        snapshot = Snapshot.from_names(SECRETS, ["b", "a"], namespace="openshift-config")

        assert snapshot.captured_at is not None
        assert snapshot.captured_at.tzinfo is not None
        assert snapshot.namespace == "openshift-config"
        assert snapshot.names == ["a", "b"]


class TestOAuthSnapshot:
    """Test suite for OAuthSnapshot model."""

    def test_placeholder_is_detected(self) -> None:
        """Test the placeholder marker means nothing to restore."""
        oauth = OAuthSnapshot.placeholder()

        assert oauth.text == OAUTH_PLACEHOLDER
        assert oauth.is_placeholder is True
        assert oauth.document is None

    def test_real_capture_parses(self) -> None:
        """Test a captured OAuth object is recognized."""
        oauth = OAuthSnapshot(text=yaml.safe_dump(create_oauth()))

        assert oauth.is_placeholder is False
        assert oauth.document["kind"] == "OAuth"
        assert oauth.document["spec"]["identityProviders"][0]["name"] == "htpasswd"

    def test_other_kind_is_treated_as_placeholder(self) -> None:
        """Test a file holding some other object is not restorable."""
        oauth = OAuthSnapshot(text="kind: ConfigMap\nmetadata:\n  name: cluster\n")

        assert oauth.is_placeholder is True

    def test_invalid_yaml_is_treated_as_placeholder(self) -> None:
        """Test unparseable text is not restorable."""
        oauth = OAuthSnapshot(text="kind: [OAuth\n")

        assert oauth.is_placeholder is True


class TestBaseline:
    """Test suite for Baseline and BaselineMetadata."""

    def test_snapshot_returns_empty_for_missing_kind(self) -> None:
        """Test missing kinds behave like empty snapshots."""
        baseline = Baseline(snapshots={}, oauth=OAuthSnapshot.placeholder())

        assert baseline.snapshot(NAMESPACES).is_empty

    def test_metadata_roundtrip(self) -> None:
        """Test metadata serializes and parses."""
        metadata = BaselineMetadata(
            captured_at=datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc),
            user="kube:admin",
            server="https://api.test.example.com:6443",
            counts={"namespaces": 3},
            oauth_captured=True,
        )

        restored = BaselineMetadata.from_dict(metadata.to_dict())

        assert restored == metadata

    def test_metadata_defaults_for_sparse_dict(self) -> None:
        """Test optional metadata fields default."""
        restored = BaselineMetadata.from_dict({"captured_at": "2026-10-01T12:00:00+00:00"})

        assert restored.user == "unknown"
        assert restored.counts == {}
        assert restored.schema_version == "1.0"
