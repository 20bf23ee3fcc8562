"""Tests for ResourceDeleter."""

from __future__ import annotations

from unittest.mock import Mock, patch

from src.cluster.client import OcCommandError, OcNotFoundError
from src.restore.deleter import ResourceDeleter


class TestResourceDeleter:
    """Test suite for ResourceDeleter."""

    def test_delete_namespace_success(self) -> None:
        """Test successful namespace deletion."""
        client = Mock()
        deleter = ResourceDeleter(client)

        success, error = deleter.delete_resource("namespace", "ns2")

        assert success is True
        assert error is None
        client.delete.assert_called_once_with("namespace", "ns2", namespace=None)

    def test_delete_template_uses_qualified_resource(self) -> None:
        """Test templates are deleted through their API group."""
        client = Mock()
        deleter = ResourceDeleter(client)

        deleter.delete_resource("template", "t1", namespace="openshift-config")

        client.delete.assert_called_once_with("templates.template.openshift.io", "t1", namespace="openshift-config")

    def test_already_deleted_counts_as_success(self) -> None:
        """Test a NotFound error means the goal is already met."""
        client = Mock()
        client.delete.side_effect = OcNotFoundError(["delete"], 1, 'Error from server (NotFound): "ns2" not found')
        deleter = ResourceDeleter(client)

        assert deleter.delete_resource("namespace", "ns2") == (True, None)

    def test_unsupported_kind(self) -> None:
        """Test unknown kinds are refused without calling oc."""
        client = Mock()
        deleter = ResourceDeleter(client)

        success, error = deleter.delete_resource("configmap", "cm")

        assert success is False
        assert "Unsupported resource kind" in error
        client.delete.assert_not_called()

    def test_permanent_error_is_returned(self) -> None:
        """Test non-transient failures are not retried."""
        client = Mock()
        client.delete.side_effect = OcCommandError(["delete"], 1, "Error from server (Forbidden): denied")
        deleter = ResourceDeleter(client)

        success, error = deleter.delete_resource("secret", "s1", namespace="openshift-config")

        assert success is False
        assert "Forbidden" in error
        assert client.delete.call_count == 1

    @patch("src.restore.deleter.time.sleep")
    def test_transient_error_is_retried(self, mock_sleep: Mock) -> None:
        """Test transient failures back off and retry."""
        client = Mock()
        client.delete.side_effect = [
            OcCommandError(["delete"], 1, "dial tcp: connection refused"),
            None,
        ]
        deleter = ResourceDeleter(client)

        success, error = deleter.delete_resource("namespace", "ns2")

        assert success is True
        assert error is None
        assert client.delete.call_count == 2
        mock_sleep.assert_called_once_with(1)

    @patch("src.restore.deleter.time.sleep")
    def test_transient_error_exhausts_retries(self, mock_sleep: Mock) -> None:
        """Test retries stop after max_retries attempts."""
        client = Mock()
        client.delete.side_effect = OcCommandError(["delete"], 1, "TLS handshake timeout")
        deleter = ResourceDeleter(client, max_retries=3)

        success, error = deleter.delete_resource("namespace", "ns2")

        assert success is False
        assert "TLS handshake timeout" in error
        assert client.delete.call_count == 3
        assert mock_sleep.call_count == 2

    def test_wait_for_deletion_reports_pending(self) -> None:
        """Test names still present after the wait are returned."""
        client = Mock()
        client.wait_for_deletion.side_effect = lambda kind, name, timeout: name != "ns-stuck"
        deleter = ResourceDeleter(client)

        pending = deleter.wait_for_deletion("namespace", ["ns2", "ns-stuck"], 180)

        assert pending == ["ns-stuck"]
        client.wait_for_deletion.assert_any_call("namespace", "ns2", 180)
