"""Tests for the oc client wrapper."""

from __future__ import annotations

import json
import subprocess
from unittest.mock import Mock, patch

import pytest
import yaml

from src.cluster.client import OcClient, OcCommandError, OcNotFoundError, ToolNotFoundError


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> Mock:
    result = Mock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestOcClientRun:
    """Test suite for OcClient.run."""

    @patch("src.cluster.client.subprocess.run")
    def test_returns_stdout(self, mock_run: Mock) -> None:
        """Test successful calls return stdout."""
        mock_run.return_value = _completed(stdout="kube:admin\n")
        client = OcClient()

        assert client.run(["whoami"]) == "kube:admin\n"
        assert mock_run.call_args.args[0] == ["oc", "whoami"]

    @patch("src.cluster.client.subprocess.run")
    def test_exports_kubeconfig(self, mock_run: Mock) -> None:
        """Test the kubeconfig is passed through the environment."""
        mock_run.return_value = _completed()
        client = OcClient(kubeconfig="/tmp/kubeconfig")

        client.run(["whoami"])

        assert mock_run.call_args.kwargs["env"]["KUBECONFIG"] == "/tmp/kubeconfig"
        assert mock_run.call_args.kwargs["timeout"] == 60

    @patch("src.cluster.client.subprocess.run")
    def test_missing_binary(self, mock_run: Mock) -> None:
        """Test a missing executable raises ToolNotFoundError."""
        mock_run.side_effect = FileNotFoundError("oc")

        with pytest.raises(ToolNotFoundError):
            OcClient().run(["whoami"])

    @patch("src.cluster.client.subprocess.run")
    def test_not_found_stderr(self, mock_run: Mock) -> None:
        """Test NotFound output maps to OcNotFoundError."""
        mock_run.return_value = _completed(
            stderr='Error from server (NotFound): namespaces "x" not found\n', returncode=1
        )

        with pytest.raises(OcNotFoundError) as exc_info:
            OcClient().run(["get", "namespace", "x"])

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr.endswith("not found")

    @patch("src.cluster.client.subprocess.run")
    def test_other_failure(self, mock_run: Mock) -> None:
        """Test other non-zero exits raise OcCommandError."""
        mock_run.return_value = _completed(stderr="error: Forbidden", returncode=1)

        with pytest.raises(OcCommandError) as exc_info:
            OcClient().run(["delete", "namespace", "x"])

        assert not isinstance(exc_info.value, OcNotFoundError)
        assert "Forbidden" in str(exc_info.value)

    @patch("src.cluster.client.subprocess.run")
    def test_timeout(self, mock_run: Mock) -> None:
        """Test timeouts surface as OcCommandError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["oc"], timeout=60)

        with pytest.raises(OcCommandError, match="timed out"):
            OcClient().run(["get", "namespaces"])


class TestOcClientPrimitives:
    """Test suite for the read and write helpers."""

    @patch.object(OcClient, "run")
    def test_list_names(self, mock_run: Mock) -> None:
        """Test names are read from oc name output without full objects."""
        mock_run.return_value = "secret/pull-secret\nsecret/htpass-secret\n"

        names = OcClient().list_names("secrets", namespace="openshift-config")

        assert names == ["pull-secret", "htpass-secret"]
        mock_run.assert_called_once_with(["-n", "openshift-config", "get", "secrets", "-o", "name"])

    @patch.object(OcClient, "run")
    def test_list_names_empty(self, mock_run: Mock) -> None:
        """Test an empty listing yields no names."""
        mock_run.return_value = ""

        assert OcClient().list_names("namespaces") == []
        mock_run.assert_called_once_with(["get", "namespaces", "-o", "name"])

    @patch.object(OcClient, "run")
    def test_get_object_missing(self, mock_run: Mock) -> None:
        """Test absent objects return None."""
        mock_run.side_effect = OcNotFoundError(["get"], 1, "not found")

        assert OcClient().get_object("oauth.config.openshift.io", "cluster") is None
        assert OcClient().exists("oauth.config.openshift.io", "cluster") is False

    @patch.object(OcClient, "run")
    def test_server_url_tolerates_failure(self, mock_run: Mock) -> None:
        """Test server lookup failures are not fatal."""
        mock_run.side_effect = OcCommandError(["whoami"], 1, "boom")

        assert OcClient().server_url() is None

    @patch.object(OcClient, "run")
    def test_delete_ignores_not_found(self, mock_run: Mock) -> None:
        """Test delete passes --ignore-not-found."""
        OcClient().delete("namespace", "ns2")

        mock_run.assert_called_once_with(["delete", "namespace", "ns2", "--ignore-not-found=true"])

    @patch.object(OcClient, "run")
    def test_apply_feeds_yaml(self, mock_run: Mock) -> None:
        """Test manifests are applied through stdin."""
        manifest = {"apiVersion": "v1", "kind": "Project", "metadata": {"name": "cluster"}}

        OcClient().apply(manifest)

        args, kwargs = mock_run.call_args
        assert args[0] == ["apply", "-f", "-"]
        assert yaml.safe_load(kwargs["input_text"]) == manifest

    @patch.object(OcClient, "run")
    def test_patch_merge(self, mock_run: Mock) -> None:
        """Test merge patches are serialized as JSON."""
        patch_body = {"spec": {"projectRequestTemplate": {"name": ""}}}

        OcClient().patch_merge("project.config.openshift.io", "cluster", patch_body)

        args = mock_run.call_args.args[0]
        assert args[:3] == ["patch", "project.config.openshift.io/cluster", "--type=merge"]
        assert json.loads(args[-1]) == patch_body

    @patch.object(OcClient, "run")
    def test_add_cluster_role_to_group_with_binding_name(self, mock_run: Mock) -> None:
        """Test the binding name is pinned when given."""
        OcClient().add_cluster_role_to_group("self-provisioner", "system:authenticated:oauth", "self-provisioners")

        mock_run.assert_called_once_with(
            [
                "adm",
                "policy",
                "add-cluster-role-to-group",
                "self-provisioner",
                "system:authenticated:oauth",
                "--rolebinding-name=self-provisioners",
            ]
        )

    @patch.object(OcClient, "run")
    def test_wait_for_deletion(self, mock_run: Mock) -> None:
        """Test wait outcomes."""
        client = OcClient()

        mock_run.return_value = ""
        assert client.wait_for_deletion("namespace", "ns2", 180) is True

        mock_run.side_effect = OcNotFoundError(["wait"], 1, "not found")
        assert client.wait_for_deletion("namespace", "ns2", 180) is True

        mock_run.side_effect = OcCommandError(["wait"], 1, "timed out waiting for the condition")
        assert client.wait_for_deletion("namespace", "ns2", 180) is False
