import pytest
from unittest.mock import patch
from kubernetes.config import ConfigException

from kube_engine.core.config import settings
from kube_engine.execution.platform import factory


class TestGetPlatform:
    """Tests for choosing in-cluster or kubeconfig access."""

    @pytest.fixture(autouse=True)
    def reset(self):
        factory.reset_platform()
        yield
        factory.reset_platform()

    @patch("kube_engine.execution.platform.factory.KubernetesPlatform")
    def test_prefers_in_cluster(self, mock_platform):
        platform = factory.get_platform()

        assert platform is mock_platform.in_cluster.return_value
        mock_platform.from_kubeconfig.assert_not_called()

    @patch("kube_engine.execution.platform.factory.KubernetesPlatform")
    def test_falls_back_to_kubeconfig(self, mock_platform):
        mock_platform.in_cluster.side_effect = ConfigException("Not in cluster")

        platform = factory.get_platform()

        assert platform is mock_platform.from_kubeconfig.return_value
        mock_platform.from_kubeconfig.assert_called_once_with()

    @patch("kube_engine.execution.platform.factory.KubernetesPlatform")
    def test_explicit_kubeconfig(self, mock_platform, monkeypatch):
        monkeypatch.setattr(settings, "kubeconfig_path", "/tmp/kubeconfig")

        factory.get_platform()

        mock_platform.in_cluster.assert_not_called()
        mock_platform.from_kubeconfig.assert_called_once_with("/tmp/kubeconfig")

    @patch("kube_engine.execution.platform.factory.KubernetesPlatform")
    def test_instance_is_cached(self, mock_platform):
        assert factory.get_platform() is factory.get_platform()
        mock_platform.in_cluster.assert_called_once()
