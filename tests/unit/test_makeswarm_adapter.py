"""Tests for the make-swarm backend adapter."""

from unittest.mock import MagicMock, patch

import pytest

from carina.adapters.makeswarm_adapter import (
    RESIZE_UNSUPPORTED,
    TEMPLATES_UNSUPPORTED,
    MakeSwarmBackend,
    to_cluster,
)
from carina.core.exceptions import ApiError, NotFoundError, UnsupportedOperationError
from carina.interfaces.cluster_types import Cluster


@pytest.fixture
def mock_account():
    """Public cloud account whose authenticate returns a mock session."""
    account = MagicMock()
    account.username = "alicia"
    return account


@pytest.fixture
def mock_client_class():
    """Patch MakeSwarmClient inside the adapter."""
    with patch("carina.adapters.makeswarm_adapter.MakeSwarmClient") as mock_class:
        yield mock_class


@pytest.fixture
def mock_client(mock_client_class):
    return mock_client_class.return_value


@pytest.fixture
def backend(mock_account, mock_client_class, carina_config):
    """make-swarm backend wired to mocks."""
    return MakeSwarmBackend(mock_account, carina_config)


class TestToCluster:
    """Tests for make-swarm document conversion."""

    def test_to_cluster(self, makeswarm_cluster_doc):
        cluster = to_cluster(makeswarm_cluster_doc)

        assert cluster.name == "demo"
        assert cluster.status == "active"
        assert cluster.nodes == 3
        assert cluster.autoscale is False
        assert cluster.backend == "make-swarm"

    def test_error_becomes_status_reason(self):
        cluster = to_cluster({"cluster_name": "demo", "status": "error", "error": "no capacity"})

        assert cluster.status_reason == "no capacity"
        assert cluster.autoscale is None


class TestUnsupported:
    """Operations make-swarm cannot perform."""

    def test_resize_fails_without_network(self, backend, mock_account, mock_client_class):
        """Test resize fails with guidance and never authenticates."""
        with pytest.raises(UnsupportedOperationError) as exc_info:
            backend.resize_cluster("demo", 5)

        assert str(exc_info.value) == RESIZE_UNSUPPORTED
        mock_account.authenticate.assert_not_called()
        mock_client_class.assert_not_called()

    def test_templates_fail_without_network(self, backend, mock_account):
        """Test listing templates fails with guidance and never authenticates."""
        with pytest.raises(UnsupportedOperationError) as exc_info:
            backend.list_cluster_templates()

        assert str(exc_info.value) == TEMPLATES_UNSUPPORTED
        mock_account.authenticate.assert_not_called()


class TestClusterOperations:
    """Tests for cluster lifecycle operations."""

    def test_client_uses_account_username(self, backend, mock_account, mock_client_class):
        backend.list_clusters()

        mock_client_class.assert_called_once_with(mock_account.authenticate.return_value, "alicia")

    def test_create_without_template(self, backend, mock_client, makeswarm_cluster_doc):
        """Test create always starts with autoscale off."""
        mock_client.create.return_value = {**makeswarm_cluster_doc, "status": "new"}

        with patch("carina.adapters.makeswarm_adapter.logger") as mock_logger:
            cluster = backend.create_cluster("demo", "", 3)

        mock_client.create.assert_called_once_with("demo", 3, autoscale=False)
        mock_logger.warning.assert_not_called()
        assert cluster.status == "new"

    def test_create_with_template_warns(self, backend, mock_client, makeswarm_cluster_doc):
        """Test a template is ignored with a warning and the cluster still created."""
        mock_client.create.return_value = makeswarm_cluster_doc

        with patch("carina.adapters.makeswarm_adapter.logger") as mock_logger:
            backend.create_cluster("demo", "k8s", 1)

        mock_logger.warning.assert_called_once_with(
            "template_ignored", backend="make-swarm", template="k8s"
        )
        mock_client.create.assert_called_once_with("demo", 1, autoscale=False)

    def test_create_error_is_wrapped(self, backend, mock_client):
        mock_client.create.side_effect = ApiError("quota exceeded", status_code=403)

        with pytest.raises(ApiError, match=r"^\[make-swarm\] Unable to create the cluster: "):
            backend.create_cluster("demo", "", 1)

    def test_get_cluster_not_found(self, backend, mock_client):
        mock_client.get.side_effect = NotFoundError("not found")

        with pytest.raises(NotFoundError, match=r"\[make-swarm\] Unable to retrieve cluster \(x\)"):
            backend.get_cluster("x")

    def test_list_clusters(self, backend, mock_client, makeswarm_cluster_doc):
        mock_client.list_clusters.return_value = [makeswarm_cluster_doc]

        assert backend.list_clusters()[0].name == "demo"

    def test_delete_cluster(self, backend, mock_client, makeswarm_cluster_doc):
        mock_client.delete.return_value = {**makeswarm_cluster_doc, "status": "deleting"}

        assert backend.delete_cluster("demo").status == "deleting"

    def test_delete_cluster_empty_response(self, backend, mock_client):
        """Test an empty delete response still reports the cluster."""
        mock_client.delete.return_value = {}

        cluster = backend.delete_cluster("demo")

        assert cluster == Cluster(name="demo", status="deleted", backend="make-swarm")

    def test_grow_cluster(self, backend, mock_client, makeswarm_cluster_doc):
        mock_client.grow.return_value = {**makeswarm_cluster_doc, "status": "growing"}

        backend.grow_cluster("demo", 2)

        mock_client.grow.assert_called_once_with("demo", 2)

    def test_rebuild_cluster(self, backend, mock_client, makeswarm_cluster_doc):
        mock_client.rebuild.return_value = {**makeswarm_cluster_doc, "status": "rebuilding"}

        assert backend.rebuild_cluster("demo").status == "rebuilding"

    def test_set_autoscale(self, backend, mock_client, makeswarm_cluster_doc):
        mock_client.set_autoscale.return_value = {**makeswarm_cluster_doc, "autoscale": True}

        assert backend.set_autoscale("demo", True).autoscale is True
        mock_client.set_autoscale.assert_called_once_with("demo", True)


class TestCredentialsAndQuotas:
    """Tests for credentials and quotas."""

    def test_get_cluster_credentials(self, backend, mock_client):
        mock_client.get_credentials.return_value = {"ca.pem": b"CA", "docker.env": b"export"}

        bundle = backend.get_cluster_credentials("demo")

        assert bundle.get_ca() == b"CA"
        assert "docker.env" in bundle.files

    def test_get_quotas(self, backend, mock_client):
        mock_client.get_quotas.return_value = {"max_clusters": "3", "max_nodes_per_cluster": 10}

        quotas = backend.get_quotas()

        assert quotas.max_clusters == 3
        assert quotas.max_nodes_per_cluster == 10


class TestWaiting:
    """Tests for the wait helpers."""

    def test_wait_until_active(self, backend, mock_client, makeswarm_cluster_doc):
        """Test the rebuild status is treated as in progress."""
        mock_client.get.side_effect = [
            {**makeswarm_cluster_doc, "status": "rebuilding-swarm"},
            makeswarm_cluster_doc,
        ]

        with patch("carina.polling.engine.time.sleep") as mock_sleep:
            cluster = backend.wait_until_cluster_is_active(Cluster(name="demo", status="building"))

        assert cluster.status == "active"
        assert mock_client.get.call_count == 2
        assert mock_sleep.call_count == 2

    def test_wait_until_deleted_is_immediate(self, backend, mock_account):
        assert backend.wait_until_cluster_is_deleted(Cluster(name="demo", status="deleted")) is None
        mock_account.authenticate.assert_not_called()
