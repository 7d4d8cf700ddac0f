"""Magnum adapter implementing ClusterBackend interface."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

import yaml

from carina.clients.magnum_client import MagnumClient
from carina.core.config import CarinaConfig
from carina.core.exceptions import InvalidRequestError, UnsupportedOperationError
from carina.interfaces.cluster_backend import ClusterBackend
from carina.interfaces.cluster_types import (
    CA_FILE,
    CERT_FILE,
    KEY_FILE,
    Cluster,
    ClusterTemplate,
    CredentialsBundle,
    Quotas,
)
from carina.polling.engine import ClusterPoller
from carina.utils.certificates import generate_key_and_csr
from carina.utils.errors import backend_errors
from carina.utils.logging import get_logger

if TYPE_CHECKING:
    from carina.accounts.magnum_account import MagnumAccount

logger = get_logger(__name__)

BACKEND_NAME = "magnum"

STATUS_DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"

IN_PROGRESS_STATUSES = (
    "CREATE_IN_PROGRESS",
    "UPDATE_IN_PROGRESS",
    STATUS_DELETE_IN_PROGRESS,
    "ROLLBACK_IN_PROGRESS",
    "RESTORE_IN_PROGRESS",
    "RESUME_IN_PROGRESS",
    "CHECK_IN_PROGRESS",
    "ADOPT_IN_PROGRESS",
    "SNAPSHOT_IN_PROGRESS",
)

QUOTA_RESOURCE_CLUSTER = "Cluster"


def to_cluster(data: dict[str, Any]) -> Cluster:
    """Convert a Magnum cluster document into a Cluster."""
    return Cluster(
        name=data.get("name") or "",
        status=data.get("status") or "",
        nodes=int(data.get("node_count") or 0),
        endpoint=data.get("api_address"),
        id=data.get("uuid"),
        template=data.get("cluster_template_id"),
        status_reason=data.get("status_reason"),
        backend=BACKEND_NAME,
    )


def to_cluster_template(data: dict[str, Any]) -> ClusterTemplate:
    return ClusterTemplate(
        name=data.get("name") or "",
        coe=data.get("coe") or "",
        host_type=data.get("server_type"),
        id=data.get("uuid"),
    )


def build_kubeconfig(cluster: Cluster) -> str:
    """Render a kubectl config pointing at the bundle's certificate files."""
    config = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [
            {
                "name": cluster.name,
                "cluster": {"server": cluster.endpoint, "certificate-authority": CA_FILE},
            }
        ],
        "users": [
            {
                "name": cluster.name,
                "user": {"client-certificate": CERT_FILE, "client-key": KEY_FILE},
            }
        ],
        "contexts": [
            {"name": cluster.name, "context": {"cluster": cluster.name, "user": cluster.name}}
        ],
        "current-context": cluster.name,
    }
    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)


def build_docker_env(cluster: Cluster) -> str:
    """Render a shell script exporting the Docker TLS settings."""
    host = cluster.endpoint or ""
    if host and "://" not in host:
        host = f"tcp://{host}"
    return (
        'DOCKER_CERT_PATH="$(cd "$(dirname "${BASH_SOURCE[0]}")" && pwd)"\n'
        "export DOCKER_CERT_PATH\n"
        f"export DOCKER_HOST={host}\n"
        "export DOCKER_TLS_VERIFY=1\n"
    )


class MagnumBackend(ClusterBackend):
    """Adapter between the common cluster contract and OpenStack Magnum.

    Magnum deletes asynchronously, so delete returns right away and
    wait_until_cluster_is_deleted polls until the cluster is gone.
    """

    name = BACKEND_NAME

    def __init__(self, account: MagnumAccount, config: CarinaConfig | None = None):
        """Initialize Magnum backend.

        Args:
            account: Private cloud account
            config: Carina configuration (defaults if None)
        """
        self.account = account
        self.config = config or CarinaConfig()
        self._client: MagnumClient | None = None

    def _init(self) -> MagnumClient:
        if self._client is None:
            session = self.account.authenticate()
            self._client = MagnumClient(session)
        return self._client

    def _poller(self) -> ClusterPoller:
        return ClusterPoller(
            self.get_cluster,
            IN_PROGRESS_STATUSES,
            poll_interval=self.config.polling.interval_seconds,
            timeout=self.config.polling.timeout_seconds,
            backend=self.name,
        )

    def create_cluster(self, name: str, template: str, nodes: int) -> Cluster:
        if not template:
            raise InvalidRequestError(
                "[magnum] A cluster template is required, "
                "list the available templates and pass one with --template"
            )

        client = self._init()
        logger.debug(
            "creating_cluster", backend=self.name, cluster=name, template=template, nodes=nodes
        )
        with backend_errors(self.name, f"Unable to create cluster ({name})"):
            uuid = client.create_cluster(name, template, nodes)
            return to_cluster(client.get_cluster(uuid or name))

    def get_cluster(self, name: str) -> Cluster:
        client = self._init()
        logger.debug("retrieving_cluster", backend=self.name, cluster=name)
        with backend_errors(self.name, f"Unable to retrieve cluster ({name})"):
            return to_cluster(client.get_cluster(name))

    def list_clusters(self) -> list[Cluster]:
        client = self._init()
        logger.debug("listing_clusters", backend=self.name)
        with backend_errors(self.name, "Unable to list clusters"):
            return [to_cluster(item) for item in client.list_clusters()]

    def delete_cluster(self, name: str) -> Cluster:
        cluster = self.get_cluster(name)

        client = self._init()
        logger.debug("deleting_cluster", backend=self.name, cluster=name)
        with backend_errors(self.name, f"Unable to delete cluster ({name})"):
            client.delete_cluster(cluster.id or name)

        return replace(cluster, status=STATUS_DELETE_IN_PROGRESS)

    def grow_cluster(self, name: str, nodes: int) -> Cluster:
        cluster = self.get_cluster(name)

        client = self._init()
        target = cluster.nodes + nodes
        logger.debug(
            "growing_cluster", backend=self.name, cluster=name, nodes=nodes, node_count=target
        )
        with backend_errors(self.name, f"Unable to grow cluster ({name})"):
            uuid = client.update_node_count(cluster.id or name, target)
            return to_cluster(client.get_cluster(uuid))

    def resize_cluster(self, name: str, nodes: int) -> Cluster:
        client = self._init()
        logger.debug("resizing_cluster", backend=self.name, cluster=name, node_count=nodes)
        with backend_errors(self.name, f"Unable to resize cluster ({name})"):
            uuid = client.update_node_count(name, nodes)
            return to_cluster(client.get_cluster(uuid))

    def rebuild_cluster(self, name: str) -> Cluster:
        raise UnsupportedOperationError(
            "[magnum] Rebuilding clusters is not supported, delete and create the cluster instead"
        )

    def set_autoscale(self, name: str, value: bool) -> Cluster:
        raise UnsupportedOperationError(
            "[magnum] Autoscaling is not supported, use resize to change the node count"
        )

    def get_cluster_credentials(self, name: str) -> CredentialsBundle:
        cluster = self.get_cluster(name)

        client = self._init()
        logger.debug("retrieving_cluster_credentials", backend=self.name, cluster=name)
        with backend_errors(self.name, f"Unable to retrieve the cluster credentials ({name})"):
            if not cluster.template:
                raise InvalidRequestError(
                    f"Cluster ({name}) has no cluster template, unable to issue credentials"
                )
            template = client.get_cluster_template(cluster.template)
            private_key, csr = generate_key_and_csr(self.account.username)
            certificate = client.sign_certificate(cluster.id or name, csr)
            ca = client.get_ca_certificate(cluster.id or name)

        files = {
            CA_FILE: ca.encode("utf-8"),
            CERT_FILE: certificate.encode("utf-8"),
            KEY_FILE: private_key.encode("utf-8"),
        }
        if template.get("coe") == "kubernetes":
            files["kubectl.config"] = build_kubeconfig(cluster).encode("utf-8")
            files["kubectl.env"] = (
                'export KUBECONFIG="$(cd "$(dirname "${BASH_SOURCE[0]}")" && pwd)/kubectl.config"\n'
            ).encode("utf-8")
        else:
            files["docker.env"] = build_docker_env(cluster).encode("utf-8")

        return CredentialsBundle(files=files)

    def get_quotas(self) -> Quotas:
        client = self._init()
        logger.debug("retrieving_quotas", backend=self.name)
        with backend_errors(self.name, "Unable to retrieve account quotas"):
            quotas = client.list_quotas()

        max_clusters = next(
            (
                int(q["hard_limit"])
                for q in quotas
                if q.get("resource") == QUOTA_RESOURCE_CLUSTER and q.get("hard_limit") is not None
            ),
            None,
        )
        return Quotas(max_clusters=max_clusters)

    def list_cluster_templates(self) -> list[ClusterTemplate]:
        client = self._init()
        logger.debug("listing_cluster_templates", backend=self.name)
        with backend_errors(self.name, "Unable to list cluster templates"):
            return [to_cluster_template(item) for item in client.list_cluster_templates()]

    def wait_until_cluster_is_active(self, cluster: Cluster) -> Cluster:
        return self._poller().wait_until_active(cluster)

    def wait_until_cluster_is_deleted(self, cluster: Cluster) -> None:
        self._poller().wait_until_deleted(cluster)
