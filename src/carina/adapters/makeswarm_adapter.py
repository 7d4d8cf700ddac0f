"""make-swarm adapter implementing ClusterBackend interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from carina.clients.makeswarm_client import MakeSwarmClient
from carina.core.config import CarinaConfig
from carina.core.exceptions import UnsupportedOperationError
from carina.interfaces.cluster_backend import ClusterBackend
from carina.interfaces.cluster_types import Cluster, ClusterTemplate, CredentialsBundle, Quotas
from carina.polling.engine import ClusterPoller
from carina.utils.errors import backend_errors
from carina.utils.logging import get_logger

if TYPE_CHECKING:
    from carina.accounts.makeswarm_account import MakeSwarmAccount

logger = get_logger(__name__)

BACKEND_NAME = "make-swarm"

STATUS_NEW = "new"
STATUS_BUILDING = "building"
STATUS_REBUILDING = "rebuilding"
# Status reported by the API while a rebuild is running
STATUS_REBUILDING_SWARM = "rebuilding-swarm"

IN_PROGRESS_STATUSES = (STATUS_NEW, STATUS_BUILDING, STATUS_REBUILDING, STATUS_REBUILDING_SWARM)

RESIZE_UNSUPPORTED = "[make-swarm] Resizing clusters is not supported, use grow instead"
TEMPLATES_UNSUPPORTED = (
    "[make-swarm] Cluster templates are not supported, use create without --template"
)


def to_cluster(data: dict[str, Any]) -> Cluster:
    """Convert a make-swarm cluster document into a Cluster."""
    autoscale = data.get("autoscale")
    return Cluster(
        name=data.get("cluster_name") or data.get("name") or "",
        status=data.get("status") or "",
        nodes=int(data.get("nodes") or 0),
        endpoint=data.get("endpoint") or None,
        id=data.get("id"),
        autoscale=None if autoscale is None else bool(autoscale),
        status_reason=data.get("error") or None,
        backend=BACKEND_NAME,
    )


class MakeSwarmBackend(ClusterBackend):
    """Adapter between the common cluster contract and Carina make-swarm.

    make-swarm has no templates and cannot resize to an absolute node count. It
    deletes synchronously, so there is nothing to wait for after a delete.
    """

    name = BACKEND_NAME

    def __init__(self, account: MakeSwarmAccount, config: CarinaConfig | None = None):
        """Initialize make-swarm backend.

        Args:
            account: Public cloud account
            config: Carina configuration (defaults if None)
        """
        self.account = account
        self.config = config or CarinaConfig()
        self._client: MakeSwarmClient | None = None

    def _init(self) -> MakeSwarmClient:
        if self._client is None:
            session = self.account.authenticate()
            self._client = MakeSwarmClient(session, self.account.username)
        return self._client

    def create_cluster(self, name: str, template: str, nodes: int) -> Cluster:
        client = self._init()

        if template:
            logger.warning("template_ignored", backend=self.name, template=template)

        logger.debug("creating_cluster", backend=self.name, cluster=name, nodes=nodes)
        # Autoscale is always off at creation; it can be turned on with set_autoscale
        with backend_errors(self.name, "Unable to create the cluster"):
            return to_cluster(client.create(name, nodes, autoscale=False))

    def get_cluster(self, name: str) -> Cluster:
        client = self._init()
        logger.debug("retrieving_cluster", backend=self.name, cluster=name)
        with backend_errors(self.name, f"Unable to retrieve cluster ({name})"):
            return to_cluster(client.get(name))

    def list_clusters(self) -> list[Cluster]:
        client = self._init()
        logger.debug("listing_clusters", backend=self.name)
        with backend_errors(self.name, "Unable to list clusters"):
            return [to_cluster(item) for item in client.list_clusters()]

    def delete_cluster(self, name: str) -> Cluster:
        client = self._init()
        logger.debug("deleting_cluster", backend=self.name, cluster=name)
        with backend_errors(self.name, f"Unable to delete cluster ({name})"):
            result = client.delete(name)
        if not result:
            return Cluster(name=name, status="deleted", backend=BACKEND_NAME)
        return to_cluster(result)

    def grow_cluster(self, name: str, nodes: int) -> Cluster:
        client = self._init()
        logger.debug("growing_cluster", backend=self.name, cluster=name, nodes=nodes)
        with backend_errors(self.name, f"Unable to grow cluster ({name})"):
            return to_cluster(client.grow(name, nodes))

    def resize_cluster(self, name: str, nodes: int) -> Cluster:
        raise UnsupportedOperationError(RESIZE_UNSUPPORTED)

    def rebuild_cluster(self, name: str) -> Cluster:
        client = self._init()
        logger.debug("rebuilding_cluster", backend=self.name, cluster=name)
        with backend_errors(self.name, "Unable to rebuild the cluster"):
            return to_cluster(client.rebuild(name))

    def set_autoscale(self, name: str, value: bool) -> Cluster:
        client = self._init()
        logger.debug("setting_autoscale", backend=self.name, cluster=name, autoscale=value)
        with backend_errors(
            self.name, f"Unable to change the cluster's autoscale setting ({name})"
        ):
            return to_cluster(client.set_autoscale(name, value))

    def get_cluster_credentials(self, name: str) -> CredentialsBundle:
        client = self._init()
        logger.debug("retrieving_cluster_credentials", backend=self.name, cluster=name)
        with backend_errors(self.name, "Unable to retrieve the cluster credentials"):
            return CredentialsBundle(files=client.get_credentials(name))

    def get_quotas(self) -> Quotas:
        client = self._init()
        logger.debug("retrieving_quotas", backend=self.name)
        with backend_errors(self.name, "Unable to retrieve account quotas"):
            result = client.get_quotas()

        max_clusters = result.get("max_clusters")
        max_nodes = result.get("max_nodes_per_cluster")
        return Quotas(
            max_clusters=None if max_clusters is None else int(max_clusters),
            max_nodes_per_cluster=None if max_nodes is None else int(max_nodes),
        )

    def list_cluster_templates(self) -> list[ClusterTemplate]:
        raise UnsupportedOperationError(TEMPLATES_UNSUPPORTED)

    def wait_until_cluster_is_active(self, cluster: Cluster) -> Cluster:
        poller = ClusterPoller(
            self.get_cluster,
            IN_PROGRESS_STATUSES,
            poll_interval=self.config.polling.interval_seconds,
            timeout=self.config.polling.timeout_seconds,
            backend=self.name,
        )
        return poller.wait_until_active(cluster)

    def wait_until_cluster_is_deleted(self, cluster: Cluster) -> None:
        # make-swarm deletes immediately
        return None
