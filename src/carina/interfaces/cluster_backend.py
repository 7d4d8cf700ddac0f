"""Cluster backend interface for cluster lifecycle operations."""

from abc import ABC, abstractmethod

from carina.interfaces.cluster_types import Cluster, ClusterTemplate, CredentialsBundle, Quotas


class ClusterBackend(ABC):
    """Abstract interface for a cluster provider.

    Implementations translate provider responses into Cluster values and provider
    limitations into UnsupportedOperationError. They authenticate lazily on the
    first call and reuse the session afterwards.

    Implementation Note:
    Every provider error leaves the backend as a CarinaError of the same type,
    with a message prefixed by the backend tag and the failing operation.
    """

    name: str

    @abstractmethod
    def create_cluster(self, name: str, template: str, nodes: int) -> Cluster:
        """Create a new cluster.

        Args:
            name: Cluster name, unique per account
            template: Cluster template name (ignored by some backends)
            nodes: Number of nodes

        Returns:
            Cluster as reported right after the create request

        Raises:
            InvalidRequestError: If the backend needs a template and none was given
            CarinaError: If the request fails
        """

    @abstractmethod
    def get_cluster(self, name: str) -> Cluster:
        """Get a cluster by name.

        Raises:
            NotFoundError: If the cluster does not exist
        """

    @abstractmethod
    def list_clusters(self) -> list[Cluster]:
        """List all clusters of the account."""

    @abstractmethod
    def delete_cluster(self, name: str) -> Cluster:
        """Delete a cluster.

        Returns:
            Cluster as reported by the delete request
        """

    @abstractmethod
    def grow_cluster(self, name: str, nodes: int) -> Cluster:
        """Add nodes to a cluster.

        Args:
            name: Cluster name
            nodes: Number of nodes to add
        """

    @abstractmethod
    def resize_cluster(self, name: str, nodes: int) -> Cluster:
        """Resize a cluster to an absolute node count.

        Raises:
            UnsupportedOperationError: If the backend cannot resize
        """

    @abstractmethod
    def rebuild_cluster(self, name: str) -> Cluster:
        """Destroy and recreate the cluster's nodes.

        Raises:
            UnsupportedOperationError: If the backend cannot rebuild
        """

    @abstractmethod
    def set_autoscale(self, name: str, value: bool) -> Cluster:
        """Enable or disable autoscaling.

        Raises:
            UnsupportedOperationError: If the backend has no autoscaling
        """

    @abstractmethod
    def get_cluster_credentials(self, name: str) -> CredentialsBundle:
        """Retrieve TLS certificates and connection scripts for a cluster."""

    @abstractmethod
    def get_quotas(self) -> Quotas:
        """Retrieve the account quotas."""

    @abstractmethod
    def list_cluster_templates(self) -> list[ClusterTemplate]:
        """List cluster templates.

        Raises:
            UnsupportedOperationError: If the backend has no templates
        """

    @abstractmethod
    def wait_until_cluster_is_active(self, cluster: Cluster) -> Cluster:
        """Block until the cluster leaves its in-progress states.

        Raises:
            WaitTimeoutError: If the configured timeout is exceeded
        """

    @abstractmethod
    def wait_until_cluster_is_deleted(self, cluster: Cluster) -> None:
        """Block until the cluster no longer exists.

        Raises:
            WaitTimeoutError: If the configured timeout is exceeded
        """
