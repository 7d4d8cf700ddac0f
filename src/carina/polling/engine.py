"""Polling engine that waits for clusters to settle."""

import time
from collections.abc import Callable, Iterable

from carina.core.exceptions import ApiError, NotFoundError, WaitTimeoutError
from carina.interfaces.cluster_types import Cluster
from carina.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_TIMEOUT = 3600.0


class ClusterPoller:
    """Block until a cluster leaves its in-progress states or disappears.

    Statuses are compared case-insensitively. Any status outside the in-progress
    set is terminal, including error statuses; callers inspect the returned
    cluster to tell success from failure.

    Fetch errors are never retried here. They abort the wait and propagate.
    """

    def __init__(
        self,
        fetch: Callable[[str], Cluster],
        in_progress_statuses: Iterable[str],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float | None = DEFAULT_TIMEOUT,
        backend: str | None = None,
    ):
        """Initialize poller.

        Args:
            fetch: Returns the current cluster for a name
            in_progress_statuses: Statuses that mean the backend is still working
            poll_interval: Seconds to sleep before each fetch
            timeout: Give up after this many seconds (None waits forever)
            backend: Backend name used in log events
        """
        self.fetch = fetch
        self.in_progress_statuses = frozenset(s.lower() for s in in_progress_statuses)
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.backend = backend

    def is_done(self, cluster: Cluster) -> bool:
        return (cluster.status or "").lower() not in self.in_progress_statuses

    def wait_until_active(self, cluster: Cluster) -> Cluster:
        """Wait until the cluster reaches a terminal status.

        Args:
            cluster: Cluster as last seen

        Returns:
            First cluster observed in a terminal status

        Raises:
            WaitTimeoutError: If the timeout expires first
            CarinaError: If fetching the cluster fails
        """
        if self.is_done(cluster):
            return cluster

        start_time = time.monotonic()
        while True:
            self._check_deadline(start_time, cluster, "active")
            logger.debug(
                "waiting_for_cluster_active",
                backend=self.backend,
                cluster=cluster.name,
                status=cluster.status,
            )
            time.sleep(self.poll_interval)

            cluster = self.fetch(cluster.name)
            if self.is_done(cluster):
                logger.info(
                    "cluster_settled",
                    backend=self.backend,
                    cluster=cluster.name,
                    status=cluster.status,
                    duration=round(time.monotonic() - start_time, 1),
                )
                return cluster

    def wait_until_deleted(self, cluster: Cluster) -> None:
        """Wait until fetching the cluster reports it no longer exists.

        Args:
            cluster: Cluster being deleted

        Raises:
            WaitTimeoutError: If the timeout expires first
            ApiError: If the cluster settles in a status other than gone, e.g. DELETE_FAILED
            CarinaError: If fetching the cluster fails for any other reason
        """
        start_time = time.monotonic()
        while True:
            self._check_deadline(start_time, cluster, "deleted")
            logger.debug(
                "waiting_for_cluster_deleted",
                backend=self.backend,
                cluster=cluster.name,
                status=cluster.status,
            )
            time.sleep(self.poll_interval)

            try:
                cluster = self.fetch(cluster.name)
            except NotFoundError:
                logger.info("cluster_deleted", backend=self.backend, cluster=cluster.name)
                return

            if self.is_done(cluster):
                logger.error(
                    "cluster_delete_failed",
                    backend=self.backend,
                    cluster=cluster.name,
                    status=cluster.status,
                    reason=cluster.status_reason,
                )
                reason = f": {cluster.status_reason}" if cluster.status_reason else ""
                raise ApiError(
                    f"Cluster ({cluster.name}) stopped deleting "
                    f"with status {cluster.status}{reason}"
                )

    def _check_deadline(self, start_time: float, cluster: Cluster, target: str) -> None:
        if self.timeout is None:
            return

        elapsed = time.monotonic() - start_time
        if elapsed >= self.timeout:
            logger.error(
                "cluster_wait_timeout",
                backend=self.backend,
                cluster=cluster.name,
                status=cluster.status,
                timeout=self.timeout,
            )
            raise WaitTimeoutError(
                f"Timed out after {self.timeout:g}s waiting for cluster ({cluster.name}) "
                f"to be {target}, currently {cluster.status}",
                cluster=cluster,
                timeout=self.timeout,
            )
