"""Cluster manager tying accounts, the credential cache and backends together."""

import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from carina.core.config import CarinaConfig
from carina.interfaces.account import Account
from carina.interfaces.cluster_backend import ClusterBackend
from carina.interfaces.cluster_types import Cluster, ClusterTemplate, CredentialsBundle, Quotas
from carina.registry.credential_cache import CredentialCache
from carina.utils.logging import get_logger, log_error, log_operation, setup_logging

logger = get_logger(__name__)


class ClusterManager:
    """Run cluster operations for an account.

    For every call the manager:
    1. Restores the account's cached token (when caching is enabled)
    2. Reuses or builds the account's backend, which authenticates lazily
    3. Runs the operation, optionally waiting for the cluster to settle
    4. Saves the account's token back to the cache if it changed
    """

    def __init__(self, config: CarinaConfig | None = None, cache: CredentialCache | None = None):
        """Initialize cluster manager.

        Args:
            config: Carina configuration (defaults if None)
            cache: Credential cache (built from config when caching is enabled)
        """
        self.config = config or CarinaConfig()
        if cache is None and self.config.cache.enabled:
            cache = CredentialCache(self.config.cache_path)
        self.cache = cache
        self._backends: dict[str, tuple[Account, ClusterBackend]] = {}

    @classmethod
    def from_config_file(cls, path: str | Path) -> "ClusterManager":
        """Load configuration from YAML, set up logging from it and build a manager.

        Args:
            path: Path to configuration file

        Returns:
            ClusterManager using the loaded configuration

        Raises:
            ConfigurationError: If the file cannot be loaded or is invalid
        """
        config = CarinaConfig.from_file(path)
        setup_logging(config.logging)
        logger.debug("cluster_manager_configured", config_path=str(path), home=config.home)
        return cls(config)

    def _backend(self, account: Account) -> ClusterBackend:
        account_id = account.get_id()
        known = self._backends.get(account_id)
        if known is not None and known[0] is account:
            return known[1]

        if self.cache is not None and not account.build_cache().token:
            entry = self.cache.get(account_id)
            if entry is not None:
                logger.debug("applying_cached_credentials", account_id=account_id)
                account.apply_cache(entry)

        backend = account.create_backend()
        self._backends[account_id] = (account, backend)
        return backend

    def _update_cache(self, account: Account) -> None:
        if self.cache is None:
            return

        entry = account.build_cache()
        if not entry.token:
            return

        cached = self.cache.get(entry.account_id)
        if cached is None:
            self.cache.save(entry)
        elif (cached.token, cached.endpoint) != (entry.token, entry.endpoint):
            # Fields outside the auth state, e.g. last_update_check, are kept
            self.cache.save(
                cached.model_copy(update={"endpoint": entry.endpoint, "token": entry.token})
            )

    @contextmanager
    def _operation(
        self, account: Account, operation: str, **context: object
    ) -> Iterator[ClusterBackend]:
        log_operation(logger, operation, account_id=account.get_id(), **context)
        backend = self._backend(account)
        try:
            yield backend
        except Exception as e:
            log_error(logger, e, operation=operation, account_id=account.get_id(), **context)
            raise
        self._update_cache(account)

    def credentials_path(self, account: Account, name: str) -> Path:
        """Default directory for a cluster's credentials bundle."""
        return self.config.home_path / "clusters" / account.get_id() / name

    def create_cluster(
        self, account: Account, name: str, template: str = "", nodes: int = 1, wait: bool = False
    ) -> Cluster:
        with self._operation(account, "create_cluster", cluster=name, nodes=nodes) as backend:
            cluster = backend.create_cluster(name, template, nodes)
            if wait:
                cluster = backend.wait_until_cluster_is_active(cluster)
        return cluster

    def get_cluster(self, account: Account, name: str, wait: bool = False) -> Cluster:
        with self._operation(account, "get_cluster", cluster=name) as backend:
            cluster = backend.get_cluster(name)
            if wait:
                cluster = backend.wait_until_cluster_is_active(cluster)
        return cluster

    def list_clusters(self, account: Account) -> list[Cluster]:
        with self._operation(account, "list_clusters") as backend:
            clusters = backend.list_clusters()
        return clusters

    def delete_cluster(self, account: Account, name: str, wait: bool = False) -> Cluster:
        """Delete a cluster and its locally stored credentials.

        Args:
            account: Account owning the cluster
            name: Cluster name
            wait: Block until the backend reports the cluster is gone

        Returns:
            Cluster as reported by the delete request
        """
        with self._operation(account, "delete_cluster", cluster=name) as backend:
            cluster = backend.delete_cluster(name)
            if wait:
                backend.wait_until_cluster_is_deleted(cluster)

        credentials_dir = self.credentials_path(account, name)
        if credentials_dir.exists():
            shutil.rmtree(credentials_dir)
            logger.debug("cluster_credentials_removed", path=str(credentials_dir))
        return cluster

    def grow_cluster(self, account: Account, name: str, nodes: int, wait: bool = False) -> Cluster:
        with self._operation(account, "grow_cluster", cluster=name, nodes=nodes) as backend:
            cluster = backend.grow_cluster(name, nodes)
            if wait:
                cluster = backend.wait_until_cluster_is_active(cluster)
        return cluster

    def resize_cluster(
        self, account: Account, name: str, nodes: int, wait: bool = False
    ) -> Cluster:
        with self._operation(account, "resize_cluster", cluster=name, nodes=nodes) as backend:
            cluster = backend.resize_cluster(name, nodes)
            if wait:
                cluster = backend.wait_until_cluster_is_active(cluster)
        return cluster

    def rebuild_cluster(self, account: Account, name: str, wait: bool = False) -> Cluster:
        with self._operation(account, "rebuild_cluster", cluster=name) as backend:
            cluster = backend.rebuild_cluster(name)
            if wait:
                cluster = backend.wait_until_cluster_is_active(cluster)
        return cluster

    def set_autoscale(self, account: Account, name: str, value: bool) -> Cluster:
        with self._operation(account, "set_autoscale", cluster=name, autoscale=value) as backend:
            cluster = backend.set_autoscale(name, value)
        return cluster

    def get_cluster_credentials(self, account: Account, name: str) -> CredentialsBundle:
        with self._operation(account, "get_cluster_credentials", cluster=name) as backend:
            bundle = backend.get_cluster_credentials(name)
        return bundle

    def download_cluster_credentials(
        self, account: Account, name: str, directory: str | Path | None = None
    ) -> Path:
        """Download a cluster's credentials bundle to disk.

        Args:
            account: Account owning the cluster
            name: Cluster name
            directory: Target directory (defaults to credentials_path())

        Returns:
            Directory the bundle was written to
        """
        bundle = self.get_cluster_credentials(account, name)
        target = Path(directory) if directory is not None else self.credentials_path(account, name)
        path = bundle.write(target)
        logger.info("cluster_credentials_written", cluster=name, path=str(path))
        return path

    def get_quotas(self, account: Account) -> Quotas:
        with self._operation(account, "get_quotas") as backend:
            quotas = backend.get_quotas()
        return quotas

    def list_cluster_templates(self, account: Account) -> list[ClusterTemplate]:
        with self._operation(account, "list_cluster_templates") as backend:
            templates = backend.list_cluster_templates()
        return templates
