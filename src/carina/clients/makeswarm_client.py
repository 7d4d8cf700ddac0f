"""Carina make-swarm API client."""

import io
import zipfile
from typing import Any, cast

from carina.clients.session import Session
from carina.core.exceptions import ApiError
from carina.utils.logging import get_logger

logger = get_logger(__name__)

MAKESWARM_ENDPOINT = "https://api.getcarina.com"


class MakeSwarmClient:
    """Thin wrapper around the make-swarm REST API.

    Every cluster resource lives under /clusters/{username}; clusters are keyed by
    name.
    """

    def __init__(self, session: Session, username: str):
        """Initialize make-swarm client.

        Args:
            session: Authenticated session bound to the make-swarm endpoint
            username: Account user name, part of every resource path
        """
        self.session = session
        self.username = username

    def _cluster_path(self, name: str | None = None) -> str:
        if name is None:
            return f"clusters/{self.username}"
        return f"clusters/{self.username}/{name}"

    def create(self, name: str, nodes: int, autoscale: bool = False) -> dict[str, Any]:
        body = {"cluster_name": name, "nodes": nodes, "autoscale": autoscale}
        result = self.session.request_json("POST", self._cluster_path(), json=body)
        logger.info("makeswarm_cluster_create_requested", cluster=name, nodes=nodes)
        return cast(dict[str, Any], result)

    def get(self, name: str) -> dict[str, Any]:
        return cast(dict[str, Any], self.session.request_json("GET", self._cluster_path(name)))

    def list_clusters(self) -> list[dict[str, Any]]:
        result = self.session.request_json("GET", self._cluster_path())
        return cast(list[dict[str, Any]], result or [])

    def delete(self, name: str) -> dict[str, Any]:
        result = self.session.request_json("DELETE", self._cluster_path(name))
        logger.info("makeswarm_cluster_deleted", cluster=name)
        return cast(dict[str, Any], result or {})

    def grow(self, name: str, nodes: int) -> dict[str, Any]:
        result = self.session.request_json(
            "POST", f"{self._cluster_path(name)}/grow", json={"nodes": nodes}
        )
        logger.info("makeswarm_cluster_grow_requested", cluster=name, nodes=nodes)
        return cast(dict[str, Any], result)

    def rebuild(self, name: str) -> dict[str, Any]:
        result = self.session.request_json("POST", f"{self._cluster_path(name)}/rebuild")
        logger.info("makeswarm_cluster_rebuild_requested", cluster=name)
        return cast(dict[str, Any], result)

    def set_autoscale(self, name: str, value: bool) -> dict[str, Any]:
        flag = "true" if value else "false"
        result = self.session.request_json("PUT", f"{self._cluster_path(name)}/autoscale/{flag}")
        return cast(dict[str, Any], result)

    def get_credentials(self, name: str) -> dict[str, bytes]:
        """Download and unpack the credentials zip of a cluster.

        Returns:
            Mapping of file name to content, directories inside the zip flattened

        Raises:
            ApiError: If the response is not a valid zip archive
        """
        response = self.session.request("GET", f"{self._cluster_path(name)}/zip")
        try:
            with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
                return {
                    info.filename.rsplit("/", 1)[-1]: archive.read(info)
                    for info in archive.infolist()
                    if not info.is_dir()
                }
        except zipfile.BadZipFile as e:
            raise ApiError(f"Credentials for {name} are not a valid zip archive") from e

    def get_quotas(self) -> dict[str, Any]:
        result = self.session.request_json("GET", f"quotas/{self.username}")
        return cast(dict[str, Any], result or {})
