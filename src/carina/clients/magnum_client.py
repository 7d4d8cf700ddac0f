"""OpenStack Magnum (container-infra v1) client."""

from typing import Any, cast

from carina.clients.session import Session
from carina.utils.logging import get_logger

logger = get_logger(__name__)

MAGNUM_API_VERSION_HEADER = {"OpenStack-API-Version": "container-infra latest"}


class MagnumClient:
    """Thin wrapper around the Magnum REST API.

    Returns decoded response bodies; error mapping is done by the Session.
    Clusters and templates can be referenced by name or uuid.
    """

    def __init__(self, session: Session):
        """Initialize Magnum client.

        Args:
            session: Authenticated session bound to the Magnum endpoint
        """
        self.session = session

    def _path(self, path: str) -> str:
        # Catalog endpoints may or may not already end with the version segment
        if self.session.endpoint.endswith("/v1"):
            return path
        return f"v1/{path}"

    def _json(self, method: str, path: str, body: Any = None) -> Any:
        return self.session.request_json(method, self._path(path), json=body)

    def create_cluster(self, name: str, template: str, node_count: int) -> str:
        """Request a new cluster.

        Returns:
            uuid of the new cluster
        """
        body = {"name": name, "cluster_template_id": template, "node_count": node_count}
        result = self._json("POST", "clusters", body) or {}
        logger.info("magnum_cluster_create_requested", cluster=name, uuid=result.get("uuid"))
        return cast(str, result.get("uuid", ""))

    def get_cluster(self, ident: str) -> dict[str, Any]:
        return cast(dict[str, Any], self._json("GET", f"clusters/{ident}"))

    def list_clusters(self) -> list[dict[str, Any]]:
        result = self._json("GET", "clusters") or {}
        return cast(list[dict[str, Any]], result.get("clusters", []))

    def delete_cluster(self, ident: str) -> None:
        self._json("DELETE", f"clusters/{ident}")
        logger.info("magnum_cluster_delete_requested", cluster=ident)

    def update_node_count(self, ident: str, node_count: int) -> str:
        """Patch the node count of a cluster.

        Returns:
            uuid of the cluster
        """
        patch = [{"op": "replace", "path": "/node_count", "value": node_count}]
        result = self._json("PATCH", f"clusters/{ident}", patch) or {}
        logger.info("magnum_cluster_resize_requested", cluster=ident, node_count=node_count)
        return cast(str, result.get("uuid", ident))

    def get_cluster_template(self, ident: str) -> dict[str, Any]:
        return cast(dict[str, Any], self._json("GET", f"clustertemplates/{ident}"))

    def list_cluster_templates(self) -> list[dict[str, Any]]:
        result = self._json("GET", "clustertemplates") or {}
        return cast(list[dict[str, Any]], result.get("clustertemplates", []))

    def get_ca_certificate(self, cluster_uuid: str) -> str:
        result = self._json("GET", f"certificates/{cluster_uuid}") or {}
        return cast(str, result.get("pem", ""))

    def sign_certificate(self, cluster_uuid: str, csr: str) -> str:
        """Have the cluster CA sign a certificate request.

        Args:
            cluster_uuid: Cluster uuid
            csr: PEM encoded certificate signing request

        Returns:
            PEM encoded signed certificate
        """
        result = self._json("POST", "certificates", {"cluster_uuid": cluster_uuid, "csr": csr})
        return cast(str, (result or {}).get("pem", ""))

    def list_quotas(self) -> list[dict[str, Any]]:
        result = self._json("GET", "quotas") or {}
        return cast(list[dict[str, Any]], result.get("quotas", []))
