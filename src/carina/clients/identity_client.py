"""Identity clients for OpenStack Keystone and Rackspace Cloud Identity."""

from dataclasses import dataclass
from typing import Any

import requests

from carina import USER_AGENT
from carina.clients.session import extract_error_message
from carina.core.exceptions import AuthenticationError
from carina.utils.logging import get_logger

logger = get_logger(__name__)

RACKSPACE_IDENTITY_ENDPOINT = "https://identity.api.rackspacecloud.com/v2.0"

MAGNUM_SERVICE_TYPE = "container-infra"


@dataclass
class IdentityToken:
    """Result of a credential exchange."""

    token: str
    endpoint: str | None = None
    project_id: str | None = None


class IdentityClient:
    """Shared plumbing for identity endpoints."""

    def __init__(
        self,
        auth_endpoint: str,
        timeout: float = 30.0,
        http: requests.Session | None = None,
    ):
        """Initialize identity client.

        Args:
            auth_endpoint: Identity endpoint, e.g. https://keystone.example.com/v3
            timeout: Request timeout in seconds
            http: Existing requests session (optional)
        """
        self.auth_endpoint = auth_endpoint.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})

    def _check_token(self, url: str, headers: dict[str, str]) -> bool:
        """Send a body-less HEAD request; only a 200 means the token is good."""
        try:
            response = self.http.head(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("token_check_failed", url=url, error=str(e))
            return False

        valid = response.status_code == 200
        logger.debug("token_check_completed", url=url, status=response.status_code, valid=valid)
        return valid

    def _post(self, path: str, body: dict[str, Any]) -> requests.Response:
        url = f"{self.auth_endpoint}/{path}"
        try:
            response = self.http.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("identity_request_failed", url=url, error=str(e))
            raise AuthenticationError(f"Unable to reach identity endpoint {url}: {e}") from e

        if response.status_code >= 400:
            message = extract_error_message(response)
            logger.error("identity_request_rejected", url=url, status=response.status_code)
            raise AuthenticationError(
                f"Identity endpoint rejected credentials ({response.status_code}): {message}"
            )
        return response

    def _json(self, response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            logger.error("identity_response_invalid", url=response.url, status=response.status_code)
            raise AuthenticationError(
                f"Identity endpoint returned an invalid response ({response.status_code})"
            ) from e
        if not isinstance(body, dict):
            raise AuthenticationError("Identity endpoint returned an unexpected response body")
        return body


class KeystoneIdentityClient(IdentityClient):
    """Keystone v2/v3 client.

    The API version is picked from the auth endpoint: anything ending in /v3 uses
    v3 password authentication, everything else uses v2 passwordCredentials.
    """

    @property
    def is_v3(self) -> bool:
        return self.auth_endpoint.endswith("/v3")

    def validate_token(self, token: str) -> bool:
        """Check whether a token is still accepted.

        Args:
            token: Token to check

        Returns:
            True if Keystone answered 200
        """
        return self._check_token(
            f"{self.auth_endpoint}/auth/tokens",
            {"X-Auth-Token": token, "X-Subject-Token": token},
        )

    def authenticate(
        self,
        username: str,
        password: str,
        project: str = "",
        domain: str = "",
        region: str = "",
        service_type: str = MAGNUM_SERVICE_TYPE,
    ) -> IdentityToken:
        """Exchange a username and password for a scoped token.

        Args:
            username: User name
            password: Password
            project: Project (tenant) name
            domain: Domain name (v3 only, defaults to "Default")
            region: Region used to pick the service endpoint
            service_type: Catalog service type to resolve

        Returns:
            IdentityToken with token and resolved service endpoint

        Raises:
            AuthenticationError: If the exchange fails or the service is missing
        """
        if self.is_v3:
            token, catalog, project_id = self._authenticate_v3(username, password, project, domain)
        else:
            token, catalog, project_id = self._authenticate_v2(username, password, project)

        endpoint = self._find_endpoint(catalog, service_type, region)
        if endpoint is None:
            raise AuthenticationError(
                f"No public {service_type} endpoint found in the service catalog"
                + (f" for region {region}" if region else "")
            )

        logger.debug("keystone_authenticated", endpoint=endpoint, v3=self.is_v3)
        return IdentityToken(token=token, endpoint=endpoint, project_id=project_id)

    def _authenticate_v3(
        self, username: str, password: str, project: str, domain: str
    ) -> tuple[str, list[dict[str, Any]], str | None]:
        domain_ref = {"name": domain or "Default"}
        body: dict[str, Any] = {
            "auth": {
                "identity": {
                    "methods": ["password"],
                    "password": {
                        "user": {"name": username, "domain": domain_ref, "password": password}
                    },
                }
            }
        }
        if project:
            body["auth"]["scope"] = {"project": {"name": project, "domain": domain_ref}}

        response = self._post("auth/tokens", body)
        token = response.headers.get("X-Subject-Token", "")
        if not token:
            raise AuthenticationError("Keystone response did not include X-Subject-Token")

        data = self._json(response).get("token", {})
        project_id = (data.get("project") or {}).get("id")
        return token, data.get("catalog", []), project_id

    def _authenticate_v2(
        self, username: str, password: str, project: str
    ) -> tuple[str, list[dict[str, Any]], str | None]:
        body: dict[str, Any] = {
            "auth": {"passwordCredentials": {"username": username, "password": password}}
        }
        if project:
            body["auth"]["tenantName"] = project

        access = self._json(self._post("tokens", body)).get("access", {})
        token_data = access.get("token", {})
        token = token_data.get("id", "")
        if not token:
            raise AuthenticationError("Keystone response did not include a token")

        project_id = (token_data.get("tenant") or {}).get("id")
        catalog = [
            {
                "type": service.get("type"),
                "endpoints": [
                    {
                        "interface": "public",
                        "region": endpoint.get("region"),
                        "url": endpoint.get("publicURL"),
                    }
                    for endpoint in service.get("endpoints", [])
                ],
            }
            for service in access.get("serviceCatalog", [])
        ]
        return token, catalog, project_id

    @staticmethod
    def _find_endpoint(
        catalog: list[dict[str, Any]], service_type: str, region: str
    ) -> str | None:
        for service in catalog:
            if service.get("type") != service_type:
                continue
            for endpoint in service.get("endpoints", []):
                if endpoint.get("interface", "public") != "public":
                    continue
                endpoint_region = endpoint.get("region") or endpoint.get("region_id")
                if region and endpoint_region != region:
                    continue
                if endpoint.get("url"):
                    return str(endpoint["url"]).rstrip("/")
        return None


class RackspaceIdentityClient(IdentityClient):
    """Rackspace Cloud Identity (v2.0) client using API key credentials."""

    def __init__(
        self,
        auth_endpoint: str = RACKSPACE_IDENTITY_ENDPOINT,
        timeout: float = 30.0,
        http: requests.Session | None = None,
    ):
        super().__init__(auth_endpoint, timeout=timeout, http=http)

    def validate_token(self, token: str) -> bool:
        """Check whether a token is still accepted.

        Args:
            token: Token to check

        Returns:
            True if the identity service answered 200
        """
        return self._check_token(f"{self.auth_endpoint}/tokens/{token}", {"X-Auth-Token": token})

    def authenticate(self, username: str, api_key: str) -> IdentityToken:
        """Exchange a username and API key for a token.

        Args:
            username: Rackspace user name
            api_key: Rackspace API key

        Returns:
            IdentityToken (no service endpoint, make-swarm is not in the catalog)

        Raises:
            AuthenticationError: If the exchange fails
        """
        body = {
            "auth": {
                "RAX-KSKEY:apiKeyCredentials": {"username": username, "apiKey": api_key},
            }
        }
        access = self._json(self._post("tokens", body)).get("access", {})
        token_data = access.get("token", {})
        token = token_data.get("id", "")
        if not token:
            raise AuthenticationError("Identity response did not include a token")

        logger.debug("rackspace_authenticated", username=username)
        return IdentityToken(token=token, project_id=(token_data.get("tenant") or {}).get("id"))
