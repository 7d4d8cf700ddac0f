"""Public cloud (Rackspace identity + make-swarm) account."""

from dataclasses import dataclass, field

from carina.accounts.base import BaseAccount
from carina.adapters.makeswarm_adapter import MakeSwarmBackend
from carina.clients.identity_client import RACKSPACE_IDENTITY_ENDPOINT, RackspaceIdentityClient
from carina.clients.makeswarm_client import MAKESWARM_ENDPOINT
from carina.core.config import CarinaConfig
from carina.core.models import CloudType
from carina.interfaces.cluster_backend import ClusterBackend


@dataclass(eq=False)
class MakeSwarmAccount(BaseAccount):
    """Rackspace username and API key.

    The make-swarm API is not in the identity service catalog, so the service
    endpoint is either the custom endpoint or the public Carina API.
    """

    cloud_type = CloudType.PUBLIC
    id_prefix = "public"
    backend_name = "make-swarm"

    username: str
    api_key: str = field(default="", repr=False)
    auth_endpoint: str = RACKSPACE_IDENTITY_ENDPOINT
    endpoint: str = ""
    token: str = field(default="", repr=False)
    config: CarinaConfig = field(default_factory=CarinaConfig, repr=False)

    def _identity(self) -> RackspaceIdentityClient:
        return RackspaceIdentityClient(
            self.auth_endpoint, timeout=self.config.http.timeout_seconds
        )

    def _validate_token(self, token: str) -> bool:
        return self._identity().validate_token(token)

    def _exchange_credentials(self) -> None:
        result = self._identity().authenticate(self.username, self.api_key)
        self.token = result.token
        self.endpoint = self.endpoint or MAKESWARM_ENDPOINT

    def create_backend(self) -> ClusterBackend:
        return MakeSwarmBackend(self, self.config)
