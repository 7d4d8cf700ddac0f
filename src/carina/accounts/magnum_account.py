"""Private cloud (Keystone + Magnum) account."""

from dataclasses import dataclass, field

from carina.accounts.base import BaseAccount
from carina.adapters.magnum_adapter import MagnumBackend
from carina.clients.identity_client import KeystoneIdentityClient
from carina.clients.magnum_client import MAGNUM_API_VERSION_HEADER
from carina.core.config import CarinaConfig
from carina.core.models import CloudType
from carina.interfaces.cluster_backend import ClusterBackend


@dataclass(eq=False)
class MagnumAccount(BaseAccount):
    """Credentials accepted by OpenStack Identity (Keystone) v2 and v3."""

    cloud_type = CloudType.PRIVATE
    id_prefix = "private"
    backend_name = "magnum"

    auth_endpoint: str
    username: str
    password: str = field(default="", repr=False)
    project: str = ""
    domain: str = ""
    region: str = ""
    endpoint: str = ""
    token: str = field(default="", repr=False)
    config: CarinaConfig = field(default_factory=CarinaConfig, repr=False)

    def _identity(self) -> KeystoneIdentityClient:
        return KeystoneIdentityClient(
            self.auth_endpoint, timeout=self.config.http.timeout_seconds
        )

    def _validate_token(self, token: str) -> bool:
        return self._identity().validate_token(token)

    def _exchange_credentials(self) -> None:
        result = self._identity().authenticate(
            self.username,
            self.password,
            project=self.project,
            domain=self.domain,
            region=self.region,
        )
        self.token = result.token
        self.endpoint = result.endpoint or self.endpoint

    def _session_headers(self) -> dict[str, str]:
        return dict(MAGNUM_API_VERSION_HEADER)

    def create_backend(self) -> ClusterBackend:
        return MagnumBackend(self, self.config)
