"""Authentication flow shared by every account type."""

import hashlib
from abc import abstractmethod
from typing import ClassVar

from carina.clients.session import Session
from carina.core.config import CarinaConfig
from carina.core.exceptions import AuthenticationError
from carina.core.models import CacheEntry
from carina.interfaces.account import Account
from carina.utils.logging import get_logger

logger = get_logger(__name__)


class BaseAccount(Account):
    """Account with the cached-token-first authentication flow.

    Subclasses are dataclasses providing auth_endpoint, username, endpoint, token
    and config, plus the three backend specific steps: validating a token,
    exchanging credentials and the extra session headers.
    """

    id_prefix: ClassVar[str]
    backend_name: ClassVar[str]

    auth_endpoint: str
    username: str
    endpoint: str
    token: str
    config: CarinaConfig

    def get_id(self) -> str:
        """Return a unique id for the account, e.g. private-1a2b3c4d-alicia.

        The auth endpoint is hashed so the id is stable and does not leak the URL.
        """
        digest = hashlib.sha1(self.auth_endpoint.encode("utf-8")).digest()[:4].hex()
        return f"{self.id_prefix}-{digest}-{self.username}"

    def authenticate(self) -> Session:
        """Authenticate, reusing the cached token when it is still valid.

        Returns:
            Session bound to the service endpoint

        Raises:
            AuthenticationError: If the credential exchange fails
        """
        if self.token and self.endpoint:
            logger.debug(
                "authenticating_with_cached_token",
                backend=self.backend_name,
                endpoint=self.endpoint,
            )
            if self._validate_token(self.token):
                logger.debug("authentication_successful", backend=self.backend_name, cached=True)
                return self._new_session()

            logger.debug("discarding_expired_cached_token", backend=self.backend_name)
            self.token = ""

        self.reauthenticate()
        logger.debug("authentication_successful", backend=self.backend_name, cached=False)
        return self._new_session()

    def reauthenticate(self) -> str:
        """Exchange the full credentials for a new token.

        Returns:
            New token

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        logger.debug(
            "authenticating_with_credentials",
            backend=self.backend_name,
            auth_endpoint=self.auth_endpoint,
        )
        try:
            self._exchange_credentials()
        except AuthenticationError as e:
            logger.error("authentication_failed", backend=self.backend_name, error=str(e))
            raise e.with_context(f"[{self.backend_name}] Authentication failed") from e
        return self.token

    def build_cache(self) -> CacheEntry:
        return CacheEntry(account_id=self.get_id(), endpoint=self.endpoint, token=self.token)

    def apply_cache(self, entry: CacheEntry) -> None:
        self.endpoint = entry.endpoint
        self.token = entry.token

    def _new_session(self) -> Session:
        return Session(
            self.endpoint,
            self.token,
            account=self,
            timeout=self.config.http.timeout_seconds,
            headers=self._session_headers(),
        )

    def _session_headers(self) -> dict[str, str]:
        return {}

    @abstractmethod
    def _validate_token(self, token: str) -> bool:
        """Ask the identity endpoint whether a token is still valid."""

    @abstractmethod
    def _exchange_credentials(self) -> None:
        """Run the full credential exchange and store token and endpoint."""
