"""Account interface for cloud authentication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from carina.core.models import CacheEntry, CloudType

if TYPE_CHECKING:
    from carina.clients.session import Session
    from carina.interfaces.cluster_backend import ClusterBackend


class Account(ABC):
    """Abstract interface for a set of cloud credentials.

    An account knows how to:
    - Derive a stable identifier used as the credential cache key
    - Produce an authenticated Session (cached token first, then full exchange)
    - Re-run the credential exchange when a session token expires
    - Serialize and restore its cacheable state
    - Build the ClusterBackend that talks to its cloud

    Implementation Note:
    Call sites never inspect the concrete account type; they go through
    create_backend() so that adding a cloud only means adding a variant.
    """

    cloud_type: CloudType
    endpoint: str

    @abstractmethod
    def get_id(self) -> str:
        """Return a stable identifier derived from the auth endpoint and username."""

    @abstractmethod
    def authenticate(self) -> Session:
        """Authenticate and return a session.

        Returns:
            Session bound to the service endpoint

        Raises:
            AuthenticationError: If no valid token can be obtained
        """

    @abstractmethod
    def reauthenticate(self) -> str:
        """Run the full credential exchange again.

        Returns:
            New token, also stored on the account

        Raises:
            AuthenticationError: If the credentials are rejected
        """

    @abstractmethod
    def build_cache(self) -> CacheEntry:
        """Serialize the cacheable state (endpoint and token)."""

    @abstractmethod
    def apply_cache(self, entry: CacheEntry) -> None:
        """Restore the cacheable state from a cache entry."""

    @abstractmethod
    def create_backend(self) -> ClusterBackend:
        """Build the cluster backend for this account's cloud."""
