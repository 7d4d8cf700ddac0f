"""Interface definitions for the Carina backend abstraction."""

from carina.interfaces.account import Account
from carina.interfaces.cluster_backend import ClusterBackend
from carina.interfaces.cluster_types import (
    Cluster,
    ClusterTemplate,
    CredentialsBundle,
    Quotas,
)

__all__ = [
    "Account",
    "ClusterBackend",
    "Cluster",
    "ClusterTemplate",
    "CredentialsBundle",
    "Quotas",
]
