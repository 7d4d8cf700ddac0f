"""Adapter implementations for cluster backends."""

from carina.adapters.magnum_adapter import MagnumBackend
from carina.adapters.makeswarm_adapter import MakeSwarmBackend

__all__ = [
    "MagnumBackend",
    "MakeSwarmBackend",
]
