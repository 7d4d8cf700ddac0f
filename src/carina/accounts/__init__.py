"""Account implementations for the supported clouds."""

from carina.accounts.factory import detect_cloud, resolve_account
from carina.accounts.magnum_account import MagnumAccount
from carina.accounts.makeswarm_account import MakeSwarmAccount

__all__ = [
    "MagnumAccount",
    "MakeSwarmAccount",
    "detect_cloud",
    "resolve_account",
]
