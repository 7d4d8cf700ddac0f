"""Core data models for Carina."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class CloudType(str, Enum):
    """Cloud a set of credentials belongs to."""

    PUBLIC = "public"
    PRIVATE = "private"


class CacheEntry(BaseModel):
    """Cached authentication state for one account.

    The account id is the cache key, so there is never more than one entry per
    account. Saving an entry replaces the previous one wholesale.
    """

    account_id: str
    endpoint: str = ""
    token: str = ""
    last_update_check: datetime | None = None


class AccountCredentials(BaseModel):
    """Fully resolved credentials used to pick and build an account.

    Flags, environment variables and profiles are resolved by the caller; this
    model only carries the result.
    """

    cloud: CloudType | None = None
    username: str = ""
    api_key: str = Field(default="", repr=False)
    password: str = Field(default="", repr=False)
    project: str = ""
    domain: str = ""
    region: str = ""
    auth_endpoint: str = ""
    endpoint: str = ""
