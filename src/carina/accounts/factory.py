"""Pick and build the account matching a set of credentials."""

from carina.accounts.magnum_account import MagnumAccount
from carina.accounts.makeswarm_account import MakeSwarmAccount
from carina.core.config import CarinaConfig
from carina.core.exceptions import ConfigurationError
from carina.core.models import AccountCredentials, CloudType
from carina.interfaces.account import Account
from carina.utils.logging import get_logger

logger = get_logger(__name__)


def detect_cloud(credentials: AccountCredentials) -> CloudType:
    """Work out which cloud a set of credentials belongs to.

    An explicit cloud wins. Otherwise an API key means the public cloud and a
    password means the private cloud.

    Raises:
        ConfigurationError: If the cloud cannot be determined
    """
    if credentials.cloud is not None:
        return credentials.cloud
    if credentials.api_key:
        return CloudType.PUBLIC
    if credentials.password:
        return CloudType.PRIVATE
    raise ConfigurationError(
        "Unable to detect the cloud: provide an API key (public cloud), "
        "a password (private cloud), or set the cloud explicitly"
    )


def resolve_account(credentials: AccountCredentials, config: CarinaConfig | None = None) -> Account:
    """Build the account for a set of resolved credentials.

    Args:
        credentials: Credentials resolved from flags, environment or profile
        config: Carina configuration (defaults if None)

    Returns:
        MakeSwarmAccount or MagnumAccount

    Raises:
        ConfigurationError: If required credentials are missing
    """
    config = config or CarinaConfig()
    cloud = detect_cloud(credentials)

    missing = [] if credentials.username else ["username"]
    if cloud == CloudType.PUBLIC:
        if not credentials.api_key:
            missing.append("api_key")
    else:
        missing.extend(
            name for name in ("password", "auth_endpoint") if not getattr(credentials, name)
        )

    if missing:
        raise ConfigurationError(
            f"Missing {cloud.value} cloud credentials: {', '.join(missing)}"
        )

    logger.debug("account_resolved", cloud=cloud.value, username=credentials.username)

    if cloud == CloudType.PUBLIC:
        public = MakeSwarmAccount(
            username=credentials.username,
            api_key=credentials.api_key,
            endpoint=credentials.endpoint,
            config=config,
        )
        if credentials.auth_endpoint:
            public.auth_endpoint = credentials.auth_endpoint
        return public

    return MagnumAccount(
        auth_endpoint=credentials.auth_endpoint,
        username=credentials.username,
        password=credentials.password,
        project=credentials.project,
        domain=credentials.domain,
        region=credentials.region,
        endpoint=credentials.endpoint,
        config=config,
    )
