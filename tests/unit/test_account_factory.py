"""Tests for account detection and construction."""

import pytest

from carina.accounts import MagnumAccount, MakeSwarmAccount, detect_cloud, resolve_account
from carina.clients.identity_client import RACKSPACE_IDENTITY_ENDPOINT
from carina.core.exceptions import ConfigurationError
from carina.core.models import AccountCredentials, CloudType


class TestDetectCloud:
    """Tests for detect_cloud."""

    def test_api_key_means_public(self):
        assert detect_cloud(AccountCredentials(username="alicia", api_key="k")) == CloudType.PUBLIC

    def test_password_means_private(self):
        credentials = AccountCredentials(username="alicia", password="p")
        assert detect_cloud(credentials) == CloudType.PRIVATE

    def test_explicit_cloud_wins(self):
        """Test an explicit cloud overrides the credential shape."""
        credentials = AccountCredentials(cloud=CloudType.PRIVATE, username="alicia", api_key="k")
        assert detect_cloud(credentials) == CloudType.PRIVATE

    def test_undetectable(self):
        with pytest.raises(ConfigurationError, match="Unable to detect"):
            detect_cloud(AccountCredentials(username="alicia"))


class TestResolveAccount:
    """Tests for resolve_account."""

    def test_public_account(self, carina_config):
        """Test API key credentials build a make-swarm account."""
        account = resolve_account(
            AccountCredentials(username="alicia", api_key="abc123"), carina_config
        )

        assert isinstance(account, MakeSwarmAccount)
        assert account.api_key == "abc123"
        assert account.auth_endpoint == RACKSPACE_IDENTITY_ENDPOINT
        assert account.config is carina_config

    def test_public_account_custom_auth_endpoint(self):
        """Test the identity endpoint can be overridden for the public cloud."""
        account = resolve_account(
            AccountCredentials(
                username="alicia", api_key="abc123", auth_endpoint="https://identity.example.com"
            )
        )

        assert account.auth_endpoint == "https://identity.example.com"

    def test_private_account(self):
        """Test password credentials build a Magnum account."""
        account = resolve_account(
            AccountCredentials(
                username="alicia",
                password="ilovepuppies",
                auth_endpoint="https://keystone.example.com/v3",
                project="admin",
                domain="Default",
                region="RegionOne",
            )
        )

        assert isinstance(account, MagnumAccount)
        assert account.project == "admin"
        assert account.region == "RegionOne"

    def test_private_account_missing_auth_endpoint(self):
        """Test a private account needs an auth endpoint."""
        with pytest.raises(ConfigurationError, match="auth_endpoint"):
            resolve_account(AccountCredentials(username="alicia", password="p"))

    def test_missing_username(self):
        """Test the username is always required."""
        with pytest.raises(ConfigurationError, match="Missing public cloud credentials: username"):
            resolve_account(AccountCredentials(api_key="abc123"))

    def test_explicit_public_without_api_key(self):
        """Test an explicit public cloud still requires an API key."""
        with pytest.raises(ConfigurationError, match="api_key"):
            resolve_account(
                AccountCredentials(cloud=CloudType.PUBLIC, username="alicia", password="p")
            )
