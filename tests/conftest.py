"""Pytest configuration and shared fixtures."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from carina.accounts.magnum_account import MagnumAccount
from carina.accounts.makeswarm_account import MakeSwarmAccount
from carina.clients.session import Session
from carina.core.config import CacheConfig, CarinaConfig, PollingConfig


@pytest.fixture
def carina_config(tmp_path) -> CarinaConfig:
    """Configuration rooted in a temporary home with fast polling."""
    return CarinaConfig(
        home=str(tmp_path / "carina"),
        polling=PollingConfig(interval_seconds=10.0, timeout_seconds=None),
        cache=CacheConfig(enabled=True, path=str(tmp_path / "carina" / "cache.json")),
    )


@pytest.fixture
def magnum_account(carina_config: CarinaConfig) -> MagnumAccount:
    """Provide a private cloud account."""
    return MagnumAccount(
        auth_endpoint="https://keystone.example.com/v3",
        username="alicia",
        password="ilovepuppies",
        project="admin",
        domain="Default",
        region="RegionOne",
        config=carina_config,
    )


@pytest.fixture
def makeswarm_account(carina_config: CarinaConfig) -> MakeSwarmAccount:
    """Provide a public cloud account."""
    return MakeSwarmAccount(username="alicia", api_key="abc123", config=carina_config)


@pytest.fixture
def mock_session() -> MagicMock:
    """Mock authenticated session."""
    session = MagicMock(spec=Session)
    session.endpoint = "https://magnum.example.com/v1"
    session.token = "token-123"
    return session


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    headers: dict[str, str] | None = None,
    content: bytes | None = None,
    text: str = "",
) -> MagicMock:
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.reason = "Reason"
    response.text = text
    if json_body is not None:
        response.json.return_value = json_body
        response.content = content if content is not None else b"{...}"
    else:
        response.json.side_effect = ValueError("No JSON")
        response.content = content if content is not None else b""
    return response


@pytest.fixture
def response_factory():
    """Factory for mock requests.Response objects."""
    return make_response


# ==============================================================================
# Test Data Fixtures
# ==============================================================================


@pytest.fixture
def magnum_cluster_doc() -> dict[str, Any]:
    """Magnum cluster document."""
    return {
        "uuid": "5d12f6fd-a196-4bf0-ae4c-1f639a523a52",
        "name": "demo",
        "status": "CREATE_COMPLETE",
        "status_reason": "Stack CREATE completed successfully",
        "node_count": 2,
        "api_address": "https://172.24.4.6:6443",
        "cluster_template_id": "k8s-template",
    }


@pytest.fixture
def makeswarm_cluster_doc() -> dict[str, Any]:
    """make-swarm cluster document."""
    return {
        "cluster_name": "demo",
        "username": "alicia",
        "flavor": "container1-4G",
        "image": "carina-swarm",
        "nodes": 3,
        "status": "active",
        "autoscale": False,
    }
