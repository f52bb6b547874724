"""
Shared fixtures: an in-memory session store and a client pointed at a fake backend.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.infrastructure.storage.backends import MemoryStorage
from getway_client.infrastructure.storage.token_store import TokenStore
from getway_client.utils.config import ClientConfig

BASE_URL = "http://api.test/api"
REQUEST_TARGET = "getway_client.infrastructure.api.api_client.requests.request"


def make_response(status_code: int = 200, body: Any = None, reason: str = "OK") -> MagicMock:
    """Fake requests.Response; body=None means the payload is not JSON."""
    r = MagicMock()
    r.status_code = status_code
    r.reason = reason
    if body is None:
        r.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        r.json.return_value = body
    return r


def user_dict(**overrides: Any) -> dict[str, Any]:
    u = {
        "id": "1",
        "name": "Asha Rao",
        "email": "a@b.com",
        "role": "customer",
        "isApproved": True,
    }
    u.update(overrides)
    return u


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_base_url=BASE_URL,
        api_timeout_ms=2500,
        token_key="test_token",
        user_key="test_user",
        refresh_token_key="test_refresh",
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def tokens(storage: MemoryStorage, config: ClientConfig) -> TokenStore:
    return TokenStore(storage, config)


@pytest.fixture
def api(config: ClientConfig, tokens: TokenStore) -> ApiClient:
    return ApiClient(config, tokens)
