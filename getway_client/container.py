"""
Composition root: builds the configuration once and wires every collaborator
by injection. UI code receives a `Services` instance instead of importing
module-level singletons.
"""

from __future__ import annotations

from dataclasses import dataclass

from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.infrastructure.storage.backends import FileStorage
from getway_client.infrastructure.storage.data_cache import DataCache
from getway_client.infrastructure.storage.token_store import KeyValueStorage, TokenStore
from getway_client.services.auth_service import AuthService
from getway_client.services.dashboard_data_service import DashboardDataService
from getway_client.services.journey_service import JourneyService
from getway_client.services.owner_service import OwnerService
from getway_client.services.posts_service import PostsService
from getway_client.services.user_service import UserService
from getway_client.utils.config import ClientConfig, log_config, project_root, validate_config


@dataclass
class Services:
    config: ClientConfig
    tokens: TokenStore
    api: ApiClient
    auth: AuthService
    posts: PostsService
    journeys: JourneyService
    owner: OwnerService
    users: UserService
    cache: DataCache
    dashboard: DashboardDataService


def build_services(
    config: ClientConfig | None = None,
    storage: KeyValueStorage | None = None,
) -> Services:
    """
    Wire the client stack.

    Args:
        config: Defaults to `ClientConfig.from_env()`.
        storage: Defaults to a `FileStorage` at `config.storage_path`.
    """
    config = config or ClientConfig.from_env()
    validate_config(config)
    log_config(config)

    if storage is None:
        storage = FileStorage(config.storage_path or project_root() / "data" / "session.json")
    tokens = TokenStore(storage, config)
    api = ApiClient(config, tokens)
    journeys = JourneyService(api)
    cache = DataCache(storage, default_ttl_ms=config.cache_ttl_ms)
    return Services(
        config=config,
        tokens=tokens,
        api=api,
        auth=AuthService(api, tokens),
        posts=PostsService(api),
        journeys=journeys,
        owner=OwnerService(api),
        users=UserService(api, tokens),
        cache=cache,
        dashboard=DashboardDataService(journeys, cache),
    )
