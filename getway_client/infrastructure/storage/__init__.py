"""Local persistence: key-value backends, the token store and the dashboard data cache."""

from getway_client.infrastructure.storage.backends import FileStorage, MemoryStorage
from getway_client.infrastructure.storage.data_cache import DataCache
from getway_client.infrastructure.storage.token_store import KeyValueStorage, TokenStore

__all__ = ["DataCache", "FileStorage", "KeyValueStorage", "MemoryStorage", "TokenStore"]
