"""
Session persistence: bearer token, refresh token and cached user profile.
"""

from __future__ import annotations

import json
from typing import Protocol, Iterable

from getway_client.domains.models import UserRecord
from getway_client.utils.config import ClientConfig
from getway_client.utils.logger import get_logger

logger = get_logger()


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def multi_remove(self, keys: Iterable[str]) -> None: ...

    def keys(self) -> list[str]: ...


class TokenStore:
    """
    Reads and writes session artifacts under the configured storage keys.

    Storage errors propagate to the caller: a failed write must not leave the
    UI believing it holds a session it does not.
    """

    def __init__(self, storage: KeyValueStorage, config: ClientConfig) -> None:
        self._storage = storage
        self._token_key = config.token_key
        self._user_key = config.user_key
        self._refresh_key = config.refresh_token_key

    def set_token(self, token: str) -> None:
        self._storage.set_item(self._token_key, token)

    def get_token(self) -> str | None:
        return self._storage.get_item(self._token_key)

    def remove_token(self) -> None:
        self._storage.remove_item(self._token_key)

    def set_refresh_token(self, token: str) -> None:
        self._storage.set_item(self._refresh_key, token)

    def get_refresh_token(self) -> str | None:
        return self._storage.get_item(self._refresh_key)

    def set_user(self, user: UserRecord) -> None:
        self._storage.set_item(self._user_key, json.dumps(user.to_dict(), ensure_ascii=False))

    def get_user(self) -> UserRecord | None:
        raw = self._storage.get_item(self._user_key)
        if not raw:
            return None
        return UserRecord.from_dict(json.loads(raw))

    def remove_user(self) -> None:
        self._storage.remove_item(self._user_key)

    def clear_all(self) -> None:
        """Remove token, user and refresh token in one call. Safe to repeat."""
        self._storage.multi_remove([self._token_key, self._user_key, self._refresh_key])
        logger.info("Local session cleared")
