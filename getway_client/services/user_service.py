"""Self-service account endpoints (/users/me)."""

from __future__ import annotations

from typing import Any

from getway_client.domains.errors import GenericApiError
from getway_client.domains.models import UserRecord
from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.infrastructure.storage.token_store import TokenStore
from getway_client.utils.logger import get_logger

logger = get_logger()


class UserService:
    def __init__(self, api: ApiClient, token_store: TokenStore) -> None:
        self._api = api
        self._tokens = token_store

    def get_me(self) -> dict[str, Any]:
        response = self._api.get("/users/me")
        return response.require_field("user", "Failed to load account")

    def update_me(self, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Apply profile changes. When the response carries the updated user it
        replaces the cached one; otherwise the cache is left alone.

        Returns:
            The updated user, or the response data when it has none.

        Raises:
            GenericApiError: Failure envelope, or a user record that cannot be parsed.
        """
        response = self._api.put("/users/me", updates)
        data = response.require_data("Failed to update account")
        user = data.get("user") if isinstance(data, dict) else None
        if user is None:
            logger.info("Account updated; response carried no user, cached user kept")
            return data
        try:
            record = UserRecord.from_dict(user)
        except (TypeError, ValueError) as e:
            raise GenericApiError("Unexpected response from server") from e
        self._tokens.set_user(record)
        return user
