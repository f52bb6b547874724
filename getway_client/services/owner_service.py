"""Owner-only administration: scientist approval queue and organization stats."""

from __future__ import annotations

from typing import Any

from getway_client.infrastructure.api.api_client import ApiClient


class OwnerService:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def approve_scientist(self, scientist_id: str) -> dict[str, Any]:
        response = self._api.post(f"/owner/approve-scientist/{scientist_id}")
        return response.require_field("scientist", "Failed to approve scientist")

    def disapprove_scientist(self, scientist_id: str) -> dict[str, Any]:
        response = self._api.post(f"/owner/disapprove-scientist/{scientist_id}")
        return response.require_field("scientist", "Failed to disapprove scientist")

    def get_pending_scientists(self) -> list[dict[str, Any]]:
        response = self._api.get("/owner/pending-scientists")
        return response.require_field("scientists", "Failed to get pending scientists")

    def get_scientists(self) -> dict[str, Any]:
        """All scientists plus approved/pending/active counts."""
        response = self._api.get("/owner/scientists")
        return response.require_data("Failed to get scientists")

    def get_organization_scientists(self) -> dict[str, Any]:
        response = self._api.get("/users/organization-scientists")
        return response.require_data("Failed to get organization scientists")

    def get_stats(self) -> dict[str, Any]:
        response = self._api.get("/users/stats")
        return response.require_data("Failed to get user statistics")
