"""
Journey (trip log) endpoints.

The journey routes answer with `{success: bool, message, data}` rather than
the `{status, ...}` envelope, so these methods read `ApiResponse.raw`.
"""

from __future__ import annotations

from typing import Any

from getway_client.domains.errors import GenericApiError
from getway_client.domains.models import ApiResponse
from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.utils.logger import get_logger

logger = get_logger()


def _legacy_data(response: ApiResponse, fallback: str) -> Any:
    body = response.raw
    if body.get("success") is False or response.status == "error":
        raise GenericApiError(response.message or fallback)
    if response.data is None:
        raise GenericApiError(response.message or fallback)
    return response.data


class JourneyService:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def get_user_journeys(
        self,
        page: int | None = None,
        limit: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict[str, Any]:
        """
        The signed-in user's journey history.

        Returns:
            Dict with "journeys", "totalPages", "currentPage", "total".

        Raises:
            GenericApiError: The body reports failure or matches none of the
                known shapes.
        """
        params = {"page": page, "limit": limit, "startDate": start_date, "endDate": end_date}
        response = self._api.get("/journeys/my-journeys", params=params)
        body = response.raw
        data = body.get("data")

        if body.get("success") is False or response.status == "error":
            raise GenericApiError(response.message or "Failed to load journeys")
        if body.get("success") and isinstance(data, dict):
            logger.info("Loaded %d journeys", len(data.get("journeys") or []))
            return data
        if "journeys" in body:
            return body
        if isinstance(data, dict) and "journeys" in data:
            return data
        logger.error("Unexpected journeys response keys: %s", sorted(body))
        raise GenericApiError("Invalid response format from server")

    def create_journey(self, journey: dict[str, Any]) -> dict[str, Any]:
        response = self._api.post("/journeys", journey)
        return _legacy_data(response, "Failed to record journey")

    def delete_journey(self, journey_id: str) -> dict[str, Any]:
        response = self._api.delete(f"/journeys/{journey_id}")
        body = response.raw
        if body.get("success") is False:
            raise GenericApiError(response.message or "Failed to delete journey")
        return response.data if isinstance(response.data, dict) else {"message": response.message}

    def get_scientist_data(self) -> dict[str, Any]:
        """
        Anonymized journey dataset for the analytics dashboard.

        Returns:
            The whole body: {"success", "data": [...], "metadata": {...}}.
        """
        response = self._api.get("/journeys/scientist-data", include_auth=False)
        _legacy_data(response, "Failed to fetch journey data")
        return response.raw

    def get_analytics(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        params = {"startDate": start_date, "endDate": end_date, "userId": user_id}
        response = self._api.get("/journeys/analytics", params=params)
        _legacy_data(response, "Failed to fetch analytics data")
        return response.raw
