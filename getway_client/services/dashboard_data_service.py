"""Scientist dashboard datasets, served from `DataCache` when fresh."""

from __future__ import annotations

from typing import Any

from getway_client.infrastructure.storage.data_cache import DataCache
from getway_client.services.journey_service import JourneyService
from getway_client.utils.logger import get_logger

logger = get_logger()

SCIENTIST_DATA_KEY = "dashboard_scientist_data"


def analytics_key(start_date: str | None, end_date: str | None, user_id: str | None) -> str:
    params = {k: v for k, v in (("startDate", start_date), ("endDate", end_date), ("userId", user_id)) if v}
    return DataCache.generate_key("dashboard_analytics", params)


class DashboardDataService:
    def __init__(self, journeys: JourneyService, cache: DataCache) -> None:
        self._journeys = journeys
        self._cache = cache

    def get_scientist_data(self, force_refresh: bool = False) -> dict[str, Any]:
        """Anonymized journey dataset; fetched only when not cached or forced."""
        if not force_refresh:
            hit = self._cache.get(SCIENTIST_DATA_KEY)
            if hit is not None:
                logger.debug("Dashboard cache hit: %s", SCIENTIST_DATA_KEY)
                return hit.data
        data = self._journeys.get_scientist_data()
        self._cache.set(SCIENTIST_DATA_KEY, data)
        return data

    def get_analytics(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        user_id: str | None = None,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        key = analytics_key(start_date, end_date, user_id)
        if not force_refresh:
            hit = self._cache.get(key)
            if hit is not None:
                logger.debug("Dashboard cache hit: %s", key)
                return hit.data
        data = self._journeys.get_analytics(start_date, end_date, user_id)
        self._cache.set(key, data)
        return data

    def preload(self) -> list[dict[str, Any]]:
        """Warm the default datasets that are not cached yet."""
        return self._cache.preload_data(self._default_loaders())

    def refresh_stale(self, staleness_ms: int | None = None) -> list[dict[str, Any]]:
        if staleness_ms is None:
            return self._cache.smart_refresh(self._default_loaders())
        return self._cache.smart_refresh(self._default_loaders(), staleness_ms)

    def invalidate(self) -> int:
        """Drop every cached dashboard dataset, e.g. after recording a journey."""
        return self._cache.invalidate_pattern(r"^dashboard_")

    def _default_loaders(self) -> dict[str, Any]:
        return {
            SCIENTIST_DATA_KEY: self._journeys.get_scientist_data,
            analytics_key(None, None, None): self._journeys.get_analytics,
        }
