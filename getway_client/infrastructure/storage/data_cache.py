"""
Time-limited cache for dashboard datasets.

Entries live in memory. Keys that name dashboard, geospatial or demographics
data are also written to a key-value storage under "scientist_cache_<key>",
so a restarted console starts warm. Cache storage problems are logged and
never fail the caller: the backend stays the source of truth.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Union

from getway_client.domains.errors import ApiError
from getway_client.infrastructure.storage.token_store import KeyValueStorage
from getway_client.utils.logger import get_logger

logger = get_logger("cache")

DEFAULT_TTL_MS = 5 * 60 * 1000
CLEANUP_INTERVAL_MS = 2 * 60 * 1000
DEFAULT_STALENESS_MS = 2 * 60 * 1000
STORAGE_PREFIX = "scientist_cache_"
PERSISTED_MARKERS = ("dashboard", "geospatial", "demographics")


def _now_ms() -> float:
    return time.time() * 1000


def _size_of(data: Any) -> int:
    return len(json.dumps(data, default=str))


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    expiry: float
    access_count: int = 0
    last_accessed: float = 0.0
    size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CacheEntry":
        return cls(
            data=raw["data"],
            timestamp=float(raw["timestamp"]),
            expiry=float(raw["expiry"]),
            access_count=int(raw.get("access_count", 0)),
            last_accessed=float(raw.get("last_accessed", raw["timestamp"])),
            size=int(raw.get("size") or _size_of(raw["data"])),
        )


@dataclass
class CacheHit:
    data: Any
    is_expired: bool
    age_ms: float
    access_count: int


class DataCache:
    """
    In-memory TTL cache with optional persistence.

    Expired entries are dropped on read, and at most every two minutes on
    write through `cleanup_expired`. Not thread-safe.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        self._storage = storage
        self._default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._last_cleanup = clock()
        self._load_persisted()

    @staticmethod
    def generate_key(kind: str, params: Optional[dict[str, Any]] = None) -> str:
        """Key for `kind` and its query params, e.g. 'analytics_{"startDate":"2024-01-01"}'."""
        suffix = json.dumps(params, separators=(",", ":"), default=str) if params else ""
        return f"{kind}_{suffix}"

    @staticmethod
    def should_persist(key: str) -> bool:
        return any(marker in key for marker in PERSISTED_MARKERS)

    def set(self, key: str, data: Any, ttl_ms: Optional[int] = None) -> None:
        now = self._clock()
        ttl = self._default_ttl_ms if ttl_ms is None else ttl_ms
        entry = CacheEntry(
            data=data,
            timestamp=now,
            expiry=now + ttl,
            last_accessed=now,
            size=_size_of(data),
        )
        self._entries[key] = entry
        if self.should_persist(key):
            self._persist(key, entry)
        if now - self._last_cleanup >= CLEANUP_INTERVAL_MS:
            self.cleanup_expired()

    def get(self, key: str, allow_expired: bool = False, update_access: bool = True) -> Optional[CacheHit]:
        """
        Look up `key`, falling back to persisted storage.

        Returns:
            A `CacheHit`, or None when absent. An expired entry is deleted and
            reported as absent unless `allow_expired` is set.
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = self._read_persisted(key)
            if entry is None:
                return None
            self._entries[key] = entry

        now = self._clock()
        expired = now > entry.expiry
        if expired and not allow_expired:
            self.delete(key)
            return None
        if update_access:
            entry.access_count += 1
            entry.last_accessed = now
        return CacheHit(
            data=entry.data,
            is_expired=expired,
            age_ms=now - entry.timestamp,
            access_count=entry.access_count,
        )

    def has(self, key: str) -> bool:
        hit = self.get(key, update_access=False)
        return hit is not None and not hit.is_expired

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        if self._storage is not None:
            try:
                self._storage.remove_item(STORAGE_PREFIX + key)
            except Exception as e:
                logger.warning("Cache storage remove failed for %s: %s", key, e)

    def clear(self) -> None:
        self._entries.clear()
        if self._storage is None:
            return
        try:
            self._storage.multi_remove([k for k in self._storage.keys() if k.startswith(STORAGE_PREFIX)])
        except Exception as e:
            logger.warning("Cache storage clear failed: %s", e)

    def keys(self) -> list[str]:
        return list(self._entries)

    def get_stats(self) -> dict[str, Any]:
        now = self._clock()
        total = len(self._entries)
        total_size = sum(e.size for e in self._entries.values())
        active = sum(1 for e in self._entries.values() if now <= e.expiry)
        return {
            "total_entries": total,
            "active_entries": active,
            "expired_entries": total - active,
            "total_size": total_size,
            "average_size": total_size / total if total else 0,
        }

    def invalidate_pattern(self, pattern: Union[str, re.Pattern]) -> int:
        """Delete every key matching the regular expression; returns how many went."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        doomed = [k for k in self._entries if regex.search(k)]
        for key in doomed:
            self.delete(key)
        return len(doomed)

    def update_ttl(self, key: str, ttl_ms: int) -> bool:
        """Restart `key`'s lifetime at `ttl_ms` from now. False if the key is not cached."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        entry.expiry = self._clock() + ttl_ms
        if self.should_persist(key):
            self._persist(key, entry)
        return True

    def cleanup_expired(self) -> int:
        now = self._clock()
        self._last_cleanup = now
        expired = [k for k, e in self._entries.items() if now > e.expiry]
        for key in expired:
            self.delete(key)
        if expired:
            logger.info("Cleaned up %d expired cache entries", len(expired))
        return len(expired)

    def preload_data(self, loaders: dict[str, Callable[[], Any]]) -> list[dict[str, Any]]:
        """
        Run the loader of every key that is not cached yet.

        Returns:
            One {"key", "success", "error"} result per loader that ran. An
            `ApiError` from a loader is recorded there; other errors propagate.
        """
        results = []
        for key, loader in loaders.items():
            if self.has(key):
                continue
            try:
                self.set(key, loader())
                results.append({"key": key, "success": True, "error": None})
            except ApiError as e:
                logger.warning("Failed to preload %s: %s", key, e.message)
                results.append({"key": key, "success": False, "error": e})
        return results

    def smart_refresh(
        self,
        loaders: dict[str, Callable[[], Any]],
        staleness_ms: int = DEFAULT_STALENESS_MS,
    ) -> list[dict[str, Any]]:
        """
        Reload keys that are missing or older than `staleness_ms`.

        Returns:
            One {"key", "refreshed", "error"} result per loader that ran.
        """
        results = []
        for key, loader in loaders.items():
            cached = self.get(key, update_access=False)
            if cached is not None and cached.age_ms <= staleness_ms:
                continue
            try:
                self.set(key, loader())
                results.append({"key": key, "refreshed": True, "error": None})
            except ApiError as e:
                logger.warning("Failed to refresh %s: %s", key, e.message)
                results.append({"key": key, "refreshed": False, "error": e})
        return results

    # --- persistence ---

    def _persist(self, key: str, entry: CacheEntry) -> None:
        if self._storage is None:
            return
        try:
            self._storage.set_item(STORAGE_PREFIX + key, json.dumps(entry.to_dict()))
        except Exception as e:
            logger.warning("Cache storage write failed for %s: %s", key, e)

    def _read_persisted(self, key: str) -> Optional[CacheEntry]:
        if self._storage is None:
            return None
        try:
            raw = self._storage.get_item(STORAGE_PREFIX + key)
            return CacheEntry.from_dict(json.loads(raw)) if raw else None
        except Exception as e:
            logger.warning("Cache storage read failed for %s: %s", key, e)
            return None

    def _load_persisted(self) -> None:
        if self._storage is None:
            return
        now = self._clock()
        try:
            stored = [k for k in self._storage.keys() if k.startswith(STORAGE_PREFIX)]
        except Exception as e:
            logger.warning("Cache storage scan failed: %s", e)
            return
        for storage_key in stored:
            key = storage_key[len(STORAGE_PREFIX):]
            entry = self._read_persisted(key)
            if entry is None:
                continue
            if now <= entry.expiry:
                self._entries[key] = entry
            else:
                self.delete(key)
