"""Bounded, persisted cache of past scan results keyed by rounded location."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .classifier import ClassificationResult
from .geo import format_coord, round_half_up
from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def cache_key_for(lat: float, lng: float, radius: int) -> str:
    digits = config.CACHE_KEY_DECIMALS
    return "{lat},{lng},{radius}".format(
        lat=format_coord(round_half_up(lat, digits)),
        lng=format_coord(round_half_up(lng, digits)),
        radius=int(radius),
    )


@dataclass(frozen=True)
class CacheEntry:
    timestamp: int
    lat: float
    lng: float
    radius: int
    cache_key: str
    results: Tuple[ClassificationResult, ...]

    def age_ms(self, now: int) -> int:
        return now - self.timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "lat": self.lat,
            "lng": self.lng,
            "radius": self.radius,
            "cacheKey": self.cache_key,
            "results": [r.to_dict() for r in self.results],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CacheEntry"]:
        if not isinstance(data, dict):
            return None
        try:
            timestamp = int(data["timestamp"])
            lat = float(data["lat"])
            lng = float(data["lng"])
            radius = int(data["radius"])
        except (KeyError, TypeError, ValueError):
            return None
        cache_key = data.get("cacheKey")
        if not isinstance(cache_key, str):
            cache_key = cache_key_for(lat, lng, radius)
        results: List[ClassificationResult] = []
        for raw in data.get("results") or []:
            if not isinstance(raw, dict):
                continue
            result = ClassificationResult.from_dict(raw)
            if result is not None:
                results.append(result)
        return cls(
            timestamp=timestamp,
            lat=lat,
            lng=lng,
            radius=radius,
            cache_key=cache_key,
            results=tuple(results),
        )


def make_entry(
    lat: float,
    lng: float,
    radius: int,
    results: List[ClassificationResult],
    timestamp: Optional[int] = None,
) -> CacheEntry:
    return CacheEntry(
        timestamp=now_ms() if timestamp is None else int(timestamp),
        lat=lat,
        lng=lng,
        radius=int(radius),
        cache_key=cache_key_for(lat, lng, radius),
        results=tuple(results),
    )


def is_fresh(entry: CacheEntry, now: int, max_age_ms: Optional[int] = None) -> bool:
    if max_age_ms is None:
        max_age_ms = config.CACHE_MAX_AGE_MS
    return entry.age_ms(now) < max_age_ms


class ResultCache:
    """Scan results, oldest insertion first.

    Entries are never expired here; freshness is judged by the caller at
    lookup time through ``is_fresh``.
    """

    def __init__(self, store: KeyValueStore, max_entries: Optional[int] = None) -> None:
        self.store = store
        self.max_entries = max_entries if max_entries is not None else config.CACHE_MAX_ENTRIES
        self._entries: List[CacheEntry] = []
        for raw in load_json(store, config.STORAGE_CACHE, list) or []:
            entry = CacheEntry.from_dict(raw)
            if entry is None:
                logger.warning("Dropping malformed cache entry")
                continue
            self._entries.append(entry)
        self._entries = self._entries[-self.max_entries :]

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[CacheEntry]:
        return list(self._entries)

    def get(self, index: int) -> Optional[CacheEntry]:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def find(self, key: str) -> Optional[CacheEntry]:
        for entry in self._entries:
            if entry.cache_key == key:
                return entry
        return None

    def find_fresh(self, key: str, now: Optional[int] = None) -> Optional[CacheEntry]:
        entry = self.find(key)
        if entry is None:
            return None
        if not is_fresh(entry, now_ms() if now is None else now):
            return None
        return entry

    def put(self, entry: CacheEntry) -> None:
        entries = [e for e in self._entries if e.cache_key != entry.cache_key]
        entries.append(entry)
        if len(entries) > self.max_entries:
            entries = entries[-self.max_entries :]
        self._entries = entries
        self._persist()

    def clear(self) -> None:
        self._entries = []
        self.store.remove(config.STORAGE_CACHE)
        logger.info("Cleared result cache")

    def _persist(self) -> None:
        save_json(self.store, config.STORAGE_CACHE, [e.to_dict() for e in self._entries])
