"""Scan orchestration: radius, cache lookup, nearby search, classification."""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import config
from .cache import CacheEntry, ResultCache, cache_key_for, make_entry, now_ms
from .classifier import ClassificationResult, Whitelist, classify
from .errors import (
    CredentialMissingError,
    LocationUnavailableError,
    ScanInProgressError,
    UpstreamError,
)
from .geo import parse_viewport_url, radius_for_zoom, round_half_up
from .http import HttpClient, RequestMetrics
from .places_client import PlacesClient, parse_places_response
from .storage import KeyValueStore, get_api_key
from .suppression import SuppressionStore

logger = logging.getLogger(__name__)


class ScanState(enum.Enum):
    IDLE = "idle"
    AWAITING_EXTERNAL_RESULT = "awaiting_external_result"


class CacheDecision(enum.Enum):
    USE_CACHE = "use_cache"
    FETCH_FRESH = "fetch_fresh"


@dataclass(frozen=True)
class ScanPlan:
    lat: float
    lng: float
    zoom: Optional[float]
    radius: int
    cache_key: str
    cached: Optional[CacheEntry] = None
    planned_at: int = 0

    @property
    def has_fresh_cache(self) -> bool:
        return self.cached is not None

    @property
    def cache_age_minutes(self) -> Optional[int]:
        if self.cached is None:
            return None
        return int(round_half_up(self.cached.age_ms(self.planned_at) / 60000))


@dataclass(frozen=True)
class ScanResult:
    results: List[ClassificationResult]
    from_cache: bool
    timestamp: int
    radius: int
    cache_key: str

    def visible(self, whitelist: Optional[Whitelist]) -> List[ClassificationResult]:
        """Results still worth showing once places whitelisted since the scan are hidden."""
        if whitelist is None:
            return list(self.results)
        return [r for r in self.results if not whitelist.is_whitelisted(r.place_id)]


Decider = Callable[[ScanPlan], CacheDecision]


class ScanOrchestrator:
    def __init__(
        self,
        store: KeyValueStore,
        suppression: Optional[SuppressionStore] = None,
        cache: Optional[ResultCache] = None,
        places_client: Optional[PlacesClient] = None,
        clock: Callable[[], int] = now_ms,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.store = store
        self.suppression = suppression if suppression is not None else SuppressionStore(store)
        self.cache = cache if cache is not None else ResultCache(store)
        self.places_client = places_client
        self.clock = clock
        self.metrics = metrics if metrics is not None else RequestMetrics()
        self.state = ScanState.IDLE

    def plan(self, lat: float, lng: float, zoom: Optional[float] = None) -> ScanPlan:
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise LocationUnavailableError('Could not parse "@lat,lng" from URL.')
        radius = radius_for_zoom(zoom)
        key = cache_key_for(lat, lng, radius)
        now = self.clock()
        cached = self.cache.find_fresh(key, now=now)
        if cached is not None:
            logger.info("Fresh cached results for %s (%s places)", key, len(cached.results))
        return ScanPlan(
            lat=lat,
            lng=lng,
            zoom=zoom,
            radius=radius,
            cache_key=key,
            cached=cached,
            planned_at=now,
        )

    def execute(self, plan: ScanPlan, decision: CacheDecision = CacheDecision.FETCH_FRESH) -> ScanResult:
        if decision is CacheDecision.USE_CACHE and plan.cached is not None:
            self.metrics.inc_cache_reuse()
            return ScanResult(
                results=list(plan.cached.results),
                from_cache=True,
                timestamp=plan.cached.timestamp,
                radius=plan.cached.radius,
                cache_key=plan.cached.cache_key,
            )
        return self._fetch(plan)

    def scan(self, lat: float, lng: float, zoom: Optional[float] = None, decide: Optional[Decider] = None) -> ScanResult:
        self._require_api_key()
        plan = self.plan(lat, lng, zoom)
        decision = CacheDecision.FETCH_FRESH
        if plan.has_fresh_cache and decide is not None:
            decision = decide(plan)
        return self.execute(plan, decision)

    def scan_url(self, url: str, decide: Optional[Decider] = None) -> ScanResult:
        self._require_api_key()
        viewport = parse_viewport_url(url)
        if viewport is None:
            raise LocationUnavailableError('Could not parse "@lat,lng" from URL.')
        return self.scan(viewport.lat, viewport.lng, viewport.zoom, decide=decide)

    def load_cached(self, index: int) -> Optional[ScanResult]:
        entry = self.cache.get(index)
        if entry is None:
            return None
        return ScanResult(
            results=list(entry.results),
            from_cache=True,
            timestamp=entry.timestamp,
            radius=entry.radius,
            cache_key=entry.cache_key,
        )

    def _client(self, api_key: str) -> PlacesClient:
        if self.places_client is not None:
            return self.places_client
        http_client = HttpClient(api_key, timeout=config.HTTP_TIMEOUT_SECONDS)
        return PlacesClient(http_client, metrics=self.metrics)

    def _require_api_key(self) -> str:
        api_key = get_api_key(self.store)
        if not api_key:
            raise CredentialMissingError()
        return api_key

    def _fetch(self, plan: ScanPlan) -> ScanResult:
        if self.state is not ScanState.IDLE:
            raise ScanInProgressError()
        api_key = self._require_api_key()

        excluded = self.suppression.blacklist_for_request()
        logger.info(
            "Nearby search at %s,%s radius=%sm excluded_types=%s",
            plan.lat,
            plan.lng,
            plan.radius,
            len(excluded),
        )
        client = self._client(api_key)
        self.state = ScanState.AWAITING_EXTERNAL_RESULT
        try:
            response = client.search_nearby(plan.lat, plan.lng, plan.radius, excluded_types=excluded)
        except UpstreamError:
            self.metrics.inc_upstream_error()
            raise
        finally:
            self.state = ScanState.IDLE

        records = parse_places_response(response)
        results = classify(records, self.suppression)
        entry = make_entry(plan.lat, plan.lng, plan.radius, results, timestamp=self.clock())
        self.cache.put(entry)
        logger.info("Scan returned %s places, %s flagged", len(records), len(results))
        return ScanResult(
            results=results,
            from_cache=False,
            timestamp=entry.timestamp,
            radius=entry.radius,
            cache_key=entry.cache_key,
        )
