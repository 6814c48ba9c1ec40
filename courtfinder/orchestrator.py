"""
One request/response cycle: resolve the origin, fan out to providers, merge duplicates,
rank, and apply the fallback policy when live providers come back empty.
"""
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from courtfinder.aggregation import aggregate
from courtfinder.config import (
    DEDUP_PROXIMITY_METERS,
    DEFAULT_MAX_RESULTS,
    DEFAULT_RADIUS_KM,
    FOURSQUARE_API_KEY,
    GOOGLE_PLACES_API_KEY,
)
from courtfinder.dedup import dedupe
from courtfinder.errors import LocationError, LocationErrorKind
from courtfinder.fallback import FallbackStrategy
from courtfinder.location import LocationService
from courtfinder.models import Coordinates, ProviderName, SearchQuery, SearchResult, SortKey, Sport
from courtfinder.providers import FoursquareAdapter, GooglePlacesAdapter, ProviderAdapter, StaticDatasetAdapter
from courtfinder.ranking import rank


class SearchState(str, Enum):
    IDLE = "idle"
    RESOLVING_LOCATION = "resolving_location"
    AGGREGATING = "aggregating"
    DEDUPLICATING = "deduplicating"
    RANKING = "ranking"
    DONE = "done"
    FAILED = "failed"


class SearchOrchestrator:
    """
    Composes location resolution, aggregation, de-duplication and ranking.

    Adapters are kept in priority order; the baseline (static) adapter should come
    first so its copy of a duplicated venue is the one kept.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        location_service: Optional[LocationService] = None,
        fallback: Optional[FallbackStrategy] = None,
        proximity_m: float = DEDUP_PROXIMITY_METERS,
    ):
        self.adapters = list(adapters)
        self.location_service = location_service
        self.fallback = fallback or FallbackStrategy()
        self.proximity_m = proximity_m
        # State of the most recent search
        self.state = SearchState.IDLE

        registered = {a.name for a in self.adapters}
        missing = [p.value for p in self.fallback.policy if self.fallback.is_mandatory(p) and p not in registered]
        if missing:
            raise ValueError(f"mandatory provider(s) without an adapter: {', '.join(missing)}")

    def adapter_for(self, provider: ProviderName) -> Optional[ProviderAdapter]:
        return next((a for a in self.adapters if a.name == provider), None)

    async def search(
        self,
        origin: Optional[Coordinates] = None,
        radius_km: float = DEFAULT_RADIUS_KM,
        sport: Optional[Sport] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        sort_key: SortKey = SortKey.DISTANCE,
        active_providers: Optional[Iterable[ProviderName]] = None,
        keyword: Optional[str] = None,
    ) -> SearchResult:
        """
        Run one search.

        Args:
            origin (Optional[Coordinates]): Search center; resolved through the LocationService when None.
            radius_km (float): Search radius in kilometers, must be positive.
            sport (Optional[Sport]): Restrict to one sport, None for all.
            max_results (int): Maximum number of records returned.
            sort_key (SortKey): distance, rating or price.
            active_providers (Optional[Iterable[ProviderName]]): Providers to query, all registered ones when None.
            keyword (Optional[str]): Extra text matched against venue names and addresses.

        Returns:
            SearchResult: Ranked records plus provider errors; an empty list means no matches.

        Raises:
            LocationError: No origin was given and none could be resolved.
            ValueError: radius_km or max_results is not positive.
        """
        if radius_km <= 0:
            raise ValueError(f"radius_km must be positive, got {radius_km}")
        if max_results <= 0:
            raise ValueError(f"max_results must be positive, got {max_results}")

        start = time.perf_counter()
        trace: List[SearchState] = [SearchState.IDLE]
        self.state = SearchState.IDLE

        def enter(state: SearchState):
            trace.append(state)
            self.state = state
            logger.debug(f"search state -> {state.value}")

        enter(SearchState.RESOLVING_LOCATION)
        try:
            origin = await self._resolve_origin(origin)
        except LocationError as e:
            enter(SearchState.FAILED)
            logger.error(f"📍 Could not resolve search origin ({e.kind.value}): {e.message}")
            raise

        providers = frozenset(active_providers) if active_providers is not None else frozenset(a.name for a in self.adapters)
        query = SearchQuery(
            origin=origin,
            radius_km=radius_km,
            sport=sport,
            max_results=max_results,
            sort_key=sort_key,
            active_providers=providers,
            keyword=keyword,
        )

        enter(SearchState.AGGREGATING)
        aggregated = await aggregate(query, self.adapters)
        used_fallback = await self._apply_fallback(query, aggregated)

        enter(SearchState.DEDUPLICATING)
        unique = dedupe(aggregated.records, self.proximity_m)
        if len(unique) < len(aggregated.records):
            logger.debug(f"Removed {len(aggregated.records) - len(unique)} duplicate record(s)")

        enter(SearchState.RANKING)
        ranked = rank(unique, query.sort_key, query.max_results, origin=query.origin)

        enter(SearchState.DONE)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"✅ Search done: {len(ranked.records)} record(s), "
            f"{len(aggregated.provider_errors)} provider error(s), {elapsed_ms:.0f} ms"
        )
        return SearchResult(
            records=ranked.records,
            origin=query.origin,
            distances_km=ranked.distances_km,
            contributions=aggregated.contributions,
            provider_errors=aggregated.provider_errors,
            elapsed_ms=elapsed_ms,
            state_trace=trace,
            used_fallback=used_fallback,
        )

    async def _resolve_origin(self, origin: Optional[Coordinates]) -> Coordinates:
        if origin is not None:
            return origin
        if self.location_service is None:
            raise LocationError(LocationErrorKind.UNSUPPORTED, "no origin given and no location service configured")
        location = await self.location_service.resolve()
        return location.coordinates

    async def _apply_fallback(self, query: SearchQuery, aggregated) -> bool:
        queried = [a.name for a in self.adapters if a.name in query.active_providers]
        trigger = self.fallback.needs_baseline(queried, aggregated.contributions)
        if trigger is None:
            return False
        baseline = self.adapter_for(self.fallback.baseline)
        if baseline is None or not baseline.enabled:
            return False

        logger.warning(f"🔄 Falling back to {baseline.name.value} ({trigger.value})")
        baseline_query = replace(query, active_providers=frozenset({baseline.name}))
        extra = await aggregate(baseline_query, [baseline])
        aggregated.records.extend(extra.records)
        aggregated.contributions.update(extra.contributions)
        aggregated.provider_errors.extend(extra.provider_errors)
        return True

    def capabilities(self) -> Dict[str, Any]:
        """Which providers are registered and configured, and how location can be resolved."""
        providers = {}
        for adapter in self.adapters:
            providers[adapter.name.value] = {
                "configured": adapter.enabled,
                "live": adapter.live,
                "role": self.fallback.role_of(adapter.name).value,
                "mandatory": self.fallback.is_mandatory(adapter.name),
            }
        service = self.location_service
        return {
            "providers": providers,
            "location": {
                "position_source": bool(service and service.source is not None),
                "geocoder": bool(service and service.geocoder is not None),
            },
            "sports": [s.value for s in Sport],
            "sort_keys": [k.value for k in SortKey],
        }

    async def close(self):
        for adapter in self.adapters:
            await adapter.close()
        if self.location_service is not None:
            await self.location_service.close()


def build_default_orchestrator(
    location_service: Optional[LocationService] = None,
    google_api_key: Optional[str] = GOOGLE_PLACES_API_KEY,
    foursquare_api_key: Optional[str] = FOURSQUARE_API_KEY,
) -> SearchOrchestrator:
    """Orchestrator with every provider, in priority order, configured from the environment."""
    adapters = [
        StaticDatasetAdapter(),
        GooglePlacesAdapter(api_key=google_api_key),
        FoursquareAdapter(api_key=foursquare_api_key),
    ]
    return SearchOrchestrator(adapters, location_service=location_service)
