"""
Concurrent fan-out of one SearchQuery to every active provider adapter.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from loguru import logger

from courtfinder.errors import ProviderError, ProviderErrorKind
from courtfinder.models import CourtRecord, ProviderName, SearchQuery
from courtfinder.providers.base import ProviderAdapter, ProviderResponse


@dataclass
class AggregationResult:
    records: List[CourtRecord] = field(default_factory=list)
    provider_errors: List[ProviderError] = field(default_factory=list)
    contributions: Dict[ProviderName, int] = field(default_factory=dict)


def active_adapters(query: SearchQuery, adapters: Sequence[ProviderAdapter]) -> List[ProviderAdapter]:
    return [a for a in adapters if a.name in query.active_providers]


async def aggregate(query: SearchQuery, adapters: Sequence[ProviderAdapter]) -> AggregationResult:
    """
    Query all active adapters concurrently and wait for every one of them to settle.

    Args:
        query (SearchQuery): Search parameters; `active_providers` selects the adapters.
        adapters (Sequence[ProviderAdapter]): Adapters in priority order (static first).

    Returns:
        AggregationResult: Records concatenated in adapter order, one ProviderError per
        failed provider, and the raw record count contributed by each provider.
    """
    selected = active_adapters(query, adapters)
    start = time.perf_counter()

    responses = await asyncio.gather(
        *[a.search_nearby(query.origin, query.radius_km, query.sport, query.keyword) for a in selected],
        return_exceptions=True,
    )

    result = AggregationResult()
    for adapter, response in zip(selected, responses):
        if isinstance(response, Exception):
            # Adapters convert known failures themselves; anything else is unexpected
            logger.error(f"Unexpected error from {adapter.name.value}: {response!r}")
            response = ProviderResponse(
                adapter.name,
                [],
                ProviderError(adapter.name, ProviderErrorKind.NETWORK_ERROR, str(response) or type(response).__name__),
            )
        result.records.extend(response.records)
        result.contributions[adapter.name] = len(response.records)
        if response.error is not None:
            result.provider_errors.append(response.error)

    duration = time.perf_counter() - start
    summary = ", ".join(f"{name.value}={count}" for name, count in result.contributions.items())
    logger.info(f"Aggregated {len(result.records)} record(s) from {len(selected)} provider(s) in {duration:.2f}s ({summary})")
    return result
