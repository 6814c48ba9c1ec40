"""
Provider adapter contract.

An adapter turns one external (or bundled) source into CourtRecords. `search_nearby`
never raises for network, quota, parse or timeout failures: it returns an empty record
list together with a single ProviderError.
"""
import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union

from loguru import logger

from courtfinder.config import PLACEHOLDER_IMAGE_URL, PROVIDER_TIMEOUT_SECONDS
from courtfinder.errors import ProviderError, ProviderErrorKind, ProviderRequestError, VenueParseError
from courtfinder.models import Coordinates, CourtRecord, Marker, ProviderName, Sport, UNKNOWN

RawVenue = TypeVar("RawVenue")


@dataclass
class ProviderResponse:
    provider: ProviderName
    records: List[CourtRecord]
    error: Optional[ProviderError] = None


def optional_float(value: Any) -> Optional[float]:
    try:
        if value is None or isinstance(value, bool):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def optional_int(value: Any) -> Optional[int]:
    number = optional_float(value)
    return int(number) if number is not None else None


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_coordinates(lat: Any, lng: Any) -> Union[Coordinates, Marker]:
    """
    Coordinates from loosely typed provider values.

    Missing values yield UNKNOWN; present but invalid values are a parse error.
    """
    if lat is None and lng is None:
        return UNKNOWN
    lat_f, lng_f = optional_float(lat), optional_float(lng)
    if lat_f is None or lng_f is None:
        raise VenueParseError(f"unusable coordinates: lat={lat!r} lng={lng!r}")
    try:
        return Coordinates(lat_f, lng_f)
    except ValueError as e:
        raise VenueParseError(str(e)) from e


def clamp_rating(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(0.0, min(float(value), 5.0))


def parse_items(
    provider: ProviderName,
    items: Iterable[Any],
    parse: Callable[[Any], RawVenue],
) -> List[RawVenue]:
    """Apply a parse function to every item, dropping the ones that fail individually."""
    parsed = []
    skipped = 0
    for item in items:
        try:
            parsed.append(parse(item))
        except VenueParseError as e:
            skipped += 1
            logger.debug(f"Skipping malformed {provider.value} item: {e}")
    if skipped:
        logger.debug(f"{provider.value}: dropped {skipped} malformed item(s), kept {len(parsed)}")
    return parsed


class ProviderAdapter(ABC):
    name: ProviderName
    # Live adapters call remote APIs; the bundled dataset is not live
    live: bool = True
    # When True, a missing credential is reported as a NOT_CONFIGURED ProviderError
    report_unconfigured: bool = False
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL

    def __init__(self, timeout_seconds: float = PROVIDER_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return True

    async def search_nearby(
        self,
        origin: Coordinates,
        radius_km: float,
        sport: Optional[Sport] = None,
        keyword: Optional[str] = None,
    ) -> ProviderResponse:
        """
        Query the provider around `origin`, bounded by this adapter's own deadline.

        Args:
            origin (Coordinates): Search center.
            radius_km (float): Search radius in kilometers.
            sport (Optional[Sport]): Sport to restrict to, None for all.
            keyword (Optional[str]): Extra free text for name/address matching.

        Returns:
            ProviderResponse: Records, or an empty list plus one ProviderError.
        """
        if not self.enabled:
            if self.report_unconfigured:
                logger.warning(f"⚠️ {self.name.value} is not configured, skipping")
                return self._failed(ProviderErrorKind.NOT_CONFIGURED, "API key not configured")
            logger.debug(f"{self.name.value} disabled (no credential), returning no results")
            return ProviderResponse(self.name, [])

        start = time.perf_counter()
        try:
            records = await asyncio.wait_for(
                self._search(origin, radius_km, sport, keyword),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ {self.name.value} timed out after {self.timeout_seconds:.0f}s")
            return self._failed(ProviderErrorKind.TIMEOUT, f"no response within {self.timeout_seconds}s")
        except ProviderRequestError as e:
            logger.warning(f"⚠️ {self.name.value} request failed ({e.kind.value}): {e}")
            return self._failed(e.kind, str(e))

        duration = time.perf_counter() - start
        logger.debug(f"✅ {self.name.value} returned {len(records)} record(s) in {duration:.2f}s")
        return ProviderResponse(self.name, records)

    def _failed(self, kind: ProviderErrorKind, message: str) -> ProviderResponse:
        return ProviderResponse(self.name, [], ProviderError(self.name, kind, message))

    @abstractmethod
    async def _search(
        self,
        origin: Coordinates,
        radius_km: float,
        sport: Optional[Sport],
        keyword: Optional[str],
    ) -> List[CourtRecord]:
        """Provider-specific lookup; may raise ProviderRequestError."""

    async def close(self):
        """Release network resources held by the adapter."""
