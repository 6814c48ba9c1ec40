"""
Caller location resolution with a TTL cache and best-effort reverse geocoding.
"""
import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from loguru import logger

from courtfinder.clients import GooglePlacesClient, IpGeolocationClient
from courtfinder.config import LOCATION_CACHE_TTL_SECONDS
from courtfinder.errors import LocationError, LocationErrorKind, ProviderErrorKind, ProviderRequestError
from courtfinder.models import Coordinates, UserLocation

DEFAULT_RESOLVE_TIMEOUT_SECONDS = 15.0


class LocationCache:
    """
    Single-entry cache for the resolved position.

    Writes are last-writer-wins; two callers refreshing after expiry both write and
    the later one is kept.
    """

    def __init__(self, ttl_seconds: float = LOCATION_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[Tuple[float, UserLocation]] = None

    def get(self) -> Optional[UserLocation]:
        if self._entry is None:
            return None
        stored_at, location = self._entry
        if self._clock() - stored_at < self.ttl_seconds:
            return location
        self._entry = None
        return None

    def set(self, location: UserLocation) -> None:
        self._entry = (self._clock(), location)

    def invalidate(self) -> None:
        self._entry = None


def _location_error_for(exc: ProviderRequestError) -> LocationError:
    if exc.kind == ProviderErrorKind.TIMEOUT:
        return LocationError(LocationErrorKind.TIMEOUT, str(exc))
    if exc.kind == ProviderErrorKind.QUOTA_EXCEEDED:
        return LocationError(LocationErrorKind.PERMISSION_DENIED, str(exc))
    return LocationError(LocationErrorKind.POSITION_UNAVAILABLE, str(exc))


def _coordinates_from(payload: Dict[str, Any], lat_keys: Iterable[str], lng_keys: Iterable[str]) -> Coordinates:
    lat = next((payload[k] for k in lat_keys if payload.get(k) is not None), None)
    lng = next((payload[k] for k in lng_keys if payload.get(k) is not None), None)
    try:
        return Coordinates(float(lat), float(lng))
    except (TypeError, ValueError) as e:
        raise LocationError(LocationErrorKind.POSITION_UNAVAILABLE, f"no usable coordinates: {e}") from e


class PositionSource(ABC):
    """Something that can report where the caller is."""

    @abstractmethod
    async def locate(self) -> UserLocation:
        """Return the current position or raise LocationError."""

    async def close(self):
        pass


class FixedPositionSource(PositionSource):
    """Position reported by the hosting application (e.g. a device fix sent with the request)."""

    def __init__(self, coordinates: Coordinates, accuracy_m: Optional[float] = None):
        self.coordinates = coordinates
        self.accuracy_m = accuracy_m

    async def locate(self) -> UserLocation:
        return UserLocation(coordinates=self.coordinates, accuracy_m=self.accuracy_m)


class IpGeolocationSource(PositionSource):
    """Approximate position from the caller's public IP address."""

    def __init__(self, client: Optional[IpGeolocationClient] = None):
        self.client = client or IpGeolocationClient()

    async def locate(self) -> UserLocation:
        try:
            payload = await self.client.lookup()
        except ProviderRequestError as e:
            raise _location_error_for(e) from e
        if payload.get("error"):
            raise LocationError(LocationErrorKind.POSITION_UNAVAILABLE, str(payload.get("reason") or payload["error"]))
        coords = _coordinates_from(payload, ("latitude", "lat"), ("longitude", "lon", "lng"))
        return UserLocation(
            coordinates=coords,
            city=payload.get("city") or None,
            country=payload.get("country_name") or payload.get("country") or None,
        )

    async def close(self):
        await self.client.close()


def parse_address_components(components: Iterable[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    city = None
    country = None
    for component in components or []:
        types = set(component.get("types", []))
        if "locality" in types:
            city = component.get("long_name")
        if "country" in types:
            country = component.get("long_name")
    return city, country


class LocationService:
    """
    Resolves the caller's coordinates, caching them for LOCATION_CACHE_TTL_SECONDS.

    Only coordinates are required for a search; the address/city/country fields are
    filled by reverse geocoding when a geocoder is configured and reachable.
    """

    def __init__(
        self,
        source: Optional[PositionSource] = None,
        geocoder: Optional[GooglePlacesClient] = None,
        cache: Optional[LocationCache] = None,
        timeout_seconds: float = DEFAULT_RESOLVE_TIMEOUT_SECONDS,
    ):
        self.source = source
        self.geocoder = geocoder
        self.cache = cache or LocationCache()
        self.timeout_seconds = timeout_seconds

    async def resolve(self, use_cache: bool = True) -> UserLocation:
        if use_cache:
            cached = self.cache.get()
            if cached is not None:
                logger.debug("🔄 Using cached location")
                return cached

        if self.source is None:
            raise LocationError(LocationErrorKind.UNSUPPORTED, "no position source configured")

        logger.debug("📍 Resolving fresh location")
        try:
            location = await asyncio.wait_for(self.source.locate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise LocationError(LocationErrorKind.TIMEOUT, "location request timed out") from e

        await self._reverse_geocode(location)
        location.timestamp = time.time()

        if use_cache:
            self.cache.set(location)
        return location

    async def _reverse_geocode(self, location: UserLocation) -> None:
        if self.geocoder is None:
            return
        coords = location.coordinates
        try:
            results = await asyncio.wait_for(
                self.geocoder.geocode(latlng=f"{coords.lat},{coords.lng}"),
                timeout=self.timeout_seconds,
            )
            if not results:
                raise LookupError("no address found for coordinates")
            first = results[0]
            city, country = parse_address_components(first.get("address_components", []))
            location.address = first.get("formatted_address") or location.address
            location.city = city or location.city
            location.country = country or location.country
        except Exception as e:
            logger.warning(f"⚠️ Reverse geocoding failed for ({coords.lat}, {coords.lng}): {e}")

    async def geocode(self, text: str) -> Coordinates:
        """
        Forward-geocode a free-text place such as "Durham, NC".

        Raises:
            LocationError: UNSUPPORTED without a geocoder, POSITION_UNAVAILABLE when nothing matches.
        """
        if self.geocoder is None:
            raise LocationError(LocationErrorKind.UNSUPPORTED, "no geocoder configured")
        try:
            results = await asyncio.wait_for(self.geocoder.geocode(address=text), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise LocationError(LocationErrorKind.TIMEOUT, f"geocoding '{text}' timed out") from e
        except ProviderRequestError as e:
            raise _location_error_for(e) from e
        if not results:
            raise LocationError(LocationErrorKind.POSITION_UNAVAILABLE, f"no match for '{text}'")
        location = (results[0].get("geometry") or {}).get("location") or {}
        return _coordinates_from(location, ("lat",), ("lng",))

    async def close(self):
        if self.source is not None:
            await self.source.close()
        if self.geocoder is not None:
            await self.geocoder.close()
