"""
Google Places adapter.

Nearby Search accepts a single place type per request, so one call is issued per type
relevant to the requested sport; the calls run concurrently and the merged places are
de-duplicated by place_id before normalization.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from courtfinder.classifier import classify
from courtfinder.clients import GooglePlacesClient
from courtfinder.config import GOOGLE_DETAILS_LIMIT, GOOGLE_FETCH_DETAILS, GOOGLE_PLACES_API_KEY
from courtfinder.errors import ProviderErrorKind, ProviderRequestError, VenueParseError
from courtfinder.models import UNKNOWN, Coordinates, CourtRecord, Known, Marker, ProviderName, Sport
from courtfinder.providers.base import (
    ProviderAdapter,
    clamp_rating,
    optional_float,
    optional_int,
    optional_str,
    parse_coordinates,
    parse_items,
)

PRICE_LEVEL_USD = (15, 25, 45, 65, 85)
DEFAULT_PRICE_USD = 25

ALL_PLACE_TYPES = (
    "tennis_court", "basketball_court", "sports_complex", "recreation_center",
    "sports_club", "gym", "country_club", "park",
)
SPORT_PLACE_TYPES: Dict[Optional[Sport], Tuple[str, ...]] = {
    Sport.TENNIS: ("tennis_court", "country_club", "recreation_center", "sports_club"),
    Sport.BASKETBALL: ("basketball_court", "recreation_center", "sports_club", "gym", "park"),
    Sport.PICKLEBALL: ("tennis_court", "sports_complex", "recreation_center", "sports_club", "park"),
    Sport.VOLLEYBALL: ("sports_complex", "recreation_center", "park", "gym"),
    Sport.MULTI_SPORT: ("sports_complex", "recreation_center", "sports_club", "gym", "country_club"),
    None: ALL_PLACE_TYPES,
}
SPORT_KEYWORDS: Dict[Optional[Sport], Tuple[str, ...]] = {
    Sport.TENNIS: ("tennis", "racquet", "court"),
    Sport.BASKETBALL: ("basketball", "court", "hoop"),
    Sport.PICKLEBALL: ("pickleball", "paddle", "court"),
    Sport.VOLLEYBALL: ("volleyball", "court", "beach"),
    Sport.MULTI_SPORT: ("sports", "athletic", "recreation"),
    None: ("tennis", "basketball", "pickleball", "sports", "court", "recreation"),
}


@dataclass
class GooglePlace:
    """Nearby Search result after validation."""
    place_id: str
    name: str
    vicinity: str
    coordinates: Union[Coordinates, Marker]
    types: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = None
    open_now: Optional[bool] = None
    photo_reference: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


def parse_google_place(raw: Any) -> GooglePlace:
    """Validate one Nearby Search item; raises VenueParseError when unusable."""
    if not isinstance(raw, dict):
        raise VenueParseError(f"expected object, got {type(raw).__name__}")
    place_id = optional_str(raw.get("place_id"))
    name = optional_str(raw.get("name"))
    if not place_id or not name:
        raise VenueParseError("place without place_id or name")

    geometry = raw.get("geometry")
    location = geometry.get("location") if isinstance(geometry, dict) else None
    if isinstance(location, dict):
        coordinates = parse_coordinates(location.get("lat"), location.get("lng"))
    else:
        coordinates = UNKNOWN

    types = raw.get("types") if isinstance(raw.get("types"), list) else []
    hours = raw.get("opening_hours") if isinstance(raw.get("opening_hours"), dict) else {}
    open_now = hours.get("open_now") if isinstance(hours.get("open_now"), bool) else None
    photos = raw.get("photos") if isinstance(raw.get("photos"), list) else []
    photo_reference = None
    if photos and isinstance(photos[0], dict):
        photo_reference = optional_str(photos[0].get("photo_reference"))
    price_level = raw.get("price_level")

    return GooglePlace(
        place_id=place_id,
        name=name,
        vicinity=optional_str(raw.get("vicinity")) or optional_str(raw.get("formatted_address")) or "",
        coordinates=coordinates,
        types=[str(t) for t in types],
        rating=optional_float(raw.get("rating")),
        user_ratings_total=optional_int(raw.get("user_ratings_total")),
        price_level=price_level if isinstance(price_level, int) and not isinstance(price_level, bool) else None,
        open_now=open_now,
        photo_reference=photo_reference,
    )


def price_for_level(price_level: Optional[int]) -> int:
    if price_level is not None and 0 <= price_level < len(PRICE_LEVEL_USD):
        return PRICE_LEVEL_USD[price_level]
    return DEFAULT_PRICE_USD


def amenities_for_types(types: List[str]) -> frozenset:
    amenities = {"parking", "restrooms"}
    if "gym" in types or "sports_club" in types:
        amenities |= {"fitness_center", "locker_rooms"}
    if "country_club" in types:
        amenities |= {"pro_shop", "dining", "lessons"}
    if "recreation_center" in types:
        amenities |= {"community_programs", "affordable"}
    return frozenset(amenities)


def matches_sport_keywords(place: GooglePlace, sport: Optional[Sport]) -> bool:
    if sport is None:
        return True
    text = f"{place.name} {place.vicinity}".lower()
    return any(k in text for k in SPORT_KEYWORDS[sport])


class GooglePlacesAdapter(ProviderAdapter):
    name = ProviderName.GOOGLE_PLACES
    report_unconfigured = True

    def __init__(
        self,
        api_key: Optional[str] = GOOGLE_PLACES_API_KEY,
        client: Optional[GooglePlacesClient] = None,
        fetch_details: bool = GOOGLE_FETCH_DETAILS,
        details_limit: int = GOOGLE_DETAILS_LIMIT,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.client = client or (GooglePlacesClient(api_key) if api_key else None)
        self.fetch_details = fetch_details
        self.details_limit = details_limit

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) and self.client is not None

    async def _search(
        self,
        origin: Coordinates,
        radius_km: float,
        sport: Optional[Sport],
        keyword: Optional[str],
    ) -> List[CourtRecord]:
        place_types = SPORT_PLACE_TYPES.get(sport, ALL_PLACE_TYPES)
        search_keyword = keyword or " ".join(SPORT_KEYWORDS.get(sport, SPORT_KEYWORDS[None]))
        radius_m = int(round(radius_km * 1000))

        responses = await asyncio.gather(
            *[
                self.client.nearby_search(origin.lat, origin.lng, radius_m, place_type=t, keyword=search_keyword)
                for t in place_types
            ],
            return_exceptions=True,
        )

        raw_places: List[Any] = []
        failures: List[Exception] = []
        for place_type, result in zip(place_types, responses):
            if isinstance(result, Exception):
                logger.debug(f"Google nearby search for type={place_type} failed: {result}")
                failures.append(result)
            else:
                raw_places.extend(result)

        if failures and len(failures) == len(place_types):
            first = failures[0]
            if isinstance(first, ProviderRequestError):
                raise first
            raise ProviderRequestError(ProviderErrorKind.NETWORK_ERROR, str(first)) from first
        if failures:
            logger.warning(f"⚠️ Google Places: {len(failures)}/{len(place_types)} type searches failed, using partial results")

        places = self._unique(parse_items(self.name, raw_places, parse_google_place))
        places = [p for p in places if matches_sport_keywords(p, sport)]
        if self.fetch_details:
            await self._enrich_with_details(places[: self.details_limit])

        records = [self.to_record(p) for p in places]
        if sport is not None:
            # Place types and keywords such as "court" are shared between sports
            records = [r for r in records if r.sport in (sport, Sport.MULTI_SPORT)]
        logger.debug(f"Google Places: {len(records)} unique places for sport={sport.value if sport else 'all'}")
        return records

    @staticmethod
    def _unique(places: List[GooglePlace]) -> List[GooglePlace]:
        seen = set()
        unique = []
        for place in places:
            if place.place_id in seen:
                continue
            seen.add(place.place_id)
            unique.append(place)
        return unique

    async def _enrich_with_details(self, places: List[GooglePlace]) -> None:
        """Fill phone/website/rating count from Place Details; per-place failures are ignored."""
        results = await asyncio.gather(
            *[self.client.place_details(p.place_id) for p in places],
            return_exceptions=True,
        )
        for place, details in zip(places, results):
            if isinstance(details, Exception):
                logger.debug(f"Place details failed for {place.place_id}: {details}")
                continue
            place.phone = optional_str(details.get("formatted_phone_number"))
            place.website = optional_str(details.get("website"))
            place.vicinity = optional_str(details.get("formatted_address")) or place.vicinity
            place.user_ratings_total = optional_int(details.get("user_ratings_total")) or place.user_ratings_total

    def to_record(self, place: GooglePlace) -> CourtRecord:
        sport = classify(place.name, place.types)
        if place.photo_reference:
            image_url = self.client.photo_url(place.photo_reference)
        else:
            image_url = self.placeholder_image_url
        indoor = Known(True) if ("gym" in place.types or "indoor" in place.types) else UNKNOWN
        return CourtRecord(
            id=f"google-{place.place_id}",
            name=place.name,
            sport=sport,
            address=place.vicinity,
            coordinates=place.coordinates,
            source=self.name,
            rating=clamp_rating(place.rating),
            rating_count=place.user_ratings_total or 0,
            price_per_hour=Known(price_for_level(place.price_level)),
            amenities=amenities_for_types(place.types),
            indoor=indoor,
            available=place.open_now is not False,
            image_url=image_url,
            phone=place.phone,
            website=place.website,
            description=f"{sport.value} facility found via Google Places",
            source_tags=frozenset({"google_places", "real_location"}),
        )

    async def close(self):
        if self.client is not None:
            await self.client.close()
