"""
Foursquare Places v3 adapter. Silently disabled when FOURSQUARE_API_KEY is not set.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from courtfinder.classifier import classify
from courtfinder.clients import FoursquareClient
from courtfinder.config import FOURSQUARE_API_KEY
from courtfinder.errors import VenueParseError
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

TENNIS_COURT = "4bf58dd8d48988d1e5931735"
BASKETBALL_COURT = "4bf58dd8d48988d1e8931735"
GYM = "4bf58dd8d48988d1e7931735"
RECREATION_CENTER = "4bf58dd8d48988d1e9931735"
SPORTS_CLUB = "4bf58dd8d48988d1ed931735"

SPORT_CATEGORIES: Dict[Optional[Sport], Tuple[str, ...]] = {
    Sport.TENNIS: (TENNIS_COURT,),
    Sport.BASKETBALL: (BASKETBALL_COURT,),
    # No pickleball category in the taxonomy; courts are usually tagged as tennis
    Sport.PICKLEBALL: (TENNIS_COURT,),
    Sport.VOLLEYBALL: (RECREATION_CENTER, SPORTS_CLUB),
    Sport.MULTI_SPORT: (TENNIS_COURT, BASKETBALL_COURT),
    None: (TENNIS_COURT, BASKETBALL_COURT, GYM, RECREATION_CENTER, SPORTS_CLUB),
}

PHOTO_SIZE = "300x200"
PRICE_TIER_USD = 10


@dataclass
class FoursquarePlace:
    fsq_id: str
    name: str
    address: str
    coordinates: Union[Coordinates, Marker]
    category_names: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    total_ratings: Optional[int] = None
    price_tier: Optional[int] = None
    photo_url: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    open_now: Optional[bool] = None


def _format_address(location: Dict[str, Any]) -> str:
    formatted = optional_str(location.get("formatted_address"))
    if formatted:
        return formatted
    parts = [optional_str(location.get(k)) for k in ("address", "locality", "region", "postcode", "country")]
    return ", ".join(p for p in parts if p)


def _place_coordinates(raw: Dict[str, Any]) -> Union[Coordinates, Marker]:
    geocodes = raw.get("geocodes") if isinstance(raw.get("geocodes"), dict) else {}
    main = geocodes.get("main") if isinstance(geocodes.get("main"), dict) else None
    if main:
        return parse_coordinates(main.get("latitude"), main.get("longitude"))
    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    return parse_coordinates(location.get("latitude"), location.get("longitude"))


def parse_foursquare_place(raw: Any) -> FoursquarePlace:
    """Validate one Places search item; raises VenueParseError when unusable."""
    if not isinstance(raw, dict):
        raise VenueParseError(f"expected object, got {type(raw).__name__}")
    fsq_id = optional_str(raw.get("fsq_id"))
    name = optional_str(raw.get("name"))
    if not fsq_id or not name:
        raise VenueParseError("place without fsq_id or name")

    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    categories = raw.get("categories") if isinstance(raw.get("categories"), list) else []
    category_names = [str(c["name"]) for c in categories if isinstance(c, dict) and c.get("name")]

    photos = raw.get("photos") if isinstance(raw.get("photos"), list) else []
    photo_url = None
    if photos and isinstance(photos[0], dict) and photos[0].get("prefix") and photos[0].get("suffix"):
        photo_url = f"{photos[0]['prefix']}{PHOTO_SIZE}{photos[0]['suffix']}"

    hours = raw.get("hours") if isinstance(raw.get("hours"), dict) else {}
    stats = raw.get("stats") if isinstance(raw.get("stats"), dict) else {}
    rating = optional_float(raw.get("rating"))

    return FoursquarePlace(
        fsq_id=fsq_id,
        name=name,
        address=_format_address(location),
        coordinates=_place_coordinates(raw),
        category_names=category_names,
        rating=rating / 2 if rating is not None else None,
        total_ratings=optional_int(stats.get("total_ratings")),
        price_tier=optional_int(raw.get("price")),
        photo_url=photo_url,
        phone=optional_str(raw.get("tel")),
        website=optional_str(raw.get("website")),
        open_now=hours.get("open_now") if isinstance(hours.get("open_now"), bool) else None,
    )


class FoursquareAdapter(ProviderAdapter):
    name = ProviderName.FOURSQUARE

    def __init__(self, api_key: Optional[str] = FOURSQUARE_API_KEY, client: Optional[FoursquareClient] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.client = client or (FoursquareClient(api_key) if api_key else None)

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
        categories = SPORT_CATEGORIES.get(sport, SPORT_CATEGORIES[None])
        raw_places = await self.client.search(
            origin.lat,
            origin.lng,
            int(round(radius_km * 1000)),
            categories=categories,
            query=keyword,
        )
        places = parse_items(self.name, raw_places, parse_foursquare_place)
        records = [self.to_record(p) for p in places]
        if sport is not None:
            # Category ids are shared between sports, so the classified sport decides
            records = [r for r in records if r.sport in (sport, Sport.MULTI_SPORT)]
        logger.debug(f"Foursquare: {len(records)} place(s) for sport={sport.value if sport else 'all'}")
        return records

    def to_record(self, place: FoursquarePlace) -> CourtRecord:
        sport = classify(place.name, place.category_names)
        description = "Sports venue found via Foursquare"
        if place.category_names:
            description = f"{description} - {place.category_names[0]}"
        return CourtRecord(
            id=f"foursquare-{place.fsq_id}",
            name=place.name,
            sport=sport,
            address=place.address,
            coordinates=place.coordinates,
            source=self.name,
            rating=clamp_rating(place.rating),
            rating_count=place.total_ratings or 0,
            price_per_hour=Known(place.price_tier * PRICE_TIER_USD) if place.price_tier else UNKNOWN,
            available=place.open_now is not False,
            image_url=place.photo_url or self.placeholder_image_url,
            phone=place.phone,
            website=place.website,
            description=description,
            source_tags=frozenset({"foursquare", "real_location"}),
        )

    async def close(self):
        if self.client is not None:
            await self.client.close()
