"""
Typed data models for the court search engine.
All data structures shared between providers, engines and the orchestrator are defined here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class Sport(str, Enum):
    TENNIS = "tennis"
    BASKETBALL = "basketball"
    PICKLEBALL = "pickleball"
    VOLLEYBALL = "volleyball"
    MULTI_SPORT = "multi-sport"


class ProviderName(str, Enum):
    STATIC = "static"
    GOOGLE_PLACES = "google_places"
    FOURSQUARE = "foursquare"


class SortKey(str, Enum):
    DISTANCE = "distance"
    RATING = "rating"
    PRICE = "price"


class Marker(Enum):
    """The two non-value states of a tri-state attribute."""
    UNKNOWN = "unknown"
    NOT_APPLICABLE = "not_applicable"

    def __repr__(self) -> str:
        return self.name


UNKNOWN = Marker.UNKNOWN
NOT_APPLICABLE = Marker.NOT_APPLICABLE


@dataclass(frozen=True)
class Known(Generic[T]):
    """A tri-state attribute whose value is known."""
    value: T


TriState = Union[Known[T], Marker]


def known_value(attr: "TriState", default=None):
    """Unwrap a tri-state attribute, returning `default` for UNKNOWN / NOT_APPLICABLE."""
    if isinstance(attr, Known):
        return attr.value
    return default


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"longitude out of range: {self.lng}")


@dataclass(frozen=True)
class CourtRecord:
    """Canonical, provider-agnostic representation of a sports venue."""
    id: str
    name: str
    sport: Sport
    address: str
    coordinates: Union[Coordinates, Marker]
    source: ProviderName
    rating: float = 0.0
    rating_count: int = 0
    price_per_hour: TriState = UNKNOWN
    amenities: FrozenSet[str] = frozenset()
    surface: TriState = UNKNOWN
    indoor: TriState = UNKNOWN
    available: bool = True
    image_url: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    source_tags: FrozenSet[str] = frozenset()

    @property
    def has_coordinates(self) -> bool:
        return isinstance(self.coordinates, Coordinates)


@dataclass
class UserLocation:
    """Resolved caller position, optionally enriched by reverse geocoding."""
    coordinates: Coordinates
    accuracy_m: Optional[float] = None
    timestamp: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class SearchQuery:
    origin: Coordinates
    radius_km: float
    sport: Optional[Sport] = None
    max_results: int = 50
    sort_key: SortKey = SortKey.DISTANCE
    active_providers: FrozenSet[ProviderName] = frozenset(ProviderName)
    keyword: Optional[str] = None

    @property
    def radius_m(self) -> int:
        return int(round(self.radius_km * 1000))


@dataclass
class SearchResult:
    """Final answer of one search call."""
    records: List[CourtRecord]
    origin: Coordinates
    distances_km: Dict[str, Optional[float]] = field(default_factory=dict)
    contributions: Dict[ProviderName, int] = field(default_factory=dict)
    provider_errors: list = field(default_factory=list)  # List[ProviderError]
    elapsed_ms: float = 0.0
    state_trace: list = field(default_factory=list)  # List[SearchState]
    used_fallback: bool = False
