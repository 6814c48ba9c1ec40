"""
Curated venue dataset bundled with the package.
"""
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from rapidfuzz import fuzz

from courtfinder.config import FUZZY_THRESHOLD, STATIC_DATASET_CSV
from courtfinder.errors import VenueParseError
from courtfinder.geo import haversine_km
from courtfinder.models import (
    NOT_APPLICABLE,
    UNKNOWN,
    Coordinates,
    CourtRecord,
    Known,
    ProviderName,
    Sport,
)
from courtfinder.providers.base import ProviderAdapter, clamp_rating, parse_coordinates

_TEXT_COLUMNS = (
    "id", "name", "sport", "address", "amenities", "surface", "indoor",
    "available", "image_url", "phone", "website", "description",
)
_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}


def _number(value) -> Optional[float]:
    """Numeric CSV cell to float, treating NaN as missing."""
    if value is None:
        return None
    if isinstance(value, (float, np.floating)):
        return None if np.isnan(value) else float(value)
    if isinstance(value, (int, np.integer)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _flag(value: Optional[str]):
    """true/false/blank/n/a cell to a tri-state bool."""
    if value is None:
        return UNKNOWN
    lowered = value.lower()
    if lowered in _TRUE:
        return Known(True)
    if lowered in _FALSE:
        return Known(False)
    if lowered == "n/a":
        return NOT_APPLICABLE
    return UNKNOWN


def _row_to_record(row: pd.Series) -> CourtRecord:
    def safe_get(col) -> Optional[str]:
        if col not in row.index:
            return None
        val = row[col]
        if pd.isna(val):
            return None
        text = str(val).strip()
        return text or None

    court_id = safe_get("id")
    name = safe_get("name")
    if not court_id or not name:
        raise VenueParseError(f"row without id/name: {row.to_dict()}")
    try:
        sport = Sport(safe_get("sport") or Sport.MULTI_SPORT.value)
    except ValueError as e:
        raise VenueParseError(f"unknown sport for {name}: {e}") from e

    surface_raw = safe_get("surface")
    if surface_raw is None:
        surface = UNKNOWN
    elif surface_raw.lower() == "n/a":
        surface = NOT_APPLICABLE
    else:
        surface = Known(surface_raw)

    price = _number(row.get("price_per_hour"))
    available = _flag(safe_get("available"))
    amenities = safe_get("amenities")

    return CourtRecord(
        id=f"static-{court_id}",
        name=name,
        sport=sport,
        address=safe_get("address") or "",
        coordinates=parse_coordinates(_number(row.get("lat")), _number(row.get("lng"))),
        source=ProviderName.STATIC,
        rating=clamp_rating(_number(row.get("rating"))),
        rating_count=int(_number(row.get("rating_count")) or 0),
        price_per_hour=Known(price) if price is not None else UNKNOWN,
        amenities=frozenset(a.strip() for a in amenities.split(";") if a.strip()) if amenities else frozenset(),
        surface=surface,
        indoor=_flag(safe_get("indoor")),
        available=available.value if isinstance(available, Known) else True,
        image_url=safe_get("image_url"),
        phone=safe_get("phone"),
        website=safe_get("website"),
        description=safe_get("description"),
        source_tags=frozenset({"curated"}),
    )


@lru_cache(maxsize=None)
def load_static_courts(file_path: str = STATIC_DATASET_CSV) -> Tuple[CourtRecord, ...]:
    """
    Load the curated CSV into immutable CourtRecords. Cached per path; the result is
    read-only and shared by every search.
    """
    # Only blank cells are missing; "n/a" is a value meaning not applicable
    df = pd.read_csv(
        file_path,
        dtype={col: str for col in _TEXT_COLUMNS},
        keep_default_na=False,
        na_values=[""],
    )
    records = []
    for _, row in df.iterrows():
        try:
            records.append(_row_to_record(row))
        except VenueParseError as e:
            logger.warning(f"⚠️ Skipping static dataset row: {e}")
    logger.debug(f"Loaded {len(records)} curated courts from {file_path}")
    return tuple(records)


def matches_keyword(record: CourtRecord, keyword: str, threshold: int = FUZZY_THRESHOLD) -> bool:
    """Substring match on name/address/description, then a fuzzy match on the name."""
    needle = keyword.strip().lower()
    if not needle:
        return True
    haystacks = [record.name, record.address, record.description or ""]
    if any(needle in h.lower() for h in haystacks):
        return True
    return fuzz.partial_ratio(needle, record.name.lower()) >= threshold


class StaticDatasetAdapter(ProviderAdapter):
    """Always-available provider backed by the bundled dataset; no network latency."""

    name = ProviderName.STATIC
    live = False

    def __init__(self, records: Optional[List[CourtRecord]] = None, file_path: str = STATIC_DATASET_CSV, **kwargs):
        super().__init__(**kwargs)
        self._records = tuple(records) if records is not None else None
        self.file_path = file_path

    @property
    def records(self) -> Tuple[CourtRecord, ...]:
        if self._records is None:
            self._records = load_static_courts(self.file_path)
        return self._records

    async def _search(
        self,
        origin: Coordinates,
        radius_km: float,
        sport: Optional[Sport],
        keyword: Optional[str],
    ) -> List[CourtRecord]:
        matches = []
        for record in self.records:
            if sport is not None and record.sport != sport:
                continue
            if keyword and not matches_keyword(record, keyword):
                continue
            if record.has_coordinates:
                distance = haversine_km(origin.lat, origin.lng, record.coordinates.lat, record.coordinates.lng)
                if distance > radius_km:
                    continue
            elif not keyword:
                # Without coordinates only an explicit keyword hit can place the venue in the search
                continue
            matches.append(record)
        return matches
