import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from courtfinder.config import DEFAULT_MAX_RESULTS
from courtfinder.geo import haversine_km
from courtfinder.models import Coordinates, CourtRecord, Known, SortKey


@dataclass
class RankedRecords:
    records: List[CourtRecord]
    # Per-search distances keyed by record id; None when the record has no coordinates
    distances_km: Dict[str, Optional[float]]


def distances_from(origin: Optional[Coordinates], records: Sequence[CourtRecord]) -> Dict[str, Optional[float]]:
    distances = {}
    for record in records:
        if origin is None or not record.has_coordinates:
            distances[record.id] = None
        else:
            distances[record.id] = haversine_km(
                origin.lat, origin.lng, record.coordinates.lat, record.coordinates.lng
            )
    return distances


def _price(record: CourtRecord) -> float:
    if isinstance(record.price_per_hour, Known):
        return float(record.price_per_hour.value)
    return math.inf


def rank(
    records: Sequence[CourtRecord],
    sort_key: SortKey = SortKey.DISTANCE,
    max_results: int = DEFAULT_MAX_RESULTS,
    origin: Optional[Coordinates] = None,
) -> RankedRecords:
    """
    Order records by `sort_key` and keep the first `max_results`.

    Distance sorts ascending with unknown distances last, rating descending with a
    missing rating counted as 0, and price ascending with unknown prices last.
    Python's sort is stable, so ties keep their input order.
    """
    distances = distances_from(origin, records)

    if sort_key == SortKey.DISTANCE:
        ordered = sorted(
            records,
            key=lambda r: (distances[r.id] is None, distances[r.id] or 0.0),
        )
    elif sort_key == SortKey.RATING:
        ordered = sorted(records, key=lambda r: -(r.rating or 0.0))
    elif sort_key == SortKey.PRICE:
        ordered = sorted(records, key=_price)
    else:
        raise ValueError(f"unsupported sort key: {sort_key}")

    kept = ordered[: max(max_results, 0)]
    return RankedRecords(records=kept, distances_km={r.id: distances[r.id] for r in kept})
