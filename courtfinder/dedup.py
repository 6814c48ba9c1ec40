from typing import Iterable, List

from courtfinder.config import DEDUP_PROXIMITY_METERS
from courtfinder.geo import haversine_km
from courtfinder.models import CourtRecord


def _normalized(name: str) -> str:
    return " ".join(name.lower().split())


def is_duplicate(candidate: CourtRecord, accepted: CourtRecord, proximity_m: float = DEDUP_PROXIMITY_METERS) -> bool:
    """
    Two records describe the same venue when they share an id, when their names are
    equal ignoring case, or when they are closer than `proximity_m` and one name
    contains the other. The proximity rule needs known coordinates on both sides.
    """
    if candidate.id == accepted.id:
        return True
    a, b = _normalized(candidate.name), _normalized(accepted.name)
    if a == b:
        return True
    if not (candidate.has_coordinates and accepted.has_coordinates):
        return False
    if a not in b and b not in a:
        return False
    distance_m = haversine_km(
        candidate.coordinates.lat, candidate.coordinates.lng,
        accepted.coordinates.lat, accepted.coordinates.lng,
    ) * 1000
    return distance_m < proximity_m


def dedupe(records: Iterable[CourtRecord], proximity_m: float = DEDUP_PROXIMITY_METERS) -> List[CourtRecord]:
    """
    Drop near-duplicate venues, keeping the first occurrence.

    Input order is preserved, so with the static dataset listed first its copy of a
    duplicated venue is the one that survives.
    """
    accepted: List[CourtRecord] = []
    for record in records:
        if any(is_duplicate(record, kept, proximity_m) for kept in accepted):
            continue
        accepted.append(record)
    return accepted
