"""
Great-circle distance and unit helpers shared by ranking, dedup and the adapters.
"""
import math

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.60934
MILES_PER_KM = 0.621371


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two lat/lng points.

    Args:
        lat1 (float): Latitude of the first point, degrees.
        lng1 (float): Longitude of the first point, degrees.
        lat2 (float): Latitude of the second point, degrees.
        lng2 (float): Longitude of the second point, degrees.

    Returns:
        float: Distance in kilometers.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Clamp guards against a > 1 from rounding on antipodal points
    c = 2 * math.atan2(math.sqrt(min(a, 1.0)), math.sqrt(max(1.0 - a, 0.0)))
    return EARTH_RADIUS_KM * c


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


def km_to_miles(km: float) -> float:
    return km * MILES_PER_KM


def format_distance(distance_km: float, unit: str = "miles") -> str:
    """Human readable distance, e.g. '0.4 mi', '12 mi', '350 m', '2.5 km'."""
    if unit == "miles":
        miles = km_to_miles(distance_km)
        return f"{round(miles, 1)} mi" if miles < 1 else f"{round(miles)} mi"
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{round(distance_km, 1)} km"
