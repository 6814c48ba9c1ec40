"""
Async client for the Google Places (Nearby Search, Place Details, Photo) and Geocoding APIs.
"""
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from loguru import logger

from courtfinder.clients.base import JsonHttpClient
from courtfinder.config import GOOGLE_GEOCODE_URL, GOOGLE_PLACES_URL
from courtfinder.errors import ProviderErrorKind, ProviderRequestError

_OK_STATUSES = {"OK", "ZERO_RESULTS"}
_QUOTA_STATUSES = {"OVER_QUERY_LIMIT", "REQUEST_DENIED"}

DETAILS_FIELDS = "place_id,name,formatted_address,formatted_phone_number,website,user_ratings_total"


def _check_status(payload: Dict[str, Any], operation: str) -> None:
    status = payload.get("status")
    if status in _OK_STATUSES:
        return
    message = payload.get("error_message") or status or "missing status"
    logger.debug(f"⚠️ Google {operation} failed: status={status} error_message={payload.get('error_message')}")
    if status in _QUOTA_STATUSES:
        raise ProviderRequestError(ProviderErrorKind.QUOTA_EXCEEDED, message)
    if status is None:
        raise ProviderRequestError(ProviderErrorKind.PARSE_ERROR, f"{operation}: response has no status")
    raise ProviderRequestError(ProviderErrorKind.NETWORK_ERROR, message)


class GooglePlacesClient:
    """Thin wrapper that returns Google response envelopes after status checking."""

    def __init__(self, api_key: str, http: Optional[JsonHttpClient] = None, geocode_http: Optional[JsonHttpClient] = None):
        self.api_key = api_key
        self.http = http or JsonHttpClient(GOOGLE_PLACES_URL)
        self.geocode_http = geocode_http or JsonHttpClient(GOOGLE_GEOCODE_URL)

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        radius_m: int,
        place_type: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run one Nearby Search call. The API accepts a single `type` per request.

        Returns:
            List of raw place dictionaries (possibly empty).
        """
        params = {
            "location": f"{lat},{lng}",
            "radius": min(int(radius_m), 50000),
            "key": self.api_key,
        }
        if place_type:
            params["type"] = place_type
        if keyword:
            params["keyword"] = keyword
        payload = await self.http.get_json("nearbysearch/json", params=params)
        _check_status(payload, "nearby_search")
        results = payload.get("results", [])
        if not isinstance(results, list):
            raise ProviderRequestError(ProviderErrorKind.PARSE_ERROR, "nearby_search: results is not a list")
        return results

    async def place_details(self, place_id: str) -> Dict[str, Any]:
        params = {"place_id": place_id, "fields": DETAILS_FIELDS, "key": self.api_key}
        payload = await self.http.get_json("details/json", params=params)
        _check_status(payload, "place_details")
        result = payload.get("result") or {}
        return result if isinstance(result, dict) else {}

    async def geocode(self, address: Optional[str] = None, latlng: Optional[str] = None) -> List[Dict[str, Any]]:
        """Forward (address=...) or reverse (latlng='lat,lng') geocoding."""
        params = {"key": self.api_key}
        if address:
            params["address"] = address
        if latlng:
            params["latlng"] = latlng
        payload = await self.geocode_http.get_json(params=params)
        _check_status(payload, "geocode")
        results = payload.get("results", [])
        return results if isinstance(results, list) else []

    def photo_url(self, photo_reference: str, max_width: int = 400, max_height: int = 300) -> str:
        query = urlencode({
            "photo_reference": photo_reference,
            "maxwidth": max_width,
            "maxheight": max_height,
            "key": self.api_key,
        })
        return f"{GOOGLE_PLACES_URL}/photo?{query}"

    async def close(self):
        await self.http.close()
        await self.geocode_http.close()
