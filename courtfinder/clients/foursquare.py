"""
Async client for the Foursquare Places v3 search endpoint.
"""
from typing import Any, Dict, List, Optional, Sequence

from courtfinder.clients.base import JsonHttpClient
from courtfinder.config import FOURSQUARE_URL
from courtfinder.errors import ProviderErrorKind, ProviderRequestError

SEARCH_FIELDS = "fsq_id,name,geocodes,location,categories,rating,price,photos,hours,website,tel,stats"


class FoursquareClient:
    def __init__(self, api_key: str, http: Optional[JsonHttpClient] = None):
        self.api_key = api_key
        self.http = http or JsonHttpClient(
            FOURSQUARE_URL,
            headers={"Authorization": api_key, "Accept": "application/json"},
        )

    async def search(
        self,
        lat: float,
        lng: float,
        radius_m: int,
        categories: Sequence[str] = (),
        query: Optional[str] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """
        Search for places around a point, optionally restricted to category ids.

        Returns:
            List of raw place dictionaries from the `results` array.
        """
        params = {
            "ll": f"{lat},{lng}",
            "radius": min(int(radius_m), 100000),
            "limit": limit,
            "fields": SEARCH_FIELDS,
        }
        if categories:
            params["categories"] = ",".join(categories)
        if query:
            params["query"] = query
        payload = await self.http.get_json("search", params=params)
        results = payload.get("results")
        if not isinstance(results, list):
            raise ProviderRequestError(ProviderErrorKind.PARSE_ERROR, "foursquare search: missing results list")
        return results

    async def close(self):
        await self.http.close()
