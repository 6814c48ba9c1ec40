"""
IP based geolocation lookup used when no device position is available.
"""
from typing import Any, Dict, Optional

from courtfinder.clients.base import JsonHttpClient
from courtfinder.config import IP_GEOLOCATION_URL


class IpGeolocationClient:
    def __init__(self, url: str = IP_GEOLOCATION_URL, http: Optional[JsonHttpClient] = None):
        self.http = http or JsonHttpClient(url, headers={"Accept": "application/json"})

    async def lookup(self) -> Dict[str, Any]:
        """Return the raw lookup payload, e.g. {"latitude": .., "longitude": .., "city": ..}."""
        return await self.http.get_json()

    async def close(self):
        await self.http.close()
