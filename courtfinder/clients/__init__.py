"""HTTP clients for external place-search and geolocation APIs."""
from courtfinder.clients.base import JsonHttpClient
from courtfinder.clients.google_places import GooglePlacesClient
from courtfinder.clients.foursquare import FoursquareClient
from courtfinder.clients.ip_geolocation import IpGeolocationClient

__all__ = ["JsonHttpClient", "GooglePlacesClient", "FoursquareClient", "IpGeolocationClient"]
