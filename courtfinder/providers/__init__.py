from courtfinder.providers.base import ProviderAdapter, ProviderResponse
from courtfinder.providers.foursquare import FoursquareAdapter
from courtfinder.providers.google_places import GooglePlacesAdapter
from courtfinder.providers.static_dataset import StaticDatasetAdapter

__all__ = [
    "ProviderAdapter",
    "ProviderResponse",
    "StaticDatasetAdapter",
    "GooglePlacesAdapter",
    "FoursquareAdapter",
]
