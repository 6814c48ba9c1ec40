# courtfinder/config.py
from dotenv import load_dotenv
from pathlib import Path
import os

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


# API Keys
GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY")
FOURSQUARE_API_KEY = os.getenv("FOURSQUARE_API_KEY")

# Runtime parameters
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "8"))
REQUESTS_PER_SECOND = int(os.getenv("PROVIDER_REQUESTS_PER_SECOND", "10"))
LOCATION_CACHE_TTL_SECONDS = 5 * 60
DEFAULT_MAX_RESULTS = 50
DEFAULT_RADIUS_KM = 16.0
DEDUP_PROXIMITY_METERS = 100.0
FUZZY_THRESHOLD = 80
GOOGLE_FETCH_DETAILS = _env_bool("GOOGLE_FETCH_DETAILS")
GOOGLE_DETAILS_LIMIT = 10
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# URLs
GOOGLE_PLACES_URL = "https://maps.googleapis.com/maps/api/place"
GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
FOURSQUARE_URL = "https://api.foursquare.com/v3/places"
IP_GEOLOCATION_URL = os.getenv("IP_GEOLOCATION_URL", "https://ipapi.co/json/")
PLACEHOLDER_IMAGE_URL = "https://placehold.co/400x300/e5e7eb/6b7280?text=Sports+Facility"

# File names
STATIC_DATASET_CSV = os.getenv(
    "STATIC_DATASET_CSV",
    str(Path(__file__).resolve().parent / "data" / "courts.csv"),
)
