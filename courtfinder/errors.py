"""
Error taxonomy.

LocationError is fatal and raised to the caller. ProviderError is a value recorded
on the SearchResult; clients raise ProviderRequestError internally and the adapters
convert it before anything leaves the provider layer.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from courtfinder.models import ProviderName


class LocationErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


class LocationError(Exception):
    """Raised when no coordinates can be produced to search from."""

    def __init__(self, kind: LocationErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value


class ProviderErrorKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    QUOTA_EXCEEDED = "quota_exceeded"
    PARSE_ERROR = "parse_error"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class ProviderError:
    provider: ProviderName
    kind: ProviderErrorKind
    message: str = ""


class ProviderRequestError(Exception):
    """Raised by the HTTP clients; carries the classification used for ProviderError."""

    def __init__(self, kind: ProviderErrorKind, message: str = "", status: Optional[int] = None):
        super().__init__(message or kind.value)
        self.kind = kind
        self.status = status


class VenueParseError(ValueError):
    """A single provider item could not be parsed into a raw venue."""


def kind_for_status(status: int) -> ProviderErrorKind:
    """Classify a non-2xx HTTP status."""
    if status in (401, 403, 429):
        return ProviderErrorKind.QUOTA_EXCEEDED
    return ProviderErrorKind.NETWORK_ERROR
