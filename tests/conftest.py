import pytest

from courtfinder.clients import JsonHttpClient
from courtfinder.models import UNKNOWN, Coordinates, CourtRecord, ProviderName, Sport

RALEIGH = Coordinates(35.7796, -78.6382)


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse used as an async context manager."""

    def __init__(self, status=200, payload=None, text="", json_error=None):
        self.status = status
        self._payload = payload if payload is not None else {}
        self._text = text
        self._json_error = json_error

    async def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None):
        self.calls.append((url, params, headers))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


@pytest.fixture
def make_http():
    def _make(response=None, error=None, base_url="https://example.test/api"):
        session = FakeSession(response, error)
        return JsonHttpClient(base_url, session=session), session
    return _make


@pytest.fixture
def make_record():
    def _make(
        id="r1",
        name="Court",
        sport=Sport.TENNIS,
        coordinates=RALEIGH,
        source=ProviderName.STATIC,
        **kwargs,
    ):
        return CourtRecord(
            id=id,
            name=name,
            sport=sport,
            address=kwargs.pop("address", "1 Main St"),
            coordinates=coordinates if coordinates is not None else UNKNOWN,
            source=source,
            **kwargs,
        )
    return _make
