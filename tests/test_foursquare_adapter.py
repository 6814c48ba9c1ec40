import pytest
from unittest.mock import AsyncMock, MagicMock

from courtfinder.errors import ProviderErrorKind, ProviderRequestError
from courtfinder.models import UNKNOWN, Coordinates, Known, ProviderName, Sport
from courtfinder.providers.foursquare import (
    BASKETBALL_COURT,
    FoursquareAdapter,
    parse_foursquare_place,
)

RALEIGH = Coordinates(35.7796, -78.6382)


def venue(fsq_id, name, category="Tennis Court", **extra):
    raw = {
        "fsq_id": fsq_id,
        "name": name,
        "geocodes": {"main": {"latitude": 35.7734, "longitude": -78.6298}},
        "location": {"address": "505 Martin Luther King Jr Blvd", "locality": "Raleigh", "region": "NC"},
        "categories": [{"id": 18000, "name": category}],
    }
    raw.update(extra)
    return raw


def make_adapter(results=None, error=None):
    client = MagicMock()
    client.search = AsyncMock(side_effect=error) if error else AsyncMock(return_value=results or [])
    client.close = AsyncMock()
    return FoursquareAdapter(api_key="fsq-key", client=client), client


@pytest.mark.asyncio
async def test_missing_key_returns_empty_without_error():
    adapter = FoursquareAdapter(api_key=None)
    response = await adapter.search_nearby(RALEIGH, 16.0)
    assert not adapter.enabled
    assert response.records == []
    assert response.error is None


@pytest.mark.asyncio
async def test_record_normalization():
    raw = venue(
        "f1",
        "Chavis Park Courts",
        category="Basketball Court",
        rating=8.4,
        price=2,
        tel="(919) 996-6151",
        photos=[{"prefix": "https://fastly.4sqi.net/img/general/", "suffix": "/abc.jpg"}],
        stats={"total_ratings": 31},
        hours={"open_now": True},
    )
    adapter, client = make_adapter([raw])

    [record] = (await adapter.search_nearby(RALEIGH, 16.0, Sport.BASKETBALL)).records

    assert client.search.await_args.kwargs["categories"] == (BASKETBALL_COURT,)
    assert record.id == "foursquare-f1"
    assert record.source == ProviderName.FOURSQUARE
    assert record.sport == Sport.BASKETBALL
    assert record.rating == pytest.approx(4.2)
    assert record.rating_count == 31
    assert record.price_per_hour == Known(20)
    assert record.image_url == "https://fastly.4sqi.net/img/general/300x200/abc.jpg"
    assert record.address == "505 Martin Luther King Jr Blvd, Raleigh, NC"
    assert record.coordinates == Coordinates(35.7734, -78.6298)
    assert record.description.endswith("Basketball Court")


@pytest.mark.asyncio
async def test_missing_price_and_photo():
    adapter, _ = make_adapter([venue("f1", "Optimist Park Courts")])
    [record] = (await adapter.search_nearby(RALEIGH, 16.0)).records
    assert record.price_per_hour is UNKNOWN
    assert record.image_url == adapter.placeholder_image_url
    assert record.rating == 0.0


def test_parse_falls_back_to_location_coordinates():
    raw = venue("f1", "Courts", geocodes={})
    raw["location"].update({"latitude": 35.9, "longitude": -78.9, "formatted_address": "1 Court St, Durham"})
    parsed = parse_foursquare_place(raw)
    assert parsed.coordinates == Coordinates(35.9, -78.9)
    assert parsed.address == "1 Court St, Durham"


@pytest.mark.asyncio
async def test_sport_filter_uses_classification():
    results = [
        venue("f1", "Chavis Park Courts", category="Basketball Court"),
        venue("f2", "Raleigh Racquet Club", category="Tennis Court"),
        venue("f3", "Community Center", category="Recreation Center"),
    ]
    adapter, _ = make_adapter(results)
    records = (await adapter.search_nearby(RALEIGH, 16.0, Sport.BASKETBALL)).records
    assert [r.id for r in records] == ["foursquare-f1", "foursquare-f3"]


@pytest.mark.asyncio
async def test_malformed_items_are_skipped():
    adapter, _ = make_adapter([venue("f1", "Courts"), {"name": "no id"}, venue("f3", "Bad", geocodes={"main": {"latitude": 123, "longitude": 0}})])
    records = (await adapter.search_nearby(RALEIGH, 16.0)).records
    assert [r.id for r in records] == ["foursquare-f1"]


@pytest.mark.asyncio
async def test_unauthorized_is_quota_error():
    adapter, _ = make_adapter(error=ProviderRequestError(ProviderErrorKind.QUOTA_EXCEEDED, "HTTP 401", status=401))
    response = await adapter.search_nearby(RALEIGH, 16.0)
    assert response.records == []
    assert response.error.kind == ProviderErrorKind.QUOTA_EXCEEDED
    assert response.error.provider == ProviderName.FOURSQUARE
