import pytest

from courtfinder.models import NOT_APPLICABLE, UNKNOWN, Coordinates, Known, ProviderName, Sport
from courtfinder.providers.static_dataset import StaticDatasetAdapter, load_static_courts, matches_keyword

RALEIGH = Coordinates(35.7796, -78.6382)


def by_id(records):
    return {r.id: r for r in records}


def test_bundled_dataset_loads():
    records = load_static_courts()
    assert len(records) == 28
    assert len({r.id for r in records}) == len(records)
    assert all(r.source == ProviderName.STATIC for r in records)


def test_row_fields_are_normalized():
    records = by_id(load_static_courts())

    millbrook = records["static-1"]
    assert millbrook.sport == Sport.TENNIS
    assert millbrook.rating == pytest.approx(4.7)
    assert millbrook.rating_count == 212
    assert millbrook.price_per_hour == Known(35.0)
    assert millbrook.surface == Known("hard")
    assert millbrook.indoor == Known(True)
    assert "pro_shop" in millbrook.amenities
    assert millbrook.available is True

    # blank price, unknown price
    assert records["static-7"].price_per_hour is UNKNOWN
    # explicit zero is a known free court
    assert records["static-9"].price_per_hour == Known(0.0)
    # multi-sport centre has no single surface
    assert records["static-8"].surface is NOT_APPLICABLE
    assert records["static-6"].available is False


def test_row_without_coordinates_is_unknown():
    records = by_id(load_static_courts())
    lions_park = records["static-28"]
    assert lions_park.coordinates is UNKNOWN
    assert lions_park.surface is UNKNOWN
    assert not lions_park.has_coordinates


@pytest.mark.asyncio
async def test_tennis_within_16km_of_raleigh():
    adapter = StaticDatasetAdapter()
    response = await adapter.search_nearby(RALEIGH, 16.0, Sport.TENNIS)
    assert response.error is None
    assert {r.id for r in response.records} == {"static-1", "static-2", "static-3", "static-4"}


@pytest.mark.asyncio
async def test_no_sport_filter_returns_every_sport_in_radius():
    adapter = StaticDatasetAdapter()
    response = await adapter.search_nearby(RALEIGH, 16.0)
    sports = {r.sport for r in response.records}
    assert sports == {Sport.TENNIS, Sport.BASKETBALL, Sport.MULTI_SPORT, Sport.VOLLEYBALL}
    # Unknown coordinates cannot be placed inside the radius without a keyword
    assert "static-28" not in {r.id for r in response.records}


@pytest.mark.asyncio
async def test_keyword_filters_on_name_and_address():
    adapter = StaticDatasetAdapter()
    response = await adapter.search_nearby(RALEIGH, 16.0, keyword="pullen")
    assert [r.id for r in response.records] == ["static-4"]


@pytest.mark.asyncio
async def test_keyword_includes_record_without_coordinates():
    adapter = StaticDatasetAdapter()
    response = await adapter.search_nearby(RALEIGH, 16.0, Sport.PICKLEBALL, keyword="lions park")
    assert [r.id for r in response.records] == ["static-28"]


def test_matches_keyword_tolerates_typos(make_record):
    record = make_record(name="Millbrook Exchange Tennis Center")
    assert matches_keyword(record, "millbrok")
    assert not matches_keyword(record, "wilmington")
    assert matches_keyword(record, "  ")


@pytest.mark.asyncio
async def test_explicit_records_replace_dataset(make_record):
    adapter = StaticDatasetAdapter(records=[make_record(id="x", name="Only Court")])
    response = await adapter.search_nearby(RALEIGH, 1.0)
    assert [r.id for r in response.records] == ["x"]
    assert adapter.live is False


def test_not_applicable_cells_survive_csv_loading(tmp_path):
    csv_path = tmp_path / "courts.csv"
    csv_path.write_text(
        "id,name,sport,address,lat,lng,rating,rating_count,price_per_hour,amenities,surface,indoor,available,"
        "image_url,phone,website,description\n"
        "1,Rec Center,multi-sport,1 Main St,35.78,-78.64,4.5,10,20,lockers,n/a,n/a,true,,,,\n"
        "2,Open Lot,basketball,2 Main St,35.79,-78.65,,,,,,,,,,,\n"
    )
    records = by_id(load_static_courts(str(csv_path)))

    rec_center = records["static-1"]
    assert rec_center.surface is NOT_APPLICABLE
    assert rec_center.indoor is NOT_APPLICABLE
    assert rec_center.price_per_hour == Known(20.0)

    open_lot = records["static-2"]
    assert open_lot.surface is UNKNOWN
    assert open_lot.indoor is UNKNOWN
    assert open_lot.price_per_hour is UNKNOWN
    assert open_lot.rating == 0.0
    assert open_lot.rating_count == 0
    assert open_lot.coordinates == Coordinates(35.79, -78.65)


def test_bundled_multi_sport_centres_have_no_surface():
    records = by_id(load_static_courts())
    assert records["static-8"].surface is NOT_APPLICABLE
    assert records["static-17"].surface is NOT_APPLICABLE
