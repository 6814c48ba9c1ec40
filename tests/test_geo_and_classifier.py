import pytest

from courtfinder.classifier import classify
from courtfinder.geo import format_distance, haversine_km, km_to_miles, miles_to_km
from courtfinder.models import Sport

POINTS = [
    (35.7796, -78.6382),
    (36.0012, -78.9434),
    (-33.8688, 151.2093),
    (51.5074, -0.1278),
    (0.0, 0.0),
    (89.9, 179.9),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_haversine_is_symmetric(a, b):
    assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a), abs=1e-9)


@pytest.mark.parametrize("a", POINTS)
def test_haversine_distance_to_self_is_zero(a):
    assert haversine_km(*a, *a) == pytest.approx(0.0, abs=1e-9)


def test_haversine_known_distance():
    # Raleigh to Durham is roughly 35 km
    assert haversine_km(35.7796, -78.6382, 35.9940, -78.8986) == pytest.approx(33.5, abs=1.5)


def test_haversine_antipodal_points_do_not_fail():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015.1, abs=1.0)


def test_unit_helpers():
    assert miles_to_km(10) == pytest.approx(16.09, abs=0.01)
    assert km_to_miles(16.0934) == pytest.approx(10.0, abs=0.01)
    assert format_distance(0.5) == "0.3 mi"
    assert format_distance(20) == "12 mi"
    assert format_distance(0.35, unit="km") == "350 m"
    assert format_distance(2.54, unit="km") == "2.5 km"


@pytest.mark.parametrize(
    "name, hints, expected",
    [
        ("Pullen Park", ["tennis_court", "park"], Sport.TENNIS),
        ("Downtown Rec", ["Basketball Court"], Sport.BASKETBALL),
        ("Millbrook Tennis Center", [], Sport.TENNIS),
        ("Bull City Pickleball", [], Sport.PICKLEBALL),
        ("Beach Volleyball Nets", [], Sport.VOLLEYBALL),
        ("Riverside Hoops", [], Sport.BASKETBALL),
        ("YMCA", ["gym", "point_of_interest"], Sport.MULTI_SPORT),
        ("", [], Sport.MULTI_SPORT),
    ],
)
def test_classify(name, hints, expected):
    assert classify(name, hints) == expected


def test_classify_hint_takes_precedence_over_name():
    # The category says basketball even though the name mentions tennis
    assert classify("Tennis Road Courts", ["basketball_court"]) == Sport.BASKETBALL


def test_classify_hint_requires_whole_token():
    # "tennisville" is not the token "tennis"; falls through to the name check
    assert classify("Community Hoops", ["tennisville"]) == Sport.BASKETBALL


def test_classify_paddle_tennis_is_pickleball():
    assert classify("Paddle Tennis Club") == Sport.PICKLEBALL


def test_classify_is_deterministic_across_calls():
    inputs = [("Racquet Club", ["sports_club"]), ("Hoop Dreams", []), ("Aquatic Center", ["gym"])]
    first = [classify(n, h) for n, h in inputs]
    second = [classify(n, h) for n, h in reversed(inputs)]
    assert first == list(reversed(second))
