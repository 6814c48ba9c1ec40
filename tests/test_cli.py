import argparse
import csv

import pytest

import main
from courtfinder.models import ProviderName


def test_parse_providers():
    assert main.parse_providers("static, google_places") == [ProviderName.STATIC, ProviderName.GOOGLE_PLACES]
    with pytest.raises(argparse.ArgumentTypeError):
        main.parse_providers("static,yelp")


@pytest.mark.asyncio
async def test_search_writes_csv(tmp_path, capsys):
    output = tmp_path / "results.csv"

    code = await main.main([
        "--lat", "35.7796", "--lng", "-78.6382",
        "--radius-km", "16", "--sport", "tennis",
        "--providers", "static", "--output", str(output),
    ])

    assert code == 0
    with open(output, newline="") as f:
        rows = list(csv.DictReader(f))
    assert [row["id"] for row in rows] == ["static-4", "static-1", "static-3", "static-2"]
    assert rows[0]["price_per_hour"] == "12.0"
    assert "Pullen Park Tennis Center" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args",
    [
        ["--lat", "95", "--lng", "-78.6"],
        ["--lat", "35.7", "--lng", "-200"],
        ["--lat", "north", "--lng", "-78.6"],
    ],
)
def test_out_of_range_coordinates_are_rejected(args, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main.build_parser().parse_args(args)
    assert exc_info.value.code == 2
    assert "must be" in capsys.readouterr().err


def test_coordinate_bounds_are_inclusive():
    args = main.build_parser().parse_args(["--lat", "-90", "--lng", "180"])
    assert (args.lat, args.lng) == (-90.0, 180.0)
