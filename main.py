import argparse
import asyncio
import csv
import sys
from typing import List, Optional

from loguru import logger

from courtfinder.config import DEFAULT_MAX_RESULTS, DEFAULT_RADIUS_KM, GOOGLE_PLACES_API_KEY, LOG_LEVEL
from courtfinder.clients import GooglePlacesClient
from courtfinder.errors import LocationError
from courtfinder.geo import format_distance
from courtfinder.location import IpGeolocationSource, LocationService
from courtfinder.models import Coordinates, CourtRecord, ProviderName, SearchResult, SortKey, Sport, known_value
from courtfinder.orchestrator import build_default_orchestrator

CSV_HEADER = ["id", "name", "sport", "address", "lat", "lng", "distance_km", "rating", "price_per_hour", "source"]


def parse_providers(value: str) -> List[ProviderName]:
    """Comma separated provider names, e.g. 'static,google_places'."""
    try:
        return [ProviderName(p.strip()) for p in value.split(",") if p.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _bounded_float(name: str, limit: float):
    def parse(value: str) -> float:
        try:
            number = float(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"{name} must be a number, got {value!r}") from e
        if not -limit <= number <= limit:
            raise argparse.ArgumentTypeError(f"{name} must be between {-limit:g} and {limit:g}, got {number:g}")
        return number
    return parse


latitude = _bounded_float("latitude", 90.0)
longitude = _bounded_float("longitude", 180.0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find sports courts near a location.")
    parser.add_argument("--lat", type=latitude, help="Origin latitude; resolved from IP when omitted")
    parser.add_argument("--lng", type=longitude, help="Origin longitude")
    parser.add_argument("--near", help="Free-text place to search around, e.g. 'Durham, NC'")
    parser.add_argument("--radius-km", type=float, default=DEFAULT_RADIUS_KM)
    parser.add_argument("--sport", choices=[s.value for s in Sport])
    parser.add_argument("--keyword")
    parser.add_argument("--sort", choices=[k.value for k in SortKey], default=SortKey.DISTANCE.value)
    parser.add_argument("--max-results", type=int, default=DEFAULT_MAX_RESULTS)
    parser.add_argument("--providers", type=parse_providers, help="Subset of: static,google_places,foursquare")
    parser.add_argument("--output", help="Write results to this CSV file")
    parser.add_argument("--capabilities", action="store_true", help="Print configured providers and exit")
    return parser


def record_row(record: CourtRecord, result: SearchResult) -> list:
    coords = record.coordinates if record.has_coordinates else None
    distance = result.distances_km.get(record.id)
    return [
        record.id,
        record.name,
        record.sport.value,
        record.address,
        coords.lat if coords else "",
        coords.lng if coords else "",
        f"{distance:.2f}" if distance is not None else "",
        record.rating,
        known_value(record.price_per_hour, ""),
        record.source.value,
    ]


def write_csv(output_path: str, result: SearchResult):
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for record in result.records:
            writer.writerow(record_row(record, result))
    logger.info(f"Wrote {len(result.records)} record(s) to {output_path}")


def print_result(result: SearchResult):
    for i, record in enumerate(result.records, 1):
        distance = result.distances_km.get(record.id)
        where = format_distance(distance) if distance is not None else "distance unknown"
        price = known_value(record.price_per_hour)
        price_text = f"${price:.0f}/hr" if price is not None else "price n/a"
        print(f"{i:>3}. {record.name} [{record.sport.value}] {where}, {record.rating:.1f}★, {price_text} ({record.source.value})")
    for error in result.provider_errors:
        print(f"  ! {error.provider.value}: {error.kind.value} {error.message}")
    if not result.records:
        print("No courts found.")


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Initialize logs
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    geocoder = GooglePlacesClient(GOOGLE_PLACES_API_KEY) if GOOGLE_PLACES_API_KEY else None
    location_service = LocationService(source=IpGeolocationSource(), geocoder=geocoder)
    orchestrator = build_default_orchestrator(location_service=location_service)

    try:
        if args.capabilities:
            print(orchestrator.capabilities())
            return 0

        origin = None
        if args.lat is not None and args.lng is not None:
            origin = Coordinates(args.lat, args.lng)
        elif args.near:
            origin = await location_service.geocode(args.near)

        result = await orchestrator.search(
            origin=origin,
            radius_km=args.radius_km,
            sport=Sport(args.sport) if args.sport else None,
            max_results=args.max_results,
            sort_key=SortKey(args.sort),
            active_providers=args.providers,
            keyword=args.keyword,
        )
    except LocationError as e:
        logger.error(f"Search failed: {e.kind.value} ({e.message})")
        return 2
    finally:
        await orchestrator.close()

    print_result(result)
    if args.output:
        write_csv(args.output, result)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
