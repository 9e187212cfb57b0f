import argparse
import locale
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from trackfinder.clients.offroad_client import OffroadClient
from trackfinder.config import FilterSet, load_user_directory, parse_date, resolve_user_id
from trackfinder.constants import (
    DEFAULT_FILTERS_FILE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_USERS_FILE,
    GEO_AREAS,
    setup_logging,
)
from trackfinder.output import OutputWriter
from trackfinder.service import TrackSearchService


def _difficulty_levels(value: str) -> list[int]:
    try:
        levels = [int(level) for level in value.split(",") if level.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid difficulty levels: {value!r}")
    if any(level not in (1, 3, 5) for level in levels):
        raise argparse.ArgumentTypeError("difficulty levels must be 1 (easy), 3 (moderate) or 5 (hard)")
    return levels


def _date(value: str):
    try:
        return parse_date(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect off-road tracks from the three search endpoints into one file")
    parser.add_argument("--filters", type=Path, default=DEFAULT_FILTERS_FILE, help="JSON file with the filter set")
    parser.add_argument("--users", type=Path, default=DEFAULT_USERS_FILE, help="JSON user directory for --user lookups")
    parser.add_argument("--query", help="Free-text search, matched case-sensitively")
    parser.add_argument("--user", dest="user_display_name", help="Owner display name to fetch tracks by user")
    parser.add_argument("--min-grade", type=float)
    parser.add_argument("--min-reviews", type=int)
    parser.add_argument("--difficulty", type=_difficulty_levels, help="Comma separated levels, e.g. 3,5")
    parser.add_argument("--min-distance", type=float)
    parser.add_argument("--max-distance", type=float)
    parser.add_argument("--min-date", type=_date, help="Only tracks created after this date (YYYY-MM-DD)")
    parser.add_argument("--area", choices=GEO_AREAS)
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--no-intermediate", action="store_true", help="Skip the raw and partial dumps")
    parser.add_argument("--env-file", default=".env", help="Path to .env file with endpoint overrides")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def load_environment(env_file: str) -> None:
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)


def build_filters(args: argparse.Namespace) -> FilterSet:
    filters = FilterSet.load(args.filters).with_overrides(
        query=args.query,
        user_display_name=args.user_display_name,
        min_grade=args.min_grade,
        min_reviews=args.min_reviews,
        difficulty_levels=args.difficulty,
        min_distance=args.min_distance,
        max_distance=args.max_distance,
        min_date=args.min_date,
        geo_area=args.area,
    )
    if filters.user_display_name:
        users = load_user_directory(args.users)
        user_id = resolve_user_id(users, filters.user_display_name)
        if user_id or args.user_display_name:
            filters = replace(filters, adventure_user_id=user_id)
    return filters


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logging(args.verbose)
    load_environment(args.env_file)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        pass

    try:
        filters = build_filters(args)
    except ValueError as e:
        logger.error(f"Invalid filters: {e}")
        return 2

    writer = OutputWriter(args.output_dir, write_intermediate=not args.no_intermediate)
    service = TrackSearchService(OffroadClient(), writer)
    report = service.run(filters)
    path = writer.write_all(report.collection.sorted_tracks())

    for source, outcome in report.outcomes.items():
        status = f"{len(outcome.tracks)}/{outcome.fetched} tracks" if outcome.ok else f"failed ({outcome.error})"
        print(f"{source.label}: {status}")
    print(f"Unique tracks count: {len(report.collection)}")
    print(f"Saved to {path}")
    return 1 if len(report.failed) == len(report.outcomes) else 0


if __name__ == "__main__":
    raise SystemExit(main())
