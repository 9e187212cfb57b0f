"""Predicate chain applied to raw tracks before normalization.

Every predicate takes the tracks and one threshold and returns the tracks that
pass; ``filter_tracks`` runs them in order and skips the ones whose threshold
is not set.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from trackfinder.config import FilterSet
from trackfinder.constants import OFFROAD_ACTIVITY_TYPE, get_logger
from trackfinder.models import RawTrack
from trackfinder.normalize import parse_timestamp

logger = get_logger("filters")

DistanceAccessor = Callable[[RawTrack], Optional[float]]


def primary_distance(track: RawTrack) -> Optional[float]:
    return track.get("distance")


def legacy_distance(track: RawTrack) -> Optional[float]:
    stats = track.get("layersStatistics") or {}
    return stats.get("distance")


def _at_least(value, threshold) -> bool:
    # A missing value never satisfies a threshold
    return value is not None and value >= threshold


def by_activity_type(tracks: Iterable[RawTrack], activity_type: str = OFFROAD_ACTIVITY_TYPE) -> list[RawTrack]:
    return [track for track in tracks if track.get("activityType") == activity_type]


def by_difficulty(tracks: Iterable[RawTrack], levels: Iterable[int]) -> list[RawTrack]:
    allowed = set(levels)
    return [track for track in tracks if track.get("difficultyLevel") in allowed]


def by_area(tracks: Iterable[RawTrack], area: str) -> list[RawTrack]:
    return [track for track in tracks if track.get("area") == area]


def by_min_distance(
    tracks: Iterable[RawTrack], minimum: float, distance_of: DistanceAccessor = primary_distance
) -> list[RawTrack]:
    """Keep tracks at least ``minimum`` long; tracks without a distance pass."""
    return [track for track in tracks if distance_of(track) is None or distance_of(track) >= minimum]


def by_max_distance(
    tracks: Iterable[RawTrack], maximum: float, distance_of: DistanceAccessor = primary_distance
) -> list[RawTrack]:
    """Keep tracks at most ``maximum`` long; tracks without a distance pass."""
    return [track for track in tracks if distance_of(track) is None or distance_of(track) <= maximum]


def by_min_grade(tracks: Iterable[RawTrack], minimum: float) -> list[RawTrack]:
    return [track for track in tracks if _at_least(track.get("grade"), minimum)]


def by_min_reviews(tracks: Iterable[RawTrack], minimum: int) -> list[RawTrack]:
    return [track for track in tracks if _at_least(track.get("reviews"), minimum)]


def by_min_date(tracks: Iterable[RawTrack], minimum: datetime) -> list[RawTrack]:
    """Keep tracks created strictly after ``minimum``."""
    if minimum.tzinfo is None:
        minimum = minimum.replace(tzinfo=timezone.utc)
    kept = []
    for track in tracks:
        created = parse_timestamp(track.get("created"))
        if created is not None and created > minimum:
            kept.append(track)
    return kept


def by_query(tracks: Iterable[RawTrack], query: str) -> list[RawTrack]:
    """Case-sensitive substring match on title, description or short description."""
    return [
        track
        for track in tracks
        if any(query in (track.get(field) or "") for field in ("title", "description", "shortDescription"))
    ]


def filter_tracks(
    tracks: Iterable[RawTrack],
    filters: FilterSet,
    distance_of: DistanceAccessor = primary_distance,
) -> list[RawTrack]:
    result = by_activity_type(tracks)
    if filters.difficulty_levels:
        result = by_difficulty(result, filters.difficulty_levels)
    if filters.geo_area:
        result = by_area(result, filters.geo_area)
    if filters.min_distance:
        result = by_min_distance(result, filters.min_distance, distance_of)
    if filters.max_distance:
        result = by_max_distance(result, filters.max_distance, distance_of)
    if filters.min_grade:
        result = by_min_grade(result, filters.min_grade)
    if filters.min_reviews:
        result = by_min_reviews(result, filters.min_reviews)
    if filters.min_date:
        result = by_min_date(result, filters.min_date)
    if filters.query:
        result = by_query(result, filters.query)
    logger.debug(f"{len(result)} tracks left after filtering")
    return result
