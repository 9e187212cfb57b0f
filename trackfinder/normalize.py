"""Mapping of raw endpoint records into the canonical track shape."""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from trackfinder.constants import DIFFICULTY_LABELS, DIFFICULTY_UNKNOWN_LABEL, TRACK_BASE_URL
from trackfinder.models import CanonicalTrack, RawTrack


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a millisecond epoch (number or numeric string) or an ISO-8601 string.

    Naive ISO values are taken as UTC. Returns None for missing or unparsable input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        millis = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            millis = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    if not math.isfinite(millis):
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def format_date(value: Any) -> Optional[str]:
    parsed = parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d") if parsed else None


def format_duration(value: Any) -> Optional[str]:
    """Render a millisecond offset from the epoch as HH:MM:SS (wraps past 24h)."""
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    parsed = parse_timestamp(value)
    return parsed.strftime("%H:%M:%S") if parsed else None


def truncate_distance(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return math.trunc(number)


def parse_difficulty_level(difficulty_level: Any) -> str:
    return DIFFICULTY_LABELS.get(difficulty_level, DIFFICULTY_UNKNOWN_LABEL)


def normalize_primary(track: RawTrack, track_base_url: str = TRACK_BASE_URL) -> CanonicalTrack:
    return {
        "url": f"{track_base_url}{track.get('id')}",
        "title": track.get("title"),
        "difficultyLevel": parse_difficulty_level(track.get("difficultyLevel")),
        "distance": truncate_distance(track.get("distance")),
        "duration": format_duration(track.get("duration")),
        "area": track.get("area"),
        "created": format_date(track.get("created")),
        "updated": format_date(track.get("updated")),
        "grade": track.get("grade"),
        "reviews": track.get("reviews"),
        "ownerDisplayName": track.get("ownerDisplayName"),
    }


def normalize_legacy(track: RawTrack, track_base_url: str = TRACK_BASE_URL) -> CanonicalTrack:
    """Same mapping as the primary shape, with the nested distance and descriptions."""
    mapped = normalize_primary(track, track_base_url)
    stats = track.get("layersStatistics") or {}
    mapped["distance"] = truncate_distance(stats.get("distance"))
    mapped["description"] = track.get("description")
    mapped["shortDescription"] = track.get("shortDescription")
    return mapped
