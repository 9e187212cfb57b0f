"""Filter set and user directory loading."""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from trackfinder.constants import get_logger

logger = get_logger("config")

# JSON keys of the filters file mapped to FilterSet fields
_FILTER_KEYS = {
    "query": "query",
    "userDisplayName": "user_display_name",
    "adventureUserId": "adventure_user_id",
    "minGrade": "min_grade",
    "minReviews": "min_reviews",
    # spelling used by older filter files
    "minReviws": "min_reviews",
    "difficultyLevels": "difficulty_levels",
    "minDistance": "min_distance",
    "maxDistance": "max_distance",
    "minDate": "min_date",
    "geoArea": "geo_area",
}


def parse_date(value: str) -> datetime:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("expected a string")
    return value


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError("expected a number")
    return value


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("expected an integer")
    return value


def _levels(value: Any) -> frozenset[int]:
    if not isinstance(value, list):
        raise TypeError("expected a list of levels")
    return frozenset(_count(level) for level in value)


def _user_id(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError("expected a string or integer id")
    return str(value)


def _date(value: Any) -> datetime:
    return parse_date(_text(value))


_FILTER_PARSERS = {
    "adventure_user_id": _user_id,
    "min_grade": _number,
    "min_reviews": _count,
    "difficulty_levels": _levels,
    "min_distance": _number,
    "max_distance": _number,
    "min_date": _date,
}


@dataclass(frozen=True)
class FilterSet:
    """Search filters. A falsy value disables the matching predicate."""

    query: str = ""
    user_display_name: Optional[str] = None
    adventure_user_id: Optional[str] = None
    min_grade: Optional[float] = None
    min_reviews: Optional[int] = None
    difficulty_levels: frozenset[int] = field(default_factory=frozenset)
    min_distance: Optional[float] = None
    max_distance: Optional[float] = None
    min_date: Optional[datetime] = None
    geo_area: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterSet":
        """Build filters from the JSON mapping.

        Unknown keys are logged and skipped. An invalid value raises ValueError.
        """
        if not isinstance(data, dict):
            raise ValueError(f"filters must be a JSON object, got {type(data).__name__}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _FILTER_KEYS.get(key)
            if name is None:
                logger.warning(f"Ignoring unknown filter '{key}'")
                continue
            if value is None or value == "":
                continue
            try:
                values[name] = _FILTER_PARSERS.get(name, _text)(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"invalid value for filter '{key}': {value!r} ({e})") from e

        return cls(**values)

    @classmethod
    def load(cls, path: Path) -> "FilterSet":
        """Load filters from a JSON file. A missing file disables all filters.

        A file that cannot be parsed raises ValueError rather than running unfiltered.
        """
        if not path.exists():
            logger.debug(f"Filters file {path} not found, all filters disabled")
            return cls()

        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}: {e}") from e
        try:
            filters = cls.from_dict(data)
        except ValueError as e:
            raise ValueError(f"{path}: {e}") from e
        logger.debug(f"Filters loaded from {path}")
        return filters

    def with_overrides(self, **overrides: Any) -> "FilterSet":
        """Return a copy with every non-None override applied."""
        changes = {name: value for name, value in overrides.items() if value is not None}
        if "difficulty_levels" in changes:
            changes["difficulty_levels"] = frozenset(changes["difficulty_levels"])
        return replace(self, **changes)


def load_user_directory(path: Path) -> list[dict[str, Any]]:
    """Load the list of known users (``ownerDisplayName`` / ``myAdventureUserId``)."""
    if not path.exists():
        logger.debug(f"User directory {path} not found")
        return []

    try:
        with open(path, encoding="utf-8") as f:
            users = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Could not read user directory {path}: {e}")
        return []

    if not isinstance(users, list):
        logger.warning(f"User directory {path} must contain a list")
        return []
    return users


def resolve_user_id(users: list[dict[str, Any]], display_name: Optional[str]) -> Optional[str]:
    if not display_name:
        return None
    for user in users:
        if user.get("ownerDisplayName") == display_name:
            user_id = user.get("myAdventureUserId")
            return str(user_id) if user_id is not None else None
    logger.warning(f"User '{display_name}' not found in the user directory")
    return None
