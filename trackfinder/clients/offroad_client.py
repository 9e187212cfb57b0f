import os
from typing import Any, Iterable, Optional
from urllib.parse import quote

import requests

from trackfinder.constants import (
    BY_USER_URL,
    LEGACY_DIFFICULTY_TOKENS,
    LEGACY_SEARCH_URL,
    REQUEST_TIMEOUT_SEC,
    SEARCH_URL,
    get_logger,
)
from trackfinder.models import RawTrack

logger = get_logger("offroad")

# Characters JavaScript's encodeURI leaves untouched besides alphanumerics and "-_.~"
_URI_SAFE = ";,/?:@&=+$!*'()#"


class UnexpectedResponseError(ValueError):
    """Response body does not have the envelope the endpoint is known for."""


def encode_uri(url: str) -> str:
    return quote(url, safe=_URI_SAFE)


def build_search_url(query: str, base_url: str = SEARCH_URL) -> str:
    return base_url + (query or "")


def build_legacy_url(
    difficulty_levels: Iterable[int] = (), geo_area: Optional[str] = None, base_url: str = LEGACY_SEARCH_URL
) -> str:
    url = base_url
    levels = set(difficulty_levels or ())
    if levels:
        tokens = [token for level, token in LEGACY_DIFFICULTY_TOKENS if level in levels]
        url += "&diffLevel=" + ",".join(tokens)
    if geo_area:
        url += f"&area={geo_area}"
    return url


def build_by_user_url(user_id: str, base_url: str = BY_USER_URL) -> str:
    return f"{base_url}{user_id}"


class OffroadClient:
    """Thin wrapper around the three off-road track search endpoints."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT_SEC):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.search_url = os.environ.get("OFFROAD_SEARCH_URL", SEARCH_URL)
        self.legacy_url = os.environ.get("OFFROAD_LEGACY_URL", LEGACY_SEARCH_URL)
        self.by_user_url = os.environ.get("OFFROAD_BY_USER_URL", BY_USER_URL)

    def search_tracks(self, query: str = "") -> list[RawTrack]:
        url = build_search_url(query, self.search_url)
        logger.info(f"Tracks URL: {url}")
        data = self._get(url)
        return self._envelope(data, "items", url)

    def filter_legacy_tracks(self, difficulty_levels: Iterable[int] = (), geo_area: Optional[str] = None) -> list[RawTrack]:
        url = build_legacy_url(difficulty_levels, geo_area, self.legacy_url)
        logger.info(f"Legacy URL: {url}")
        data = self._get(url)
        return self._unwrap(self._envelope(data, "items", url), url)

    def get_tracks_by_user(self, user_id: Optional[str]) -> list[RawTrack]:
        if not user_id:
            logger.debug("No user id configured, skipping tracks by user")
            return []
        url = build_by_user_url(user_id, self.by_user_url)
        logger.info(f"Tracks by user URL: {url}")
        data = self._get(url)
        tracks = self._unwrap(self._envelope(data, "trackResults", url), url)
        logger.info(f"Tracks by user [{data.get('userDisplayName')}]: {len(tracks)}")
        return tracks

    def _get(self, url: str) -> dict[str, Any]:
        response = self.session.get(encode_uri(url), timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise UnexpectedResponseError(f"{url}: expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _envelope(data: dict[str, Any], key: str, url: str) -> list[Any]:
        items = data.get(key)
        if not isinstance(items, list):
            raise UnexpectedResponseError(f"{url}: response has no '{key}' list")
        return items

    @staticmethod
    def _unwrap(items: list[Any], url: str) -> list[RawTrack]:
        tracks: list[RawTrack] = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("track"), dict):
                raise UnexpectedResponseError(f"{url}: item without a 'track' object")
            tracks.append(item["track"])
        return tracks
