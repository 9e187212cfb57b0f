import locale
import threading
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, TypedDict


class LayersStatistics(TypedDict, total=False):
    distance: Optional[float]


class RawTrack(TypedDict, total=False):
    """Track as returned by any of the search endpoints.

    Primary records carry ``distance`` directly, legacy and by-user records
    nest it under ``layersStatistics``.
    """

    id: Any
    title: Optional[str]
    description: Optional[str]
    shortDescription: Optional[str]
    activityType: str
    difficultyLevel: Optional[int]
    area: Optional[str]
    distance: Optional[float]
    layersStatistics: Optional[LayersStatistics]
    grade: Optional[float]
    reviews: Optional[int]
    created: Any
    updated: Any
    duration: Any
    ownerDisplayName: Optional[str]


# Canonical records stay plain dicts so merging is a field-level overlay and
# serialization keeps the key order produced by the normalizers.
CanonicalTrack = dict[str, Any]


class Source(Enum):
    PRIMARY = "tracks"
    LEGACY = "legacy-tracks"
    BY_USER = "tracks-by-user"

    @property
    def is_legacy_shape(self) -> bool:
        return self is not Source.PRIMARY

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


def _title_sort_key(track: CanonicalTrack) -> tuple[bool, str]:
    title = track.get("title")
    if not title:
        return True, ""
    # strxfrm rejects embedded NUL characters
    text = str(title).replace("\x00", "")
    try:
        return False, locale.strxfrm(text)
    except ValueError:
        return False, text


class TrackCollection:
    """Deduplicated set of canonical tracks keyed by url.

    When the same url is merged twice, fields already stored win over the
    incoming ones; only fields the stored record lacks are filled in.
    """

    def __init__(self, tracks: Iterable[CanonicalTrack] = ()):
        self._lock = threading.Lock()
        self._tracks: list[CanonicalTrack] = []
        self._index: dict[str, int] = {}
        self.merge(tracks)

    def merge(self, tracks: Iterable[CanonicalTrack]) -> None:
        with self._lock:
            for track in tracks:
                url = track["url"]
                idx = self._index.get(url)
                if idx is None:
                    self._index[url] = len(self._tracks)
                    self._tracks.append(dict(track))
                else:
                    self._tracks[idx] = {**track, **self._tracks[idx]}

    def sorted_tracks(self) -> list[CanonicalTrack]:
        """Tracks ordered by title, untitled tracks last."""
        with self._lock:
            return sorted(self._tracks, key=_title_sort_key)

    def get(self, url: str) -> Optional[CanonicalTrack]:
        with self._lock:
            idx = self._index.get(url)
            return None if idx is None else self._tracks[idx]

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[CanonicalTrack]:
        with self._lock:
            return iter(list(self._tracks))
