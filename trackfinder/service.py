import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Optional

from trackfinder.clients.offroad_client import OffroadClient
from trackfinder.config import FilterSet
from trackfinder.constants import PIPELINE_WORKERS, TRACK_BASE_URL, get_logger
from trackfinder.filters import filter_tracks, legacy_distance, primary_distance
from trackfinder.models import CanonicalTrack, RawTrack, Source, TrackCollection
from trackfinder.normalize import normalize_legacy, normalize_primary
from trackfinder.output import OutputWriter

logger = get_logger("service")

# Merge order: earlier sources win field conflicts for the same url
MERGE_ORDER = (Source.PRIMARY, Source.LEGACY, Source.BY_USER)


@dataclass
class PipelineOutcome:
    source: Source
    fetched: int = 0
    kept: list[RawTrack] = field(default_factory=list)
    tracks: list[CanonicalTrack] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SearchReport:
    collection: TrackCollection
    outcomes: dict[Source, PipelineOutcome]

    @property
    def failed(self) -> list[Source]:
        return [source for source, outcome in self.outcomes.items() if not outcome.ok]


class TrackSearchService:
    def __init__(self, client: OffroadClient, writer: Optional[OutputWriter] = None, workers: int = PIPELINE_WORKERS):
        self.client = client
        self.writer = writer
        self.workers = workers
        self.track_base_url = os.environ.get("OFFROAD_TRACK_URL", TRACK_BASE_URL)

    def run(self, filters: FilterSet, collection: Optional[TrackCollection] = None) -> SearchReport:
        """Run the three search pipelines concurrently and merge whatever succeeds.

        A failing pipeline is logged and contributes no tracks; it never aborts the others.
        """
        collection = collection if collection is not None else TrackCollection()
        outcomes: dict[Source, PipelineOutcome] = {}

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {executor.submit(self._pipeline, source, filters): source for source in MERGE_ORDER}
            for future in as_completed(futures):
                source = futures[future]
                try:
                    outcomes[source] = future.result()
                except Exception as e:
                    logger.error(f"Pipeline '{source.label}' failed: {e}")
                    outcomes[source] = PipelineOutcome(source=source, error=e)

        outcomes = {source: outcomes[source] for source in MERGE_ORDER}
        for outcome in outcomes.values():
            collection.merge(outcome.tracks)
            if self.writer is not None and outcome.ok:
                self._write_dumps(outcome)

        logger.info(f"Unique tracks count: {len(collection)}")
        return SearchReport(collection=collection, outcomes=outcomes)

    def _fetch(self, source: Source, filters: FilterSet) -> list[RawTrack]:
        if source is Source.PRIMARY:
            return self.client.search_tracks(filters.query)
        if source is Source.LEGACY:
            return self.client.filter_legacy_tracks(filters.difficulty_levels, filters.geo_area)
        return self.client.get_tracks_by_user(filters.adventure_user_id)

    def _pipeline(self, source: Source, filters: FilterSet) -> PipelineOutcome:
        raw = self._fetch(source, filters)
        logger.info(f"Initial {source.label} tracks count = {len(raw)}")

        distance_of = legacy_distance if source.is_legacy_shape else primary_distance
        kept = filter_tracks(raw, filters, distance_of)
        logger.info(f"{source.label} tracks count = {len(kept)}")

        normalize: Callable[..., CanonicalTrack] = normalize_legacy if source.is_legacy_shape else normalize_primary
        tracks = [normalize(track, self.track_base_url) for track in kept]

        return PipelineOutcome(source=source, fetched=len(raw), kept=kept, tracks=tracks)

    def _write_dumps(self, outcome: PipelineOutcome) -> None:
        """Mirror one pipeline's filtered and normalized tracks to disk.

        The dumps are never read back, so a failed write is logged and the run goes on.
        """
        try:
            self.writer.write_raw(outcome.source, outcome.kept)
            self.writer.write_partial(outcome.source, outcome.tracks)
        except OSError as e:
            logger.warning(f"Could not write {outcome.source.label} dumps: {e}")
