"""JSON writers for the intermediate dumps and the merged result."""

import json
from pathlib import Path
from typing import Any

from trackfinder.constants import (
    ALL_TRACKS_FILE,
    DEFAULT_OUTPUT_DIR,
    JSON_INDENT,
    PARTIAL_DIR_NAME,
    RAW_DIR_NAME,
    get_logger,
)
from trackfinder.models import Source

logger = get_logger("output")


def write_json(path: Path, data: Any) -> None:
    """Write pretty-printed JSON, creating the parent directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=JSON_INDENT, ensure_ascii=False)


class OutputWriter:
    def __init__(self, output_dir: Path = DEFAULT_OUTPUT_DIR, write_intermediate: bool = True):
        self.output_dir = Path(output_dir)
        self.write_intermediate = write_intermediate

    @property
    def raw_dir(self) -> Path:
        return self.output_dir / RAW_DIR_NAME

    @property
    def partial_dir(self) -> Path:
        return self.output_dir / PARTIAL_DIR_NAME

    @property
    def all_tracks_path(self) -> Path:
        return self.output_dir / ALL_TRACKS_FILE

    def write_raw(self, source: Source, tracks: list) -> None:
        if self.write_intermediate:
            write_json(self.raw_dir / f"{source.value}-raw.json", tracks)

    def write_partial(self, source: Source, tracks: list) -> None:
        if self.write_intermediate:
            write_json(self.partial_dir / f"{source.value}.json", tracks)

    def write_all(self, tracks: list) -> Path:
        write_json(self.all_tracks_path, tracks)
        logger.debug(f"Wrote {len(tracks)} tracks to {self.all_tracks_path}")
        return self.all_tracks_path
