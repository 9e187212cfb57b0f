"""Constants and configuration for the track finder."""

import logging
import sys
from pathlib import Path

# --- Endpoints ---
TRACK_BASE_URL = "https://off-road.io/track/"
SEARCH_URL = "https://tracks.off-road.io/v1/tracks?limit=200&query="
LEGACY_SEARCH_URL = "https://api.off-road.io/_ah/api/tracks/filter?activityType=OffRoading"
BY_USER_URL = "https://api.off-road.io/_ah/api/offroadApi/v2/getMoreByUser/"

# --- Track classification ---
OFFROAD_ACTIVITY_TYPE = "OffRoading"

# (1 = easy, 3 = moderate, 5 = hard)
DIFFICULTY_LABELS = {5: "Hard", 3: "Moderate", 1: "Easy"}
DIFFICULTY_UNKNOWN_LABEL = "N/A"
# Order matters: the legacy endpoint expects easy,moderate,hard
LEGACY_DIFFICULTY_TOKENS = ((1, "easy"), (3, "moderate"), (5, "hard"))

GEO_AREAS = (
    "CARMEL_RAMOT_MENASHE",
    "JERUSALEM_MOUNT_SHFELA",
    "NEGEV_CENTER_MACHTESHIM",
    "NEGEV_NORTH",
)

# --- Network ---
REQUEST_TIMEOUT_SEC = 60
PIPELINE_WORKERS = 3

# --- Files ---
DEFAULT_OUTPUT_DIR = Path("output")
RAW_DIR_NAME = "raw"
PARTIAL_DIR_NAME = "partial"
ALL_TRACKS_FILE = "all-tracks.json"
DEFAULT_FILTERS_FILE = Path("input") / "filters.json"
DEFAULT_USERS_FILE = Path("input") / "user-ids.json"
JSON_INDENT = 4

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    logger = logging.getLogger("trackfinder")
    logger.setLevel(level)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"trackfinder.{name}")
