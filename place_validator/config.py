"""Project configuration.

Loads overrides from validator_config.json when available, falling back to
the defaults below. Keep API request shapes centralized here.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- API endpoints ---

PLACES_NEARBY_SEARCH_URL = "https://places.googleapis.com/v1/places:searchNearby"

# --- Field masks ---

PLACES_FIELD_MASK = ",".join(
    [
        "places.id",
        "places.displayName",
        "places.websiteUri",
        "places.nationalPhoneNumber",
        "places.currentOpeningHours",
        "places.googleMapsUri",
        "places.primaryType",
        "places.primaryTypeDisplayName",
        "places.addressComponents",
    ]
)

# --- Places API request shape ---

RANK_PREFERENCE = "DISTANCE"

# --- Radius from zoom ---

BASE_ZOOM = 10
BASE_RADIUS_M = 50000
MIN_RADIUS_M = 100
MAX_RADIUS_M = 50000

# --- Result cache ---

CACHE_MAX_ENTRIES = 10
CACHE_MAX_AGE_MS = 30 * 60 * 1000
CACHE_KEY_DECIMALS = 3

# --- Suppression ---

_DEFAULT_TYPE_BLACKLIST: List[str] = [
    "bus_stop",
    "public_bathroom",
    "doctor",
    "consultant",
    "transit_station",
    "playground",
    "swimming_pool",
]
DEFAULT_TYPE_BLACKLIST: List[str] = list(_DEFAULT_TYPE_BLACKLIST)

# --- Storage keys ---

STORAGE_API_KEY = "md_api_key"
STORAGE_WHITELIST = "md_whitelist"
STORAGE_BLACKLIST = "md_type_blacklist"
STORAGE_CACHE = "md_results_cache"

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20

# --- Store and outputs ---

STORE_DB_PATH = "place_validator.db"
OUTPUT_DIR = "out"


def load_validator_config(path: Optional[str] = None) -> bool:
    """Load configuration overrides from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "validator_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    globals_ref = globals()

    blacklist = data.get("default_type_blacklist")
    if isinstance(blacklist, list):
        globals_ref["DEFAULT_TYPE_BLACKLIST"] = [str(t).strip().lower() for t in blacklist if str(t).strip()]

    cache = data.get("cache", {})
    if "max_entries" in cache:
        globals_ref["CACHE_MAX_ENTRIES"] = max(1, int(cache["max_entries"]))
    if "max_age_minutes" in cache:
        globals_ref["CACHE_MAX_AGE_MS"] = int(float(cache["max_age_minutes"]) * 60 * 1000)

    timeout = data.get("http_timeout_seconds")
    if timeout is not None:
        globals_ref["HTTP_TIMEOUT_SECONDS"] = float(timeout)

    store_path = data.get("store_db_path")
    if store_path:
        globals_ref["STORE_DB_PATH"] = str(store_path)

    return True
