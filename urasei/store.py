"""
JSON-file key-value store for the user's profile and per-day transit cache.

Usage:
    from urasei.store import KeyValueStore, cached_daily_transit
    store = KeyValueStore("chart_data/store.json")
    transit = cached_daily_transit(store, birth_chart, "2026-02-15")
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from urasei.astro_calendar import DateLike, to_datetime
from urasei.western import BirthChart, calculate_daily_transit

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path(__file__).parent.parent / "chart_data" / "store.json"

PROFILE_KEY = "profile"
TRANSIT_KEY_PREFIX = "transit:"


class KeyValueStore:
    """
    Small persistent mapping backed by one JSON file.

    Every write encodes the whole mapping first, then swaps the file into
    place, so a failed write leaves both the file and the mapping untouched.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else DEFAULT_STORE_PATH
        self._data = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt store file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Discarding store file %s: top level is not an object", self.path)
            return {}
        return data

    def _save(self, data: dict):
        text = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, self.path)
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any):
        """Store a value; raises TypeError (and changes nothing) if it is not JSON-serialisable."""
        self._save({**self._data, key: value})

    def delete(self, key: str):
        self.delete_many([key])

    def delete_many(self, keys):
        """Remove several keys with a single write."""
        keys = set(keys)
        if not keys & self._data.keys():
            return
        self._save({k: v for k, v in self._data.items() if k not in keys})

    def clear(self):
        self._save({})

    def keys(self) -> list[str]:
        return list(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


# ============================================================
# PROFILE
# ============================================================

def save_profile(store: KeyValueStore, profile: dict):
    """
    Persist the user's birth profile (birth date/time, location, sign...).

    Cached transits belong to the previous profile, so they are dropped
    whenever the stored profile changes.
    """
    if load_profile(store) != profile:
        clear_transit_cache(store)
    store.set(PROFILE_KEY, profile)


def load_profile(store: KeyValueStore) -> Optional[dict]:
    return store.get(PROFILE_KEY)


# ============================================================
# TRANSIT CACHE
# ============================================================

def transit_key(target_date: DateLike) -> str:
    return TRANSIT_KEY_PREFIX + to_datetime(target_date).date().isoformat()


def cached_daily_transit(store: KeyValueStore, birth_chart: BirthChart,
                         target_date: DateLike) -> dict:
    """
    Daily transit as a dict, computed at most once per calendar day.

    The cache is keyed by date only and is emptied by ``save_profile`` when
    the profile changes.
    """
    key = transit_key(target_date)
    cached = store.get(key)
    if cached is not None:
        logger.info("Transit cache hit for %s", key)
        return cached

    logger.info("Transit cache miss for %s", key)
    transit = calculate_daily_transit(birth_chart, target_date).to_dict()
    store.set(key, transit)
    return transit


def clear_transit_cache(store: KeyValueStore):
    store.delete_many(key for key in store.keys() if key.startswith(TRANSIT_KEY_PREFIX))
