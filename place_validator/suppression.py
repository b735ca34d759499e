"""Persistent per-place whitelist and per-type blacklist."""
from __future__ import annotations

import logging
from typing import List, Set

from . import config
from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)


def normalize_type(type_tag: str) -> str:
    return (type_tag or "").strip().lower()


class SuppressionStore:
    """Whitelist of place ids and blacklist of lower-cased type tags.

    Both lists are loaded once at construction and written back to the store
    on every mutation. The seed blacklist applies only when nothing has been
    persisted yet; a saved empty blacklist stays empty.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        whitelist = load_json(store, config.STORAGE_WHITELIST, list) or []
        self._whitelist: List[str] = []
        for place_id in whitelist:
            if isinstance(place_id, str) and place_id not in self._whitelist:
                self._whitelist.append(place_id)

        blacklist = load_json(store, config.STORAGE_BLACKLIST, list)
        if blacklist is None:
            blacklist = list(config.DEFAULT_TYPE_BLACKLIST)
        self._blacklist: List[str] = []
        for type_tag in blacklist:
            if not isinstance(type_tag, str):
                continue
            tag = normalize_type(type_tag)
            if tag and tag not in self._blacklist:
                self._blacklist.append(tag)

    def is_whitelisted(self, place_id: str) -> bool:
        return place_id in self._whitelist

    def whitelist(self) -> Set[str]:
        return set(self._whitelist)

    def add_to_whitelist(self, place_id: str) -> None:
        if place_id in self._whitelist:
            return
        self._whitelist.append(place_id)
        save_json(self.store, config.STORAGE_WHITELIST, self._whitelist)
        logger.info("Whitelisted place %s", place_id)

    def blacklisted_types(self) -> Set[str]:
        return set(self._blacklist)

    def blacklist_for_request(self) -> List[str]:
        return list(self._blacklist)

    def add_to_blacklist(self, type_tag: str) -> None:
        tag = normalize_type(type_tag)
        if not tag or tag in self._blacklist:
            return
        self._blacklist.append(tag)
        save_json(self.store, config.STORAGE_BLACKLIST, self._blacklist)
        logger.info("Blacklisted type %s; applies from the next scan", tag)

    def remove_from_blacklist(self, type_tag: str) -> None:
        tag = normalize_type(type_tag)
        if tag not in self._blacklist:
            return
        self._blacklist.remove(tag)
        save_json(self.store, config.STORAGE_BLACKLIST, self._blacklist)
        logger.info("Removed type %s from blacklist", tag)
