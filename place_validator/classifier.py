"""Flag places with missing attributes or low-quality names."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .places_client import PlaceRecord

logger = logging.getLogger(__name__)

FLAG_WEBSITE = "Website"
FLAG_PHONE = "Phone number"
FLAG_HOURS = "Hours"
FLAG_EMOJI = "Has emoji in name"

_EMOJI_RE = re.compile(
    "["
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols and pictographs
    "\U0001F680-\U0001F6FF"  # transport and map
    "\U0001F1E0-\U0001F1FF"  # flags
    "\U00002600-\U000026FF"
    "\U00002700-\U000027BF"  # dingbats
    "\U0001F900-\U0001F9FF"
    "\U0001FA70-\U0001FAFF"
    "\U0000FE00-\U0000FE0F"  # variation selectors
    "\U0001F004\U0001F0CF\U0001F18E"
    "\U00003030\U00002B50\U00002B55\U00003297\U00003299\U0000303D"
    "\U00002934-\U00002935"
    "\U00002B05-\U00002B07"
    "\U00002B1B-\U00002B1C"
    "\U000000A9\U000000AE\U00002122"
    "\U000023F3\U000024C2\U000025B6"
    "\U000023E9-\U000023EF"
    "\U000023F8-\U000023FA"
    "]"
)


class Whitelist(Protocol):
    def is_whitelisted(self, place_id: str) -> bool:
        ...


@dataclass(frozen=True)
class ClassificationResult:
    place_id: str
    name: str
    uri: Optional[str]
    flags: Tuple[str, ...]
    primary_type: Optional[str]
    primary_type_display_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.place_id,
            "name": self.name,
            "uri": self.uri,
            "missing": list(self.flags),
            "primaryTypeDisplayName": self.primary_type_display_name,
            "primaryType": self.primary_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["ClassificationResult"]:
        place_id = data.get("id")
        flags = data.get("missing")
        if not isinstance(place_id, str) or not isinstance(flags, list) or not flags:
            return None
        name = data.get("name")
        return cls(
            place_id=place_id,
            name=name if isinstance(name, str) else place_id,
            uri=data.get("uri") if isinstance(data.get("uri"), str) else None,
            flags=tuple(str(f) for f in flags),
            primary_type=data.get("primaryType") if isinstance(data.get("primaryType"), str) else None,
            primary_type_display_name=str(data.get("primaryTypeDisplayName") or ""),
        )


def has_emoji(text: Any) -> bool:
    if not text or not isinstance(text, str):
        return False
    return _EMOJI_RE.search(text) is not None


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def address_fragments(record: PlaceRecord) -> List[str]:
    """Names that would mean the record is just a street address pin."""
    route = record.component("route")
    if route is None:
        return []
    route_texts = [route.short_text, route.long_text]
    fragments = [t for t in route_texts if t is not None]
    street_number = record.component("street_number")
    if street_number is not None:
        for number in (street_number.short_text, street_number.long_text):
            for street in route_texts:
                if number is None or street is None:
                    continue
                fragments.append(f"{number} {street}")
    return fragments


def is_address_pin(record: PlaceRecord) -> bool:
    return record.name in address_fragments(record)


def missing_flags(record: PlaceRecord) -> List[str]:
    flags: List[str] = []
    if _is_blank(record.website_uri):
        flags.append(FLAG_WEBSITE)
    if _is_blank(record.phone_number):
        flags.append(FLAG_PHONE)
    if not record.has_opening_hours:
        flags.append(FLAG_HOURS)
    if has_emoji(record.name):
        flags.append(FLAG_EMOJI)
    return flags


def classify(records: Iterable[PlaceRecord], whitelist: Optional[Whitelist] = None) -> List[ClassificationResult]:
    """Return flagged records in input order, minus address pins and whitelisted ids."""
    results: List[ClassificationResult] = []
    for record in records:
        if is_address_pin(record):
            logger.debug("Skipping address pin %s (%s)", record.place_id, record.name)
            continue
        flags = missing_flags(record)
        if not flags:
            continue
        results.append(
            ClassificationResult(
                place_id=record.place_id,
                name=record.name,
                uri=record.maps_uri,
                flags=tuple(flags),
                primary_type=record.primary_type,
                primary_type_display_name=record.primary_type_display_name,
            )
        )
    if whitelist is not None:
        results = [r for r in results if not whitelist.is_whitelisted(r.place_id)]
    return results
