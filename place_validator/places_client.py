"""Places API nearby-search client and response normalization."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from . import config
from .http import HttpClient, RequestMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddressComponent:
    types: FrozenSet[str]
    short_text: Optional[str] = None
    long_text: Optional[str] = None


@dataclass(frozen=True)
class PlaceRecord:
    place_id: str
    name: str
    website_uri: Optional[str] = None
    phone_number: Optional[str] = None
    has_opening_hours: bool = False
    maps_uri: Optional[str] = None
    primary_type: Optional[str] = None
    primary_type_display_name: str = ""
    address_components: Tuple[AddressComponent, ...] = field(default_factory=tuple)

    def component(self, type_tag: str) -> Optional[AddressComponent]:
        for comp in self.address_components:
            if type_tag in comp.types:
                return comp
        return None


class PlacesClient:
    def __init__(
        self,
        http_client: HttpClient,
        field_mask: str = config.PLACES_FIELD_MASK,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.http = http_client
        self.field_mask = field_mask
        self.metrics = metrics

    def search_nearby(
        self,
        lat: float,
        lng: float,
        radius_m: int,
        excluded_types: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        body = build_nearby_search_body(lat, lng, radius_m, excluded_types)
        if self.metrics is not None:
            self.metrics.inc_network()
        return self.http.post_json(config.PLACES_NEARBY_SEARCH_URL, body, self.field_mask)


def build_nearby_search_body(
    lat: float,
    lng: float,
    radius_m: int,
    excluded_types: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "locationRestriction": {
            "circle": {
                "center": {"latitude": lat, "longitude": lng},
                "radius": radius_m,
            }
        },
        "rankPreference": config.RANK_PREFERENCE,
    }
    if excluded_types:
        body["excludedTypes"] = list(excluded_types)
    return body


# Adapter/mapper for Places response fields

def resolve_display_name(place: Dict[str, Any], place_id: str) -> str:
    display = place.get("displayName")
    if isinstance(display, str):
        return display
    if isinstance(display, dict):
        if isinstance(display.get("text"), str):
            return display["text"]
        if isinstance(display.get("name"), str):
            return display["name"]
    return place_id


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _type_display_name(value: Any) -> str:
    if isinstance(value, dict):
        text = value.get("text")
        return text if isinstance(text, str) else ""
    if isinstance(value, str):
        return value
    return ""


def parse_address_components(raw: Any) -> Tuple[AddressComponent, ...]:
    if not isinstance(raw, list):
        return ()
    parsed: List[AddressComponent] = []
    for comp in raw:
        if not isinstance(comp, dict):
            continue
        types = comp.get("types") or []
        if not isinstance(types, list):
            types = []
        parsed.append(
            AddressComponent(
                types=frozenset(t for t in types if isinstance(t, str)),
                short_text=_optional_str(comp.get("shortText", comp.get("short_name"))),
                long_text=_optional_str(comp.get("longText", comp.get("long_name"))),
            )
        )
    return tuple(parsed)


def extract_places(response: Any) -> List[Any]:
    """Return the raw place list from either the ``places`` or legacy ``results`` container."""
    if not isinstance(response, dict):
        return []
    places = response.get("places")
    if isinstance(places, list):
        return places
    results = response.get("results")
    if isinstance(results, list):
        return results
    return []


def parse_place(place: Any) -> Optional[PlaceRecord]:
    if not isinstance(place, dict):
        return None
    place_id = place.get("id") or place.get("placeId") or place.get("place_id")
    if not isinstance(place_id, str) or not place_id:
        return None
    return PlaceRecord(
        place_id=place_id,
        name=resolve_display_name(place, place_id),
        website_uri=_optional_str(place.get("websiteUri")),
        phone_number=_optional_str(place.get("nationalPhoneNumber")),
        has_opening_hours=isinstance(place.get("currentOpeningHours"), dict),
        maps_uri=_optional_str(place.get("googleMapsUri")),
        primary_type=_optional_str(place.get("primaryType")),
        primary_type_display_name=_type_display_name(place.get("primaryTypeDisplayName")),
        address_components=parse_address_components(place.get("addressComponents")),
    )


def parse_places_response(response: Any) -> List[PlaceRecord]:
    parsed: List[PlaceRecord] = []
    for raw in extract_places(response):
        record = parse_place(raw)
        if record is None:
            logger.debug("Skipping place without an id: %r", raw)
            continue
        parsed.append(record)
    return parsed
