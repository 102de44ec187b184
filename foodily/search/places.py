from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from ..config import DEFAULT_APP_CONFIG
from .models import GeoPoint, PlaceDetails

logger = logging.getLogger(__name__)

PLACES_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
_FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.location",
    "places.internationalPhoneNumber",
    "places.websiteUri",
    "places.rating",
])


def search_place_by_name(
    restaurant_name: str,
    api_key: str | None = None,
    timeout: float = 10.0,
) -> PlaceDetails | None:
    """Resolve a restaurant name to its Places listing. ``None`` when unknown or unconfigured."""
    api_key = DEFAULT_APP_CONFIG.places_api_key if api_key is None else api_key
    if not api_key:
        logger.warning("Google Places API key not configured, skipping place search")
        return None

    try:
        response = httpx.post(
            PLACES_SEARCH_URL,
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": api_key,
                "X-Goog-FieldMask": _FIELD_MASK,
            },
            json={"textQuery": restaurant_name, "maxResultCount": 1},
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError):
        logger.warning("Places lookup failed for %r", restaurant_name, exc_info=True)
        return None

    places = data.get("places") or []
    if not places:
        logger.info("No place found for %r", restaurant_name)
        return None

    place = places[0]
    loc = place.get("location")
    return PlaceDetails(
        place_id=place["id"],
        name=(place.get("displayName") or {}).get("text") or restaurant_name,
        formatted_address=place.get("formattedAddress"),
        location=GeoPoint(latitude=loc["latitude"], longitude=loc["longitude"]) if loc else None,
        phone_number=place.get("internationalPhoneNumber"),
        website=place.get("websiteUri"),
        rating=place.get("rating"),
    )


def google_maps_url(restaurant_name: str, place: PlaceDetails | None = None) -> str:
    """Directions link when coordinates are known, otherwise a name search link."""
    if place is not None and place.location is not None:
        return (
            "https://www.google.com/maps/dir/?api=1&destination="
            f"{place.location.latitude},{place.location.longitude}"
        )
    return f"https://www.google.com/maps/search/?api=1&query={quote(restaurant_name)}"
