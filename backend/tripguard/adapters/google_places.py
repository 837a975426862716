"""Place search/detail adapter using Google Places API (New).

Docs: https://developers.google.com/maps/documentation/places/web-service
"""

import time
from typing import Any

import httpx

from backend.tripguard.models.places import AutocompleteSuggestion, PlaceDetail, PlaceResult
from backend.tripguard.planning.closing_time import (
    DEFAULT_UTC_OFFSET_MINUTES,
    resolve_place_closing_time,
)
from backend.tripguard.utils.logging import StructuredProviderLogger

PROVIDER = "google_places"

SEARCH_FIELD_MASK = (
    "places.id,places.displayName,places.location,places.formattedAddress,places.types"
)
DETAIL_FIELD_MASK = (
    "id,displayName,location,formattedAddress,"
    "currentOpeningHours,regularOpeningHours,utcOffsetMinutes"
)
AUTOCOMPLETE_FIELD_MASK = (
    "suggestions.placePrediction.placeId,"
    "suggestions.placePrediction.text,"
    "suggestions.placePrediction.structuredFormat"
)

NEARBY_TYPES = [
    "cafe",
    "restaurant",
    "book_store",
    "shopping_mall",
    "park",
    "museum",
    "art_gallery",
    "tourist_attraction",
]


def _place_result(p: dict[str, Any]) -> PlaceResult:
    location = p.get("location") or {}
    return PlaceResult(
        place_id=p.get("id", ""),
        name=(p.get("displayName") or {}).get("text", ""),
        lat=location.get("latitude", 0.0),
        lng=location.get("longitude", 0.0),
        address=p.get("formattedAddress", ""),
        types=p.get("types") or [],
    )


class GooglePlacesClient:
    """Places API client implementing PlaceSearch and PlaceDetails."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://places.googleapis.com/v1",
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 4.0,
        default_utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
        language_code: str = "ja",
        region_code: str = "jp",
    ) -> None:
        """Initialize Places client.

        Args:
            api_key: Google API key (empty disables outbound calls)
            base_url: Places API base URL
            client: Optional httpx client (for testing with mocks)
            timeout_seconds: Per-request timeout when no client is given
            default_utc_offset_minutes: Offset used when a place reports none
            language_code: Result language
            region_code: Region used for autocomplete restriction
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._default_utc_offset_minutes = default_utc_offset_minutes
        self._language_code = language_code
        self._region_code = region_code
        self._log = StructuredProviderLogger()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        field_mask: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Send one request; None on transport or HTTP errors."""
        if not self._api_key:
            self._log.log_call(PROVIDER, operation, "skipped", 0.0, error_reason="no_api_key")
            return None

        headers = {"X-Goog-Api-Key": self._api_key, "X-Goog-FieldMask": field_mask}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_seconds)
            close_client = True

        started = time.perf_counter()
        try:
            response = await client.request(
                method, f"{self._base_url}/{path}", headers=headers, json=body
            )
            latency_ms = (time.perf_counter() - started) * 1000
            if response.is_error:
                self._log.log_call(
                    PROVIDER,
                    operation,
                    "error",
                    latency_ms,
                    error_reason=f"http_{response.status_code}",
                    body=response.text[:500],
                )
                return None

            data: dict[str, Any] = response.json()
            self._log.log_call(PROVIDER, operation, "success", latency_ms)
            return data
        except (httpx.HTTPError, ValueError) as e:
            latency_ms = (time.perf_counter() - started) * 1000
            self._log.log_call(
                PROVIDER, operation, "error", latency_ms, error_reason=type(e).__name__
            )
            return None
        finally:
            if close_client:
                await client.aclose()

    async def search_nearby(
        self, lat: float, lng: float, radius_m: int = 1000, max_results: int = 20
    ) -> list[PlaceResult]:
        """Points of interest within radius_m of (lat, lng)."""
        body = {
            "includedTypes": NEARBY_TYPES,
            "maxResultCount": max_results,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": radius_m,
                }
            },
        }
        data = await self._request(
            "search_nearby", "POST", "places:searchNearby", SEARCH_FIELD_MASK, body
        )
        if data is None:
            return []
        return [_place_result(p) for p in data.get("places") or []]

    async def search_text(self, query: str) -> PlaceResult | None:
        """Top match for a free-text place name."""
        body = {"textQuery": query, "maxResultCount": 1, "languageCode": self._language_code}
        data = await self._request(
            "search_text", "POST", "places:searchText", SEARCH_FIELD_MASK, body
        )
        if not data or not data.get("places"):
            return None
        return _place_result(data["places"][0])

    async def get_place_detail(self, place_id: str) -> PlaceDetail | None:
        """Place detail with today's closing time in the place's local offset."""
        p = await self._request("get_place_detail", "GET", f"places/{place_id}", DETAIL_FIELD_MASK)
        if p is None:
            return None

        location = p.get("location") or {}
        return PlaceDetail(
            place_id=p.get("id") or place_id,
            name=(p.get("displayName") or {}).get("text", ""),
            lat=location.get("latitude", 0.0),
            lng=location.get("longitude", 0.0),
            address=p.get("formattedAddress", ""),
            closing_time=resolve_place_closing_time(p, self._default_utc_offset_minutes),
        )

    async def autocomplete(
        self, text: str, lat: float | None = None, lng: float | None = None
    ) -> list[AutocompleteSuggestion]:
        """Predictions for partially typed place names (min 2 characters)."""
        if not text or len(text.strip()) < 2:
            return []

        body: dict[str, Any] = {
            "input": text.strip(),
            "languageCode": self._language_code,
            "includedRegionCodes": [self._region_code],
        }
        if lat is not None and lng is not None:
            body["locationBias"] = {
                "circle": {"center": {"latitude": lat, "longitude": lng}, "radius": 50000}
            }

        data = await self._request(
            "autocomplete", "POST", "places:autocomplete", AUTOCOMPLETE_FIELD_MASK, body
        )
        if data is None:
            return []

        suggestions: list[AutocompleteSuggestion] = []
        for s in data.get("suggestions") or []:
            pp = s.get("placePrediction")
            if not pp:
                continue

            # placeId, or "places/<id>" in the place field
            place_id = pp.get("placeId")
            if not place_id and isinstance(pp.get("place"), str):
                place_id = pp["place"].removeprefix("places/")
            if not place_id:
                continue

            structured = pp.get("structuredFormat") or {}
            full = (pp.get("text") or {}).get("text")
            main_text = (structured.get("mainText") or {}).get("text") or full or ""
            secondary_text = (structured.get("secondaryText") or {}).get("text", "")
            full_text = full or f"{main_text} {secondary_text}".strip() or main_text

            suggestions.append(
                AutocompleteSuggestion(
                    place_id=place_id,
                    main_text=main_text,
                    secondary_text=secondary_text,
                    full_text=full_text,
                )
            )

        return suggestions
