"""Transit duration adapter using Google Routes API (computeRoutes, TRANSIT).

Docs: https://developers.google.com/maps/documentation/routes
"""

import logging
import math
import re
import time
from datetime import datetime
from typing import Any

import httpx

from backend.tripguard.utils.logging import StructuredProviderLogger

logger = logging.getLogger(__name__)

PROVIDER = "google_routes"

FIELD_MASK = "routes.duration,routes.distanceMeters,routes.legs,routes.warnings,fallbackInfo"

# Returned in debug mode so every leg is unreachable
UNREACHABLE_DURATION_SECONDS = 999_999

_DURATION = re.compile(r"^(\d+(?:\.\d+)?)s$")


def parse_duration_seconds(value: str | None) -> int | None:
    """Parse a protobuf duration string such as "165s" (rounded up)."""
    if not value:
        return None
    match = _DURATION.match(value)
    if not match:
        return None
    return math.ceil(float(match.group(1)))


class GoogleRoutesClient:
    """Routes API client implementing TransitDurations."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes",
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 4.0,
        force_unreachable: bool = False,
    ) -> None:
        """Initialize Routes client.

        Args:
            api_key: Google API key (empty -> every lookup returns None)
            base_url: computeRoutes endpoint
            client: Optional httpx client (for testing with mocks)
            timeout_seconds: Per-request timeout when no client is given
            force_unreachable: Debug knob; report every leg as unreachable
        """
        self._api_key = api_key
        self._base_url = base_url
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._force_unreachable = force_unreachable
        self._log = StructuredProviderLogger()

        if force_unreachable:
            logger.warning(
                f"[DEBUG] transit durations fixed at {UNREACHABLE_DURATION_SECONDS}s (unreachable)"
            )

    async def get_transit_duration(
        self,
        origin_lat: float,
        origin_lng: float,
        dest_lat: float,
        dest_lng: float,
        arrival_time: datetime,
    ) -> int | None:
        """Transit seconds for a leg that must arrive by arrival_time.

        No fallback to driving; None when the API gives no usable route.
        """
        if not self._api_key:
            return None

        if self._force_unreachable:
            return UNREACHABLE_DURATION_SECONDS

        body: dict[str, Any] = {
            "origin": {"location": {"latLng": {"latitude": origin_lat, "longitude": origin_lng}}},
            "destination": {"location": {"latLng": {"latitude": dest_lat, "longitude": dest_lng}}},
            "travelMode": "TRANSIT",
            # Keep the venue offset on the wire
            "arrivalTime": arrival_time.isoformat(),
            "languageCode": "ja",
            "regionCode": "jp",
        }
        logger.debug(f"computeRoutes request: {body}")

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_seconds)
            close_client = True

        started = time.perf_counter()
        try:
            response = await client.post(
                self._base_url,
                headers={"X-Goog-Api-Key": self._api_key, "X-Goog-FieldMask": FIELD_MASK},
                json=body,
            )
            latency_ms = (time.perf_counter() - started) * 1000

            if response.is_error:
                self._log.log_call(
                    PROVIDER,
                    "compute_routes",
                    "error",
                    latency_ms,
                    error_reason=f"http_{response.status_code}",
                    body=response.text[:500],
                )
                return None

            try:
                data = response.json()
            except ValueError:
                self._log.log_call(
                    PROVIDER,
                    "compute_routes",
                    "error",
                    latency_ms,
                    error_reason="invalid_json",
                    body=response.text[:200],
                )
                return None

            routes = data.get("routes") or []
            seconds = parse_duration_seconds(routes[0].get("duration") if routes else None)
            if seconds is None:
                self._log.log_call(
                    PROVIDER,
                    "compute_routes",
                    "error",
                    latency_ms,
                    error_reason="no_duration",
                    route_count=len(routes),
                    fallback_info=data.get("fallbackInfo"),
                )
                return None

            self._log.log_call(
                PROVIDER, "compute_routes", "success", latency_ms, duration_seconds=seconds
            )
            return seconds
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - started) * 1000
            self._log.log_call(
                PROVIDER, "compute_routes", "error", latency_ms, error_reason=type(e).__name__
            )
            return None
        finally:
            if close_client:
                await client.aclose()
