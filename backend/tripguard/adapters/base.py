"""Collaborator protocols consumed by the planning and remedy components."""

from datetime import datetime
from typing import Protocol

from backend.tripguard.models.places import PlaceDetail, PlaceResult
from backend.tripguard.models.remedy import DetourCandidate


class PlaceSearch(Protocol):
    """Place search provider."""

    async def search_nearby(
        self, lat: float, lng: float, radius_m: int, max_results: int
    ) -> list[PlaceResult]:
        """Points of interest within radius_m of (lat, lng)."""
        ...

    async def search_text(self, query: str) -> PlaceResult | None:
        """Top match for a free-text query, or None."""
        ...


class PlaceDetails(Protocol):
    """Place detail provider."""

    async def get_place_detail(self, place_id: str) -> PlaceDetail | None:
        """Detail (including today's closing time) or None."""
        ...


class TransitDurations(Protocol):
    """Transit routing provider."""

    async def get_transit_duration(
        self,
        origin_lat: float,
        origin_lng: float,
        dest_lat: float,
        dest_lng: float,
        arrival_time: datetime,
    ) -> int | None:
        """Seconds needed to arrive by arrival_time, or None if unavailable."""
        ...


class DetourSelector(Protocol):
    """Picks detour candidates out of a nearby pool."""

    async def select_candidates(
        self,
        pool: list[PlaceResult],
        now: datetime,
        next_start_time: datetime | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> list[DetourCandidate]:
        """At most three candidates chosen from pool."""
        ...
