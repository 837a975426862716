"""Shared pytest fixtures and in-process provider fakes."""

from datetime import datetime

import pytest

from backend.tripguard.models.places import AutocompleteSuggestion, PlaceDetail, PlaceResult
from backend.tripguard.models.remedy import DetourCandidate


class FakePlaces:
    """PlaceSearch + PlaceDetails double with call recording."""

    def __init__(self) -> None:
        self.by_name: dict[str, PlaceResult] = {}
        self.details: dict[str, PlaceDetail] = {}
        self.nearby: list[PlaceResult] = []
        self.suggestions: list[AutocompleteSuggestion] = []
        self.nearby_error: Exception | None = None
        self.detail_error: Exception | None = None
        self.text_queries: list[str] = []
        self.detail_requests: list[str] = []
        self.nearby_requests: list[tuple[float, float, int, int]] = []

    async def search_nearby(
        self, lat: float, lng: float, radius_m: int, max_results: int
    ) -> list[PlaceResult]:
        self.nearby_requests.append((lat, lng, radius_m, max_results))
        if self.nearby_error:
            raise self.nearby_error
        return list(self.nearby)

    async def search_text(self, query: str) -> PlaceResult | None:
        self.text_queries.append(query)
        return self.by_name.get(query)

    async def get_place_detail(self, place_id: str) -> PlaceDetail | None:
        self.detail_requests.append(place_id)
        if self.detail_error:
            raise self.detail_error
        return self.details.get(place_id)

    async def autocomplete(
        self, text: str, lat: float | None = None, lng: float | None = None
    ) -> list[AutocompleteSuggestion]:
        return list(self.suggestions)


class FakeTransit:
    """TransitDurations double: fixed answer (or error) with call recording."""

    def __init__(self, seconds: int | None = 1800) -> None:
        self.seconds = seconds
        self.error: Exception | None = None
        self.calls: list[tuple[float, float, float, float, datetime]] = []

    async def get_transit_duration(
        self,
        origin_lat: float,
        origin_lng: float,
        dest_lat: float,
        dest_lng: float,
        arrival_time: datetime,
    ) -> int | None:
        self.calls.append((origin_lat, origin_lng, dest_lat, dest_lng, arrival_time))
        if self.error:
            raise self.error
        return self.seconds


class FakeSelector:
    """DetourSelector double returning preset candidates."""

    def __init__(self, candidates: list[DetourCandidate] | None = None) -> None:
        self.candidates = candidates or []
        self.error: Exception | None = None
        self.calls: list[dict[str, object]] = []

    async def select_candidates(
        self,
        pool: list[PlaceResult],
        now: datetime,
        next_start_time: datetime | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> list[DetourCandidate]:
        self.calls.append(
            {"pool": pool, "now": now, "next_start_time": next_start_time, "lat": lat, "lng": lng}
        )
        if self.error:
            raise self.error
        return list(self.candidates)


@pytest.fixture
def fake_places() -> FakePlaces:
    return FakePlaces()


@pytest.fixture
def fake_transit() -> FakeTransit:
    return FakeTransit()


@pytest.fixture
def fake_selector() -> FakeSelector:
    return FakeSelector()
