"""Request/response envelopes for the compile, check and apply endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from backend.tripguard.models.common import Instant
from backend.tripguard.models.itinerary import Itinerary, StopInput
from backend.tripguard.models.places import AutocompleteSuggestion
from backend.tripguard.models.remedy import FailureRecord, RemedyChoice, RemedyOption


class CompileItineraryRequest(BaseModel):
    """Raw stops to resolve into an itinerary."""

    traveler_id: str = Field(..., min_length=1)
    itinerary_id: str
    created_at: Instant
    stops: list[StopInput]


class CompileItineraryResponse(BaseModel):
    status: Literal["ok", "error"]
    itinerary: Itinerary | None = None
    message: str | None = None


class CheckRequest(BaseModel):
    """Poll with the traveler's current time and position."""

    traveler_id: str = Field(..., min_length=1)
    now: Instant
    current_lat: float = Field(..., ge=-90, le=90)
    current_lng: float = Field(..., ge=-180, le=180)


class CheckResponse(BaseModel):
    """Itinerary health.

    warn carries minutes_to_deadline, broken carries options; both name the
    single most at-risk item.
    """

    status: Literal["ok", "warn", "broken"]
    target_item_id: str | None = None
    minutes_to_deadline: int | None = None
    options: list[RemedyOption] | None = None


class ApplyRemedyRequest(BaseModel):
    traveler_id: str = Field(..., min_length=1)
    target_item_id: str
    choice: RemedyChoice


class ApplyRemedyResponse(BaseModel):
    status: Literal["ok", "error"]
    updated_itinerary: Itinerary | None = None
    message: str | None = None


class AutocompleteResponse(BaseModel):
    suggestions: list[AutocompleteSuggestion]


class TravelerDocument(BaseModel):
    """Persisted per-traveler document."""

    itinerary: Itinerary | None = None
    failure_record: FailureRecord | None = None
    updated_at: datetime | None = None
