"""Itinerary models - the traveler's resolved plan."""

from pydantic import BaseModel, Field

from backend.tripguard.models.common import Instant


class StopInput(BaseModel):
    """User-entered stop before place resolution."""

    id: str = Field(..., min_length=1)
    name: str
    start_time: Instant
    stay_minutes: int = Field(..., ge=0)
    place_id: str | None = None  # Set when picked from autocomplete


class ItineraryItem(BaseModel):
    """Single resolved stop in an itinerary.

    An item without closing_time or deadline is unconstrained: it stays in the
    itinerary but is never evaluated for risk.
    """

    id: str
    name: str
    place_id: str
    lat: float
    lng: float
    address: str | None = None
    start_time: Instant
    stay_minutes: int = Field(..., ge=0)
    closing_time: Instant | None = None
    deadline: Instant | None = None


class Itinerary(BaseModel):
    """Ordered stops for one traveler (ascending start_time)."""

    itinerary_id: str
    created_at: Instant
    items: list[ItineraryItem]
