"""Place provider result models - external data shapes."""

from pydantic import BaseModel, Field

from backend.tripguard.models.common import Instant


class PlaceResult(BaseModel):
    """Search hit (nearby or text search)."""

    place_id: str
    name: str
    lat: float
    lng: float
    address: str
    types: list[str] = Field(default_factory=list)


class PlaceDetail(BaseModel):
    """Place detail including today's closing instant when known."""

    place_id: str
    name: str
    lat: float
    lng: float
    address: str
    closing_time: Instant | None = None


class AutocompleteSuggestion(BaseModel):
    """Autocomplete prediction for the stop entry form."""

    place_id: str
    main_text: str
    secondary_text: str
    full_text: str
