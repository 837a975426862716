"""Place autocomplete proxy - GET /places/autocomplete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from backend.tripguard.adapters.google_places import GooglePlacesClient
from backend.tripguard.api.deps import get_places_client
from backend.tripguard.models.api import AutocompleteResponse

router = APIRouter(prefix="/places", tags=["places"])


@router.get("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    places: Annotated[GooglePlacesClient, Depends(get_places_client)],
    input: Annotated[str, Query()] = "",
    lat: float | None = None,
    lng: float | None = None,
) -> AutocompleteResponse:
    """Predictions for a partially typed stop name, biased to (lat, lng) when given."""
    suggestions = await places.autocomplete(input, lat, lng)
    return AutocompleteResponse(suggestions=suggestions)
