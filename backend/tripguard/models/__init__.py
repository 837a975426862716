"""Models package - re-exports for convenience."""

from backend.tripguard.models.api import (
    ApplyRemedyRequest,
    ApplyRemedyResponse,
    AutocompleteResponse,
    CheckRequest,
    CheckResponse,
    CompileItineraryRequest,
    CompileItineraryResponse,
    TravelerDocument,
)
from backend.tripguard.models.common import Instant
from backend.tripguard.models.itinerary import Itinerary, ItineraryItem, StopInput
from backend.tripguard.models.places import AutocompleteSuggestion, PlaceDetail, PlaceResult
from backend.tripguard.models.remedy import (
    AbandonChoice,
    AbandonOption,
    ContinueChoice,
    ContinueOption,
    DetourCandidate,
    DetourChoice,
    DetourOption,
    FailureRecord,
    RemedyChoice,
    RemedyKind,
    RemedyOption,
)

__all__ = [
    "AbandonChoice",
    "AbandonOption",
    "ApplyRemedyRequest",
    "ApplyRemedyResponse",
    "AutocompleteResponse",
    "AutocompleteSuggestion",
    "CheckRequest",
    "CheckResponse",
    "CompileItineraryRequest",
    "CompileItineraryResponse",
    "ContinueChoice",
    "ContinueOption",
    "DetourCandidate",
    "DetourChoice",
    "DetourOption",
    "FailureRecord",
    "Instant",
    "Itinerary",
    "ItineraryItem",
    "PlaceDetail",
    "PlaceResult",
    "RemedyChoice",
    "RemedyKind",
    "RemedyOption",
    "StopInput",
    "TravelerDocument",
]
