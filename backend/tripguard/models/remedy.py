"""Remedy models - options offered on a broken itinerary and the traveler's choice."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from backend.tripguard.models.common import Instant


class RemedyKind(str, Enum):
    """Remedy kinds offered on failure."""

    CONTINUE = "CONTINUE"
    DETOUR = "DETOUR"
    ABANDON = "ABANDON"


class DetourCandidate(BaseModel):
    """Nearby place proposed as a replacement stop.

    Values come from candidate selection as-is; arrival time and stay length
    are not re-checked for feasibility.
    """

    place_id: str
    name: str
    lat: float
    lng: float
    address: str
    rationale: str
    start_time: Instant
    stay_minutes: int = Field(..., ge=0)


class ContinueOption(BaseModel):
    """Keep the plan unchanged and head to the next stop."""

    kind: Literal["CONTINUE"] = "CONTINUE"
    rationale: str


class DetourOption(BaseModel):
    """Replace the at-risk stop with one of the proposed candidates."""

    kind: Literal["DETOUR"] = "DETOUR"
    rationale: str
    candidates: list[DetourCandidate] = Field(..., max_length=3)


class AbandonOption(BaseModel):
    """Drop the at-risk stop."""

    kind: Literal["ABANDON"] = "ABANDON"
    rationale: str


RemedyOption = Annotated[
    ContinueOption | DetourOption | AbandonOption,
    Field(discriminator="kind"),
]


class ContinueChoice(BaseModel):
    kind: Literal["CONTINUE"] = "CONTINUE"


class AbandonChoice(BaseModel):
    kind: Literal["ABANDON"] = "ABANDON"


class DetourChoice(BaseModel):
    """Detour selection; the candidate is recovered from the failure record."""

    kind: Literal["DETOUR"] = "DETOUR"
    detour_place_id: str = Field(..., min_length=1)


RemedyChoice = Annotated[
    ContinueChoice | AbandonChoice | DetourChoice,
    Field(discriminator="kind"),
]


class FailureRecord(BaseModel):
    """Snapshot of the last broken check (at most one per traveler)."""

    created_at: Instant
    target_item_id: str
    options: list[RemedyOption]
