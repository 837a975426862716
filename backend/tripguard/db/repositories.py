"""Document store protocol and the merge helpers shared by its implementations."""

from typing import Any, Protocol

from backend.tripguard.models.api import TravelerDocument
from backend.tripguard.models.itinerary import Itinerary
from backend.tripguard.models.remedy import FailureRecord

ITINERARY_FIELD = "itinerary"
FAILURE_RECORD_FIELD = "failure_record"
UPDATED_AT_FIELD = "updated_at"


def strip_absent(value: Any) -> Any:
    """Recursively drop None values so absent optionals are omitted, not stored."""
    if isinstance(value, dict):
        return {k: strip_absent(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_absent(v) for v in value]
    return value


def merge_fields(document: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    """Top-level partial overwrite; fields not named are left untouched."""
    merged = dict(document)
    merged.update(strip_absent(fields))
    return merged


def delete_field(document: dict[str, Any], name: str, updated_at: str) -> dict[str, Any]:
    """Remove one top-level field and bump updated_at."""
    remaining = {k: v for k, v in document.items() if k != name}
    remaining[UPDATED_AT_FIELD] = updated_at
    return remaining


def dump_itinerary(itinerary: Itinerary) -> dict[str, Any]:
    return strip_absent(itinerary.model_dump(mode="json"))


def dump_failure_record(record: FailureRecord) -> dict[str, Any]:
    return strip_absent(record.model_dump(mode="json"))


class DocumentStore(Protocol):
    """Per-traveler document persistence with merge semantics."""

    async def load(self, traveler_id: str) -> TravelerDocument | None:
        """Load the traveler's document.

        Args:
            traveler_id: Traveler ID

        Returns:
            Document or None if not found
        """
        ...

    async def save_itinerary(self, traveler_id: str, itinerary: Itinerary) -> None:
        """Overwrite the itinerary field (other fields untouched).

        Args:
            traveler_id: Traveler ID
            itinerary: Itinerary to store
        """
        ...

    async def save_failure_record(self, traveler_id: str, record: FailureRecord) -> None:
        """Overwrite the failure record field (other fields untouched).

        Args:
            traveler_id: Traveler ID
            record: Last broken record
        """
        ...

    async def clear_failure_record(self, traveler_id: str) -> None:
        """Delete the failure record field.

        Args:
            traveler_id: Traveler ID
        """
        ...
