"""In-memory implementation of DocumentStore."""

from datetime import UTC, datetime
from typing import Any

from backend.tripguard.db.repositories import (
    FAILURE_RECORD_FIELD,
    ITINERARY_FIELD,
    UPDATED_AT_FIELD,
    delete_field,
    dump_failure_record,
    dump_itinerary,
    merge_fields,
)
from backend.tripguard.models.api import TravelerDocument
from backend.tripguard.models.itinerary import Itinerary
from backend.tripguard.models.remedy import FailureRecord


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore.

    Documents are kept as JSON-shaped dicts, exactly what a document database
    would hold.
    """

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    def raw(self, traveler_id: str) -> dict[str, Any] | None:
        """Stored dict for a traveler (for tests and debugging)."""
        return self._docs.get(traveler_id)

    async def load(self, traveler_id: str) -> TravelerDocument | None:
        """Load the traveler's document."""
        doc = self._docs.get(traveler_id)
        if doc is None:
            return None
        return TravelerDocument.model_validate(doc)

    async def save_itinerary(self, traveler_id: str, itinerary: Itinerary) -> None:
        """Overwrite the itinerary field."""
        self._merge(traveler_id, {ITINERARY_FIELD: dump_itinerary(itinerary)})

    async def save_failure_record(self, traveler_id: str, record: FailureRecord) -> None:
        """Overwrite the failure record field."""
        self._merge(traveler_id, {FAILURE_RECORD_FIELD: dump_failure_record(record)})

    async def clear_failure_record(self, traveler_id: str) -> None:
        """Delete the failure record field."""
        doc = self._docs.get(traveler_id)
        if doc is None:
            return
        self._docs[traveler_id] = delete_field(
            doc, FAILURE_RECORD_FIELD, datetime.now(UTC).isoformat()
        )

    def _merge(self, traveler_id: str, fields: dict[str, Any]) -> None:
        fields[UPDATED_AT_FIELD] = datetime.now(UTC).isoformat()
        self._docs[traveler_id] = merge_fields(self._docs.get(traveler_id, {}), fields)
