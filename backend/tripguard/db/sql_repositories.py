"""SQL implementation of DocumentStore."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.tripguard.db.models import TravelerDocumentRow
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


class SqlDocumentStore:
    """SQL implementation of DocumentStore (one JSON document row per traveler)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, traveler_id: str) -> TravelerDocument | None:
        """Load the traveler's document."""
        async with self._session_factory() as session:
            row = await session.get(TravelerDocumentRow, traveler_id)
            if row is None:
                return None
            return TravelerDocument.model_validate(row.document)

    async def save_itinerary(self, traveler_id: str, itinerary: Itinerary) -> None:
        """Overwrite the itinerary field."""
        payload = dump_itinerary(itinerary)
        await self._update(
            traveler_id,
            lambda doc, now: merge_fields(
                doc, {ITINERARY_FIELD: payload, UPDATED_AT_FIELD: now.isoformat()}
            ),
            create=True,
        )

    async def save_failure_record(self, traveler_id: str, record: FailureRecord) -> None:
        """Overwrite the failure record field."""
        payload = dump_failure_record(record)
        await self._update(
            traveler_id,
            lambda doc, now: merge_fields(
                doc, {FAILURE_RECORD_FIELD: payload, UPDATED_AT_FIELD: now.isoformat()}
            ),
            create=True,
        )

    async def clear_failure_record(self, traveler_id: str) -> None:
        """Delete the failure record field."""
        await self._update(
            traveler_id,
            lambda doc, now: delete_field(doc, FAILURE_RECORD_FIELD, now.isoformat()),
            create=False,
        )

    async def _update(
        self,
        traveler_id: str,
        change: Callable[[dict[str, Any], datetime], dict[str, Any]],
        *,
        create: bool,
    ) -> None:
        now = datetime.now(UTC)
        async with self._session_factory() as session, session.begin():
            row = await session.get(TravelerDocumentRow, traveler_id, with_for_update=True)

            if row is None:
                if not create:
                    return
                session.add(
                    TravelerDocumentRow(
                        traveler_id=traveler_id, document=change({}, now), updated_at=now
                    )
                )
                return

            # Reassign so the JSON column is flagged dirty
            row.document = change(row.document or {}, now)
            row.updated_at = now
