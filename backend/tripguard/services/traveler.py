"""Per-traveler operations: compile, check, apply.

Each operation loads the traveler's document, runs the core component and
writes the result back under the traveler's lock.
"""

import logging
from datetime import UTC, datetime

from backend.tripguard.db.locks import KeyedLocks
from backend.tripguard.db.repositories import DocumentStore
from backend.tripguard.models.api import (
    ApplyRemedyResponse,
    CheckResponse,
    CompileItineraryResponse,
)
from backend.tripguard.models.itinerary import Itinerary, StopInput
from backend.tripguard.models.remedy import FailureRecord, RemedyChoice
from backend.tripguard.planning.deadlines import DeadlineCompiler
from backend.tripguard.remedies.apply import apply_remedy
from backend.tripguard.utils.metrics import record_check, record_remedy
from backend.tripguard.verification.integrity import IntegrityChecker

logger = logging.getLogger(__name__)


class TravelerService:
    """Wires the core components to the document store."""

    def __init__(
        self,
        store: DocumentStore,
        compiler: DeadlineCompiler,
        checker: IntegrityChecker,
        locks: KeyedLocks | None = None,
        check_after_compile: bool = False,
    ) -> None:
        """Initialize service.

        Args:
            store: Per-traveler document store
            compiler: Deadline compiler
            checker: Integrity checker (with its option generator)
            locks: Per-traveler serialization point (shared across requests)
            check_after_compile: Debug knob; run a check right after each compile
        """
        self._store = store
        self._compiler = compiler
        self._checker = checker
        self._locks = locks if locks is not None else KeyedLocks()
        self._check_after_compile = check_after_compile

        if check_after_compile:
            logger.warning("[DEBUG] check runs immediately after every compile")

    async def compile_itinerary(
        self,
        traveler_id: str,
        itinerary_id: str,
        created_at: datetime,
        stops: list[StopInput],
    ) -> CompileItineraryResponse:
        """Resolve stops, persist the itinerary and return it."""
        items = await self._compiler.compile(stops)
        itinerary = Itinerary(itinerary_id=itinerary_id, created_at=created_at, items=items)

        async with self._locks.hold(traveler_id):
            await self._store.save_itinerary(traveler_id, itinerary)

        logger.info(f"compile_itinerary({traveler_id}): saved {len(items)} items")

        if self._check_after_compile and items:
            first = items[0]
            logger.info(f"[DEBUG] running check after compile (traveler_id={traveler_id})")
            await self.check_itinerary(traveler_id, datetime.now(UTC), first.lat, first.lng)

        return CompileItineraryResponse(status="ok", itinerary=itinerary)

    async def check_itinerary(
        self,
        traveler_id: str,
        now: datetime,
        current_lat: float,
        current_lng: float,
    ) -> CheckResponse:
        """Classify the stored itinerary; a broken result overwrites the failure record."""
        async with self._locks.hold(traveler_id):
            doc = await self._store.load(traveler_id)

            if doc is None or doc.itinerary is None:
                record_check("ok")
                return CheckResponse(status="ok")

            result = await self._checker.check(doc.itinerary.items, now, current_lat, current_lng)

            if result.status == "broken" and result.options and result.target_item_id:
                logger.info(
                    f"Broken itinerary: traveler_id={traveler_id}, "
                    f"target_item_id={result.target_item_id}, options={len(result.options)}"
                )
                await self._store.save_failure_record(
                    traveler_id,
                    FailureRecord(
                        created_at=now,
                        target_item_id=result.target_item_id,
                        options=result.options,
                    ),
                )

        record_check(result.status)
        return result

    async def apply_remedy(
        self,
        traveler_id: str,
        target_item_id: str,
        choice: RemedyChoice,
    ) -> ApplyRemedyResponse:
        """Apply a remedy; on success save the itinerary and clear the failure record."""
        async with self._locks.hold(traveler_id):
            doc = await self._store.load(traveler_id)
            if doc is None or doc.itinerary is None:
                record_remedy(choice.kind, "error")
                return ApplyRemedyResponse(status="error", message="No itinerary exists.")

            result = apply_remedy(doc.itinerary, target_item_id, choice, doc.failure_record)

            if result.status == "ok" and result.updated_itinerary is not None:
                await self._store.save_itinerary(traveler_id, result.updated_itinerary)
                await self._store.clear_failure_record(traveler_id)
                logger.info(f"apply_remedy({traveler_id}): {choice.kind} applied")
            else:
                logger.warning(
                    f"apply_remedy({traveler_id}): {choice.kind} rejected: {result.message}"
                )

        record_remedy(choice.kind, result.status)
        return result
