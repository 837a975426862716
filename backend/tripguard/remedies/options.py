"""Remedy options for a broken itinerary: CONTINUE, DETOUR, ABANDON.

CONTINUE and ABANDON are fixed text. DETOUR needs a nearby search and a
candidate selection call; candidates are not checked for feasibility against
the next stop.
"""

import logging
from datetime import datetime

from backend.tripguard.adapters.base import DetourSelector, PlaceSearch
from backend.tripguard.models.itinerary import ItineraryItem
from backend.tripguard.models.remedy import (
    AbandonOption,
    ContinueOption,
    DetourCandidate,
    DetourOption,
    RemedyOption,
)

logger = logging.getLogger(__name__)

CONTINUE_RATIONALE = "Put the next stop first and head there right away."
DETOUR_RATIONALE = "Nearby places to fill the time before your next stop."
ABANDON_RATIONALE = "Give up on this stop and get ready for the next one."

DETOUR_SEARCH_RADIUS_M = 1000
DETOUR_POOL_SIZE = 20
MAX_DETOUR_CANDIDATES = 3


class OptionGenerator:
    """Builds the remedy option list for an at-risk item."""

    def __init__(
        self,
        places: PlaceSearch,
        selector: DetourSelector,
        search_radius_m: int = DETOUR_SEARCH_RADIUS_M,
        pool_size: int = DETOUR_POOL_SIZE,
        max_candidates: int = MAX_DETOUR_CANDIDATES,
    ) -> None:
        self._places = places
        self._selector = selector
        self._search_radius_m = search_radius_m
        self._pool_size = pool_size
        # DetourOption holds at most MAX_DETOUR_CANDIDATES
        self._max_candidates = min(max_candidates, MAX_DETOUR_CANDIDATES)

    async def generate(
        self,
        items: list[ItineraryItem],
        target_index: int,
        now: datetime,
        current_lat: float,
        current_lng: float,
    ) -> list[RemedyOption]:
        """CONTINUE, then DETOUR when candidates exist, then ABANDON."""
        options: list[RemedyOption] = [ContinueOption(rationale=CONTINUE_RATIONALE)]

        try:
            candidates = await self.detour_candidates(
                items, target_index, now, current_lat, current_lng
            )
        except Exception as e:
            logger.warning(f"Detour candidate generation failed: {e}", exc_info=True)
            candidates = []

        if candidates:
            options.append(DetourOption(rationale=DETOUR_RATIONALE, candidates=candidates))

        options.append(AbandonOption(rationale=ABANDON_RATIONALE))
        return options

    async def detour_candidates(
        self,
        items: list[ItineraryItem],
        target_index: int,
        now: datetime,
        current_lat: float,
        current_lng: float,
    ) -> list[DetourCandidate]:
        """Nearby search, then candidate selection (first max_candidates kept)."""
        next_item = items[target_index + 1] if target_index + 1 < len(items) else None

        logger.info(
            f"Detour search: lat={current_lat}, lng={current_lng}, radius={self._search_radius_m}m"
        )
        pool = await self._places.search_nearby(
            current_lat, current_lng, self._search_radius_m, self._pool_size
        )
        if not pool:
            logger.warning("Nearby search returned no places; DETOUR omitted")
            return []

        candidates = await self._selector.select_candidates(
            pool,
            now,
            next_item.start_time if next_item else None,
            current_lat,
            current_lng,
        )
        kept = candidates[: self._max_candidates]
        logger.info(f"Detour selection kept {len(kept)} of {len(pool)} places")
        return kept
