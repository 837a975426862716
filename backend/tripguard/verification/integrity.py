"""Itinerary integrity check: ok / warn / broken.

Only items strictly between the first and last stop are monitored, and only
when they carry both a deadline and a closing time. Deadline pressure counts
only while the traveler is still near the previous stop; once they have
moved on, the signal is treated as noise.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from backend.tripguard.models.api import CheckResponse
from backend.tripguard.models.itinerary import ItineraryItem
from backend.tripguard.remedies.options import OptionGenerator
from backend.tripguard.utils.geo import haversine_m

logger = logging.getLogger(__name__)

NEAR_PREVIOUS_RADIUS_M = 400.0
WARN_MAX_MINUTES = 15


@dataclass(frozen=True)
class RiskCandidate:
    """Monitored item with its deadline pressure."""

    index: int
    item_id: str
    minutes_to_deadline: int
    near_previous: bool


def minutes_until(deadline: datetime, now: datetime) -> int:
    """Whole minutes from now to deadline, floored (negative once passed)."""
    return math.floor((deadline - now).total_seconds() / 60)


def find_risk_target(
    items: list[ItineraryItem],
    now: datetime,
    current_lat: float,
    current_lng: float,
    near_previous_radius_m: float = NEAR_PREVIOUS_RADIUS_M,
) -> RiskCandidate | None:
    """Most at-risk monitored item, or None when nothing qualifies.

    Ties on minutes keep the earliest item.
    """
    if len(items) < 3:
        return None

    target: RiskCandidate | None = None
    for i in range(1, len(items) - 1):
        item = items[i]
        if item.deadline is None or item.closing_time is None:
            continue

        prev = items[i - 1]
        distance_m = haversine_m(current_lat, current_lng, prev.lat, prev.lng)
        candidate = RiskCandidate(
            index=i,
            item_id=item.id,
            minutes_to_deadline=minutes_until(item.deadline, now),
            near_previous=distance_m <= near_previous_radius_m,
        )

        if target is None or candidate.minutes_to_deadline < target.minutes_to_deadline:
            target = candidate

    return target


class IntegrityChecker:
    """Classifies itinerary health and builds remedies on failure."""

    def __init__(
        self,
        option_generator: OptionGenerator,
        near_previous_radius_m: float = NEAR_PREVIOUS_RADIUS_M,
        warn_max_minutes: int = WARN_MAX_MINUTES,
    ) -> None:
        self._option_generator = option_generator
        self._near_previous_radius_m = near_previous_radius_m
        self._warn_max_minutes = warn_max_minutes

    async def check(
        self,
        items: list[ItineraryItem],
        now: datetime,
        current_lat: float,
        current_lng: float,
    ) -> CheckResponse:
        """Classify the itinerary (items sorted ascending by start time).

        Args:
            items: Resolved itinerary items
            now: Current instant
            current_lat: Traveler latitude
            current_lng: Traveler longitude

        Returns:
            CheckResponse: ok, warn with minutes_to_deadline, or broken with options
        """
        target = find_risk_target(
            items, now, current_lat, current_lng, self._near_previous_radius_m
        )

        if target is None or not target.near_previous:
            return CheckResponse(status="ok")

        m = target.minutes_to_deadline

        if m <= 0:
            logger.info(f"Itinerary broken at item {target.item_id} ({m} min to deadline)")
            options = await self._option_generator.generate(
                items, target.index, now, current_lat, current_lng
            )
            return CheckResponse(status="broken", target_item_id=target.item_id, options=options)

        if m <= self._warn_max_minutes:
            return CheckResponse(
                status="warn", target_item_id=target.item_id, minutes_to_deadline=m
            )

        return CheckResponse(status="ok")
