"""Deadline compilation: raw stops -> resolved itinerary items.

Pass 1 resolves every stop to a place (coordinates, address, closing time).
Pass 2 walks the sorted items once, chaining each leg's transit lookup to the
previous item's coordinates, so it runs strictly in order.
"""

import logging
from datetime import timedelta

from backend.tripguard.adapters.base import PlaceDetails, PlaceSearch, TransitDurations
from backend.tripguard.models.itinerary import ItineraryItem, StopInput

logger = logging.getLogger(__name__)

PREP_BUFFER_MINUTES = 10
TRANSIT_FALLBACK_BUFFER_MINUTES = 10


class DeadlineCompiler:
    """Resolves stops and computes each item's must-leave-by deadline."""

    def __init__(
        self,
        places: PlaceSearch,
        details: PlaceDetails,
        transit: TransitDurations,
        prep_buffer_minutes: int = PREP_BUFFER_MINUTES,
        transit_fallback_buffer_minutes: int = TRANSIT_FALLBACK_BUFFER_MINUTES,
    ) -> None:
        self._places = places
        self._details = details
        self._transit = transit
        self._prep_buffer = timedelta(minutes=prep_buffer_minutes)
        self._fallback_buffer = timedelta(minutes=transit_fallback_buffer_minutes)

    async def compile(self, stops: list[StopInput]) -> list[ItineraryItem]:
        """Resolve stops into items sorted by start time, with deadlines.

        A stop whose lookups fail stays in the result as an unconstrained item
        (zero coordinates, empty place id, no closing time).
        """
        items = [await self.resolve_stop(stop) for stop in stops]
        items.sort(key=lambda item: item.start_time)

        await self._assign_deadlines(items)

        logger.info(
            f"Compiled {len(items)} stops, "
            f"{sum(1 for i in items if i.deadline is not None)} with deadlines"
        )
        return items

    async def resolve_stop(self, stop: StopInput) -> ItineraryItem:
        """Pass 1 for a single stop."""
        item = ItineraryItem(
            id=stop.id,
            name=stop.name,
            place_id="",
            lat=0.0,
            lng=0.0,
            start_time=stop.start_time,
            stay_minutes=stop.stay_minutes,
        )

        try:
            if stop.place_id:
                detail = await self._details.get_place_detail(stop.place_id)
                if detail is None:
                    logger.warning(f"Place detail lookup failed: place_id={stop.place_id}")
                    return item

                return item.model_copy(
                    update={
                        "place_id": detail.place_id,
                        "name": detail.name or stop.name,
                        "lat": detail.lat,
                        "lng": detail.lng,
                        "address": detail.address,
                        "closing_time": detail.closing_time,
                    }
                )

            match = await self._places.search_text(stop.name)
            if match is None:
                logger.warning(f'Place search found nothing for "{stop.name}"')
                return item

            item = item.model_copy(
                update={
                    "place_id": match.place_id,
                    "name": match.name or stop.name,
                    "lat": match.lat,
                    "lng": match.lng,
                    "address": match.address,
                }
            )

            detail = await self._details.get_place_detail(match.place_id)
            if detail is not None:
                item = item.model_copy(update={"closing_time": detail.closing_time})
            return item

        except Exception as e:
            logger.warning(f"Resolving stop {stop.id} failed, keeping it unconstrained: {e}")
            return item

    async def _assign_deadlines(self, items: list[ItineraryItem]) -> None:
        """Pass 2: deadlines in a single forward sweep (mutates items)."""
        for i, curr in enumerate(items):
            if i == 0:
                # No predecessor: leave time to get going
                curr.deadline = curr.start_time - self._prep_buffer
                continue

            if curr.closing_time is None:
                continue

            arrival = curr.closing_time - timedelta(minutes=curr.stay_minutes)
            prev = items[i - 1]

            try:
                duration_seconds = await self._transit.get_transit_duration(
                    prev.lat, prev.lng, curr.lat, curr.lng, arrival
                )
            except Exception as e:
                logger.warning(f"Transit duration lookup raised for {curr.name}: {e}")
                duration_seconds = None

            if duration_seconds is not None:
                curr.deadline = arrival - timedelta(seconds=duration_seconds)
            else:
                curr.deadline = arrival - self._fallback_buffer
                logger.warning(
                    f"No transit duration for {curr.name}; deadline uses "
                    f"{self._fallback_buffer.total_seconds() / 60:.0f}-minute buffer"
                )
