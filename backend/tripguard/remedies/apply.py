"""Apply the traveler's remedy choice to the itinerary.

- CONTINUE: itinerary unchanged
- ABANDON:  target item removed
- DETOUR:   target item replaced in place by the chosen candidate

ABANDON and DETOUR are rejected when the target is not in the itinerary.
"""

from backend.tripguard.models.api import ApplyRemedyResponse
from backend.tripguard.models.itinerary import Itinerary, ItineraryItem
from backend.tripguard.models.remedy import (
    AbandonChoice,
    ContinueChoice,
    DetourChoice,
    DetourOption,
    FailureRecord,
    RemedyChoice,
)


def _error(message: str) -> ApplyRemedyResponse:
    return ApplyRemedyResponse(status="error", message=message)


def apply_remedy(
    itinerary: Itinerary,
    target_item_id: str,
    choice: RemedyChoice,
    failure_record: FailureRecord | None = None,
) -> ApplyRemedyResponse:
    """Produce the updated itinerary for a remedy choice.

    Args:
        itinerary: Current itinerary
        target_item_id: Item flagged by the broken check
        choice: Selected remedy
        failure_record: Last broken record (needed only for DETOUR, which
            recovers its candidate from the stored options)

    Returns:
        ApplyRemedyResponse with the updated itinerary, or status=error
    """
    if isinstance(choice, ContinueChoice):
        return ApplyRemedyResponse(status="ok", updated_itinerary=itinerary)

    if not any(item.id == target_item_id for item in itinerary.items):
        return _error(f'No itinerary item matches target_item_id "{target_item_id}".')

    if isinstance(choice, AbandonChoice):
        remaining = [item for item in itinerary.items if item.id != target_item_id]
        return ApplyRemedyResponse(
            status="ok",
            updated_itinerary=itinerary.model_copy(update={"items": remaining}),
        )

    if isinstance(choice, DetourChoice):
        if failure_record is None:
            return _error("No failure record exists; DETOUR cannot be applied.")

        detour = next(
            (o for o in failure_record.options if isinstance(o, DetourOption)),
            None,
        )
        if detour is None:
            return _error("The failure record has no DETOUR candidates.")

        candidate = next(
            (c for c in detour.candidates if c.place_id == choice.detour_place_id),
            None,
        )
        if candidate is None:
            return _error(
                f'No detour candidate matches detour_place_id "{choice.detour_place_id}".'
            )

        items: list[ItineraryItem] = []
        for item in itinerary.items:
            if item.id != target_item_id:
                items.append(item)
                continue
            # Replace, keeping the id; closing time and deadline are not recomputed
            items.append(
                ItineraryItem(
                    id=item.id,
                    name=candidate.name,
                    place_id=candidate.place_id,
                    lat=candidate.lat,
                    lng=candidate.lng,
                    address=candidate.address,
                    start_time=candidate.start_time,
                    stay_minutes=candidate.stay_minutes,
                )
            )

        return ApplyRemedyResponse(
            status="ok",
            updated_itinerary=itinerary.model_copy(update={"items": items}),
        )

    return _error("Unknown remedy kind.")
