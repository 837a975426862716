"""Tests for ok / warn / broken classification."""

from datetime import datetime, timedelta, timezone

import pytest

from backend.tripguard.models.itinerary import ItineraryItem
from backend.tripguard.remedies.options import OptionGenerator
from backend.tripguard.verification.integrity import (
    IntegrityChecker,
    find_risk_target,
    minutes_until,
)

JST = timezone(timedelta(hours=9))
NOW = datetime(2026, 10, 18, 14, 0, tzinfo=JST)

# Previous stop location and a point roughly 100 m north of it
HOTEL = (35.6800, 139.7600)
NEAR_HOTEL = (35.6809, 139.7600)
FAR_FROM_HOTEL = (35.6900, 139.7600)


def _item(
    item_id: str,
    hour: int,
    lat: float = HOTEL[0],
    lng: float = HOTEL[1],
    deadline: datetime | None = None,
    closing_time: datetime | None = None,
) -> ItineraryItem:
    return ItineraryItem(
        id=item_id,
        name=f"Stop {item_id}",
        place_id=f"p-{item_id}",
        lat=lat,
        lng=lng,
        start_time=datetime(2026, 10, 18, hour, 0, tzinfo=JST),
        stay_minutes=60,
        closing_time=closing_time,
        deadline=deadline,
    )


def _itinerary(minutes_left: float) -> list[ItineraryItem]:
    """Hotel -> museum (monitored) -> dinner, museum deadline `minutes_left` from NOW."""
    return [
        _item("hotel", 9, deadline=NOW - timedelta(hours=5)),
        _item(
            "museum",
            15,
            lat=35.70,
            lng=139.77,
            deadline=NOW + timedelta(minutes=minutes_left),
            closing_time=datetime(2026, 10, 18, 17, 0, tzinfo=JST),
        ),
        _item("dinner", 19, lat=35.66, lng=139.73),
    ]


@pytest.fixture
def checker(fake_places, fake_selector) -> IntegrityChecker:
    return IntegrityChecker(OptionGenerator(places=fake_places, selector=fake_selector))


def test_minutes_until_floors() -> None:
    assert minutes_until(NOW + timedelta(minutes=5, seconds=59), NOW) == 5
    assert minutes_until(NOW - timedelta(seconds=1), NOW) == -1
    assert minutes_until(NOW, NOW) == 0


@pytest.mark.asyncio
async def test_fewer_than_three_items_is_ok(checker) -> None:
    items = _itinerary(-30)[:2]
    result = await checker.check(items, NOW, *NEAR_HOTEL)
    assert result.status == "ok"
    assert result.target_item_id is None


@pytest.mark.asyncio
async def test_broken_when_deadline_passed_near_previous(checker) -> None:
    result = await checker.check(_itinerary(-2), NOW, *NEAR_HOTEL)

    assert result.status == "broken"
    assert result.target_item_id == "museum"
    assert result.options is not None
    assert [o.kind for o in result.options] == ["CONTINUE", "ABANDON"]


@pytest.mark.asyncio
async def test_deadline_reached_exactly_is_broken(checker) -> None:
    result = await checker.check(_itinerary(0), NOW, *NEAR_HOTEL)
    assert result.status == "broken"


@pytest.mark.asyncio
async def test_warn_within_fifteen_minutes(checker) -> None:
    result = await checker.check(_itinerary(5), NOW, *NEAR_HOTEL)

    assert result.status == "warn"
    assert result.target_item_id == "museum"
    assert result.minutes_to_deadline == 5
    assert result.options is None


@pytest.mark.asyncio
async def test_warn_boundary(checker) -> None:
    assert (await checker.check(_itinerary(15), NOW, *NEAR_HOTEL)).status == "warn"
    assert (await checker.check(_itinerary(16), NOW, *NEAR_HOTEL)).status == "ok"


@pytest.mark.asyncio
async def test_ok_when_plenty_of_time(checker) -> None:
    result = await checker.check(_itinerary(20), NOW, *NEAR_HOTEL)
    assert result.status == "ok"
    assert result.minutes_to_deadline is None


@pytest.mark.asyncio
async def test_moved_on_from_previous_stop_is_ok(checker) -> None:
    """A passed deadline is ignored once the traveler has left the previous stop."""
    result = await checker.check(_itinerary(-60), NOW, *FAR_FROM_HOTEL)
    assert result.status == "ok"


@pytest.mark.asyncio
async def test_first_and_last_items_never_monitored(checker) -> None:
    items = [
        _item(
            "hotel",
            9,
            deadline=NOW - timedelta(minutes=30),
            closing_time=datetime(2026, 10, 18, 10, 0, tzinfo=JST),
        ),
        _item(
            "museum", 15, deadline=NOW + timedelta(hours=2), closing_time=NOW + timedelta(hours=4)
        ),
        _item(
            "dinner",
            19,
            deadline=NOW - timedelta(minutes=30),
            closing_time=datetime(2026, 10, 18, 22, 0, tzinfo=JST),
        ),
    ]
    result = await checker.check(items, NOW, *NEAR_HOTEL)
    assert result.status == "ok"


@pytest.mark.asyncio
async def test_unconstrained_items_never_selected(checker) -> None:
    items = [
        _item("hotel", 9),
        # Deadline without a closing time is not monitored
        _item("park", 11, deadline=NOW - timedelta(minutes=60)),
        _item("cafe", 13),
        _item("dinner", 19),
    ]
    result = await checker.check(items, NOW, *NEAR_HOTEL)
    assert result.status == "ok"


def test_most_at_risk_item_selected() -> None:
    closing = datetime(2026, 10, 18, 20, 0, tzinfo=JST)
    items = [
        _item("hotel", 9),
        _item("museum", 12, deadline=NOW + timedelta(minutes=40), closing_time=closing),
        _item("gallery", 15, deadline=NOW + timedelta(minutes=10), closing_time=closing),
        _item("dinner", 19),
    ]
    target = find_risk_target(items, NOW, *NEAR_HOTEL)

    assert target is not None
    assert target.item_id == "gallery"
    assert target.index == 2
    assert target.minutes_to_deadline == 10


def test_ties_keep_earliest_item() -> None:
    closing = datetime(2026, 10, 18, 20, 0, tzinfo=JST)
    items = [
        _item("hotel", 9),
        _item("museum", 12, deadline=NOW + timedelta(minutes=10), closing_time=closing),
        _item("gallery", 15, deadline=NOW + timedelta(minutes=10), closing_time=closing),
        _item("dinner", 19),
    ]
    target = find_risk_target(items, NOW, *NEAR_HOTEL)

    assert target is not None
    assert target.item_id == "museum"


def test_near_previous_measured_from_the_item_before_target() -> None:
    closing = datetime(2026, 10, 18, 20, 0, tzinfo=JST)
    items = [
        _item("hotel", 9),
        _item("museum", 12, lat=35.70, lng=139.77),
        _item("gallery", 15, deadline=NOW - timedelta(minutes=1), closing_time=closing),
        _item("dinner", 19),
    ]
    at_hotel = find_risk_target(items, NOW, *HOTEL)
    at_museum = find_risk_target(items, NOW, 35.70, 139.77)

    assert at_hotel is not None and not at_hotel.near_previous
    assert at_museum is not None and at_museum.near_previous


@pytest.mark.asyncio
async def test_custom_thresholds(fake_places, fake_selector) -> None:
    checker = IntegrityChecker(
        OptionGenerator(places=fake_places, selector=fake_selector),
        near_previous_radius_m=5_000,
        warn_max_minutes=30,
    )
    result = await checker.check(_itinerary(25), NOW, *FAR_FROM_HOTEL)

    assert result.status == "warn"
    assert result.minutes_to_deadline == 25
