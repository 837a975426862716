"""Tests for the in-memory document store and its merge helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from backend.tripguard.db.inmemory import InMemoryDocumentStore
from backend.tripguard.db.repositories import delete_field, merge_fields, strip_absent
from backend.tripguard.models.itinerary import Itinerary, ItineraryItem
from backend.tripguard.models.remedy import AbandonOption, ContinueOption, FailureRecord

JST = timezone(timedelta(hours=9))
NOW = datetime(2026, 10, 18, 14, 0, tzinfo=JST)


def _itinerary(*ids: str) -> Itinerary:
    return Itinerary(
        itinerary_id="trip-1",
        created_at=NOW,
        items=[
            ItineraryItem(
                id=item_id,
                name=item_id,
                place_id="",
                lat=0.0,
                lng=0.0,
                start_time=NOW + timedelta(hours=i),
                stay_minutes=30,
            )
            for i, item_id in enumerate(ids)
        ],
    )


def _record() -> FailureRecord:
    return FailureRecord(
        created_at=NOW,
        target_item_id="b",
        options=[ContinueOption(rationale="go"), AbandonOption(rationale="drop")],
    )


def test_strip_absent_is_recursive() -> None:
    value = {"a": None, "b": {"c": None, "d": 1}, "e": [{"f": None, "g": 2}]}
    assert strip_absent(value) == {"b": {"d": 1}, "e": [{"g": 2}]}


def test_merge_fields_leaves_other_fields() -> None:
    doc = {"itinerary": {"x": 1}, "failure_record": {"y": 2}}
    merged = merge_fields(doc, {"itinerary": {"x": 3}})

    assert merged == {"itinerary": {"x": 3}, "failure_record": {"y": 2}}
    assert doc["itinerary"] == {"x": 1}


def test_delete_field_bumps_updated_at() -> None:
    doc = {"itinerary": {}, "failure_record": {}, "updated_at": "old"}
    assert delete_field(doc, "failure_record", "new") == {"itinerary": {}, "updated_at": "new"}


@pytest.mark.asyncio
async def test_load_missing_traveler() -> None:
    store = InMemoryDocumentStore()
    assert await store.load("nobody") is None


@pytest.mark.asyncio
async def test_itinerary_and_failure_record_merge() -> None:
    store = InMemoryDocumentStore()

    await store.save_itinerary("t1", _itinerary("a", "b", "c"))
    await store.save_failure_record("t1", _record())
    await store.save_itinerary("t1", _itinerary("a", "c"))

    doc = await store.load("t1")
    assert doc is not None
    assert doc.itinerary is not None
    assert [i.id for i in doc.itinerary.items] == ["a", "c"]
    assert doc.failure_record is not None
    assert doc.failure_record.target_item_id == "b"
    assert doc.updated_at is not None


@pytest.mark.asyncio
async def test_clear_failure_record_keeps_itinerary() -> None:
    store = InMemoryDocumentStore()
    await store.save_itinerary("t1", _itinerary("a"))
    await store.save_failure_record("t1", _record())

    await store.clear_failure_record("t1")

    doc = await store.load("t1")
    assert doc is not None
    assert doc.failure_record is None
    assert doc.itinerary is not None
    raw = store.raw("t1")
    assert raw is not None
    assert "failure_record" not in raw


@pytest.mark.asyncio
async def test_clear_on_missing_traveler_is_noop() -> None:
    store = InMemoryDocumentStore()
    await store.clear_failure_record("nobody")
    assert store.raw("nobody") is None


@pytest.mark.asyncio
async def test_absent_optionals_not_stored() -> None:
    store = InMemoryDocumentStore()
    await store.save_itinerary("t1", _itinerary("a"))

    raw = store.raw("t1")
    assert raw is not None
    item = raw["itinerary"]["items"][0]
    assert "address" not in item
    assert "closing_time" not in item
    assert "deadline" not in item


@pytest.mark.asyncio
async def test_travelers_are_isolated() -> None:
    store = InMemoryDocumentStore()
    await store.save_itinerary("t1", _itinerary("a"))
    await store.save_failure_record("t2", _record())

    t1 = await store.load("t1")
    t2 = await store.load("t2")
    assert t1 is not None and t1.failure_record is None
    assert t2 is not None and t2.itinerary is None
