"""Integration tests for the SQL document store (SQLite in memory)."""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.tripguard.db.engine import create_session_factory, create_tables
from backend.tripguard.db.models import TravelerDocumentRow
from backend.tripguard.db.sql_repositories import SqlDocumentStore
from backend.tripguard.models.itinerary import Itinerary, ItineraryItem
from backend.tripguard.models.remedy import AbandonOption, ContinueOption, FailureRecord

JST = timezone(timedelta(hours=9))
NOW = datetime(2026, 10, 18, 14, 0, tzinfo=JST)


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """One shared in-memory SQLite connection per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine: AsyncEngine) -> SqlDocumentStore:
    return SqlDocumentStore(create_session_factory(engine))


def _itinerary(*ids: str) -> Itinerary:
    return Itinerary(
        itinerary_id="trip-1",
        created_at=NOW,
        items=[
            ItineraryItem(
                id=item_id,
                name=item_id,
                place_id=f"p-{item_id}",
                lat=35.68,
                lng=139.76,
                start_time=NOW + timedelta(hours=i),
                stay_minutes=30,
                deadline=NOW + timedelta(hours=i, minutes=-20),
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


@pytest.mark.asyncio
async def test_load_missing(store: SqlDocumentStore) -> None:
    assert await store.load("nobody") is None


@pytest.mark.asyncio
async def test_save_and_load_itinerary(store: SqlDocumentStore) -> None:
    await store.save_itinerary("t1", _itinerary("a", "b", "c"))

    doc = await store.load("t1")

    assert doc is not None
    assert doc.itinerary is not None
    assert [i.id for i in doc.itinerary.items] == ["a", "b", "c"]
    deadline = doc.itinerary.items[0].deadline
    assert deadline is not None
    assert deadline.utcoffset() == timedelta(hours=9)
    assert doc.failure_record is None


@pytest.mark.asyncio
async def test_fields_merge_independently(store: SqlDocumentStore) -> None:
    await store.save_itinerary("t1", _itinerary("a", "b", "c"))
    await store.save_failure_record("t1", _record())
    await store.save_itinerary("t1", _itinerary("a", "c"))

    doc = await store.load("t1")

    assert doc is not None
    assert doc.itinerary is not None
    assert [i.id for i in doc.itinerary.items] == ["a", "c"]
    assert doc.failure_record is not None
    assert doc.failure_record.target_item_id == "b"


@pytest.mark.asyncio
async def test_clear_failure_record(store: SqlDocumentStore, engine: AsyncEngine) -> None:
    await store.save_itinerary("t1", _itinerary("a"))
    await store.save_failure_record("t1", _record())

    await store.clear_failure_record("t1")

    doc = await store.load("t1")
    assert doc is not None
    assert doc.failure_record is None
    assert doc.itinerary is not None

    async with create_session_factory(engine)() as session:
        row = await session.get(TravelerDocumentRow, "t1")
        assert row is not None
        assert "failure_record" not in row.document
        # Absent optionals are omitted rather than stored as null
        assert "closing_time" not in row.document["itinerary"]["items"][0]


@pytest.mark.asyncio
async def test_clear_on_missing_traveler_creates_nothing(store: SqlDocumentStore) -> None:
    await store.clear_failure_record("nobody")
    assert await store.load("nobody") is None
