"""FastAPI dependencies: providers, document store and the traveler service."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from backend.tripguard.adapters.base import DetourSelector
from backend.tripguard.adapters.google_places import GooglePlacesClient
from backend.tripguard.adapters.google_routes import GoogleRoutesClient
from backend.tripguard.config import Settings, get_settings
from backend.tripguard.db.engine import create_session_factory, get_async_engine
from backend.tripguard.db.inmemory import InMemoryDocumentStore
from backend.tripguard.db.locks import KeyedLocks
from backend.tripguard.db.repositories import DocumentStore
from backend.tripguard.db.sql_repositories import SqlDocumentStore
from backend.tripguard.llm.client import get_detour_selector
from backend.tripguard.planning.deadlines import DeadlineCompiler
from backend.tripguard.remedies.options import OptionGenerator
from backend.tripguard.services.traveler import TravelerService
from backend.tripguard.verification.integrity import IntegrityChecker

# Shared by every request so per-traveler operations serialize
_traveler_locks = KeyedLocks()


@lru_cache
def get_document_store() -> DocumentStore:
    """SQL store when DATABASE_URL is configured, otherwise process-wide in-memory."""
    settings = get_settings()
    if settings.database_url:
        return SqlDocumentStore(create_session_factory(get_async_engine()))
    return InMemoryDocumentStore()


@lru_cache
def get_places_client() -> GooglePlacesClient:
    settings = get_settings()
    return GooglePlacesClient(
        api_key=settings.google_api_key,
        base_url=settings.places_base_url,
        timeout_seconds=settings.http_timeout_seconds,
        default_utc_offset_minutes=settings.default_utc_offset_minutes,
    )


@lru_cache
def get_routes_client() -> GoogleRoutesClient:
    settings = get_settings()
    return GoogleRoutesClient(
        api_key=settings.google_api_key,
        base_url=settings.routes_base_url,
        timeout_seconds=settings.http_timeout_seconds,
        force_unreachable=settings.debug_force_unreachable_transit,
    )


@lru_cache
def get_selector() -> DetourSelector:
    return get_detour_selector(get_settings())


def get_traveler_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[DocumentStore, Depends(get_document_store)],
    places: Annotated[GooglePlacesClient, Depends(get_places_client)],
    routes: Annotated[GoogleRoutesClient, Depends(get_routes_client)],
    selector: Annotated[DetourSelector, Depends(get_selector)],
) -> TravelerService:
    """Build the traveler service from configured collaborators."""
    compiler = DeadlineCompiler(
        places=places,
        details=places,
        transit=routes,
        prep_buffer_minutes=settings.prep_buffer_minutes,
        transit_fallback_buffer_minutes=settings.transit_fallback_buffer_minutes,
    )
    option_generator = OptionGenerator(
        places=places,
        selector=selector,
        search_radius_m=settings.detour_search_radius_m,
        pool_size=settings.detour_pool_size,
        max_candidates=settings.max_detour_candidates,
    )
    checker = IntegrityChecker(
        option_generator,
        near_previous_radius_m=settings.near_previous_radius_m,
        warn_max_minutes=settings.warn_max_minutes,
    )
    return TravelerService(
        store=store,
        compiler=compiler,
        checker=checker,
        locks=_traveler_locks,
        check_after_compile=settings.debug_check_after_compile,
    )
