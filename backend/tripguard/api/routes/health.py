"""Health check endpoints.

- /health: process is up
- /healthz: document store reachable, providers configured
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.tripguard.api.deps import get_document_store
from backend.tripguard.config import Settings, get_settings
from backend.tripguard.db.repositories import DocumentStore

router = APIRouter()

HEALTHCHECK_TRAVELER_ID = "__healthcheck__"


async def check_store(store: DocumentStore) -> tuple[bool, str]:
    """Check document store connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        await store.load(HEALTHCHECK_TRAVELER_ID)
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


def check_providers(settings: Settings) -> dict[str, str]:
    """Report which external providers are configured (no outbound calls)."""
    key = settings.openai_api_key
    return {
        "google": "configured" if settings.google_api_key else "not_configured",
        "detour_selector": "openai" if key and key.get_secret_value() else "stub",
    }


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any] | JSONResponse:
    """Health check endpoint.

    Returns:
        200 with component status if the document store is reachable
        503 otherwise
    """
    store_ok, store_status = await check_store(store)

    response_body = {
        "status": "ok" if store_ok else "degraded",
        "components": {"store": store_status, **check_providers(settings)},
    }

    if not store_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
