"""Itinerary endpoints - POST /itineraries/compile, POST /check, POST /apply-remedy."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from backend.tripguard.api.deps import get_traveler_service
from backend.tripguard.models.api import (
    ApplyRemedyRequest,
    ApplyRemedyResponse,
    CheckRequest,
    CheckResponse,
    CompileItineraryRequest,
    CompileItineraryResponse,
)
from backend.tripguard.services.traveler import TravelerService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/itineraries/compile",
    response_model=CompileItineraryResponse,
    response_model_exclude_none=True,
)
async def compile_itinerary(
    request: CompileItineraryRequest,
    service: Annotated[TravelerService, Depends(get_traveler_service)],
) -> CompileItineraryResponse:
    """Resolve user-entered stops and store the itinerary.

    Args:
        request: Traveler, itinerary metadata and raw stops
        service: Traveler service

    Returns:
        CompileItineraryResponse with the resolved itinerary, or status=error
    """
    logger.info(
        f"[POST /itineraries/compile] traveler_id={request.traveler_id}, stops={len(request.stops)}"
    )

    try:
        return await service.compile_itinerary(
            request.traveler_id,
            request.itinerary_id,
            request.created_at,
            request.stops,
        )
    except Exception as e:
        logger.error(
            f"[POST /itineraries/compile] traveler_id={request.traveler_id} failed: {e}",
            exc_info=True,
        )
        return CompileItineraryResponse(status="error", message=f"compile-itinerary failed: {e}")


@router.post("/check", response_model=CheckResponse, response_model_exclude_none=True)
async def check_itinerary(
    request: CheckRequest,
    service: Annotated[TravelerService, Depends(get_traveler_service)],
) -> CheckResponse:
    """Classify the stored itinerary against current time and position.

    Raises:
        HTTPException: 500 on storage or provider faults
    """
    try:
        return await service.check_itinerary(
            request.traveler_id, request.now, request.current_lat, request.current_lng
        )
    except Exception as e:
        logger.error(f"[POST /check] traveler_id={request.traveler_id} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="internal error",
        ) from e


@router.post("/apply-remedy", response_model=ApplyRemedyResponse, response_model_exclude_none=True)
async def apply_remedy(
    request: ApplyRemedyRequest,
    service: Annotated[TravelerService, Depends(get_traveler_service)],
) -> ApplyRemedyResponse:
    """Apply the traveler's remedy choice to the stored itinerary.

    Raises:
        HTTPException: 500 on storage faults
    """
    logger.info(
        f"[POST /apply-remedy] traveler_id={request.traveler_id}, "
        f"target_item_id={request.target_item_id}, kind={request.choice.kind}"
    )

    try:
        return await service.apply_remedy(
            request.traveler_id, request.target_item_id, request.choice
        )
    except Exception as e:
        logger.error(
            f"[POST /apply-remedy] traveler_id={request.traveler_id} failed: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="internal error",
        ) from e
