"""
Coleta Backend — Weighing Route Handlers
==========================================

What:  GET /weighings/me, POST /weighings, POST /weighings/requests.
Why:   Recording and reviewing weighings is the main job of the app.
How:   Authentication runs first (get_current_worker), then the body is
       validated, then WeighingService does the work.

Request Flow (POST /weighings):
    1. Bearer token → AuthenticatedWorker (401 otherwise)
    2. Body validation: weightGrams > 0, materialId present (400 otherwise)
    3. WeighingService.create_weighing → 201 with the weighing DTO
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.weighing import (
    CreateWeighingRequest,
    WeighingRequestAck,
    WeighingResponse,
)
from app.security import AuthenticatedWorker, get_current_worker
from app.services.weighing_service import weighing_service

router = APIRouter(prefix="/weighings", tags=["Weighings"])


@router.get(
    "/me",
    response_model=List[WeighingResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Last 100 weighings of the authenticated worker, newest first",
)
async def list_my_weighings(
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> List[WeighingResponse]:
    return await weighing_service.list_for_worker(db, worker.worker_id)


@router.post(
    "",
    status_code=201,
    response_model=WeighingResponse,
    responses={
        400: {"description": "Invalid weight or worker without cooperative", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Material not found", "model": ErrorResponse},
    },
    summary="Record a weighing",
)
async def create_weighing(
    body: CreateWeighingRequest,
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> WeighingResponse:
    """
    Record one weighing for the authenticated worker.

    `materialId` may be the material id or its name in any letter-casing.
    The cooperative's device is created on the first weighing.
    """
    return await weighing_service.create_weighing(db, worker.worker_id, body)


@router.post(
    "/requests",
    status_code=202,
    response_model=WeighingRequestAck,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Acknowledge a weighing request",
)
async def request_weighing(
    worker: AuthenticatedWorker = Depends(get_current_worker),
) -> WeighingRequestAck:
    """Returns 202 {"status": "queued"}. Nothing is actually queued."""
    return weighing_service.acknowledge_request(worker.worker_id)
