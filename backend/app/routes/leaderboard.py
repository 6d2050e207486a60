"""
Coleta Backend — Leaderboard Route Handler
============================================

What:  GET /leaderboard/top-collectors: top 3 collectors of the caller's cooperative.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.leaderboard import TopCollectorResponse
from app.security import AuthenticatedWorker, get_current_worker
from app.services.leaderboard_service import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get(
    "/top-collectors",
    response_model=List[TopCollectorResponse],
    responses={
        400: {"description": "Worker without cooperative", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Top collectors by total weight",
)
async def top_collectors(
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> List[TopCollectorResponse]:
    """An empty list when nobody in the cooperative has weighed anything yet."""
    return await leaderboard_service.top_collectors(db, worker.worker_id)
