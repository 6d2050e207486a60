"""
Coleta Backend — Materials Route Handler
==========================================

What:  GET /materials: the material catalog for the weighing screen picker.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.material import MaterialResponse
from app.security import AuthenticatedWorker, get_current_worker
from app.services.material_service import material_service

router = APIRouter(prefix="/materials", tags=["Materials"])


@router.get(
    "",
    response_model=List[MaterialResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List materials ordered by name",
)
async def list_materials(
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> List[MaterialResponse]:
    return await material_service.list_materials(db)
