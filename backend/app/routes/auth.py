"""
Coleta Backend — Auth Route Handlers
======================================

What:  POST /auth/login, GET /auth/me, PUT /auth/me.
How:   Thin handlers: validate body (Pydantic), delegate to AuthService.
Who:   Called by the mobile app's login and profile screens.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserResponse,
)
from app.schemas.common import ErrorResponse
from app.security import AuthenticatedWorker, get_current_worker
from app.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed CPF or missing password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in with CPF and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Exchange CPF + password for a 7-day bearer token and the user payload.

    Unknown CPF and wrong password produce the same 401 response.
    """
    return await auth_service.login(db, cpf=body.cpf, password=body.password)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Worker not found", "model": ErrorResponse},
    },
    summary="Profile of the authenticated worker",
)
async def get_me(
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await auth_service.get_profile(db, worker.worker_id)


@router.put(
    "/me",
    response_model=UpdateProfileResponse,
    responses={
        400: {"description": "Invalid fields or missing current password", "model": ErrorResponse},
        401: {"description": "Wrong current password or invalid token", "model": ErrorResponse},
        404: {"description": "Worker not found", "model": ErrorResponse},
    },
    summary="Update name, email or password",
)
async def update_me(
    body: UpdateProfileRequest,
    worker: AuthenticatedWorker = Depends(get_current_worker),
    db: AsyncSession = Depends(get_db_session),
) -> UpdateProfileResponse:
    """
    Partial update. Changing the password requires `currentPassword`;
    a request without effective changes returns "Nenhuma alteração realizada.".
    """
    return await auth_service.update_profile(db, worker.worker_id, body)
