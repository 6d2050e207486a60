"""
Coleta Backend — Auth Service (Login + Profile)
=================================================

What:  Credential checking, profile reads and profile updates for workers.
Why:   Keeps bcrypt/JWT/database orchestration out of the route handlers.
How:   Loads workers with their cooperative eagerly (selectinload) and maps
       them to UserResponse.
Who:   Called by app.routes.auth.

Login Flow (POST /auth/login):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  CPF     │───▶│  Find worker │───▶│  bcrypt      │───▶│  Sign    │
    │ (digits) │    │  by CPF      │    │  checkpw     │    │  JWT     │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    Unknown CPF, worker without password, wrong password: all three return
    the same 401 message. The reason is only logged.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.worker import Worker
from app.schemas.auth import (
    LoginResponse,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserResponse,
)
from app.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Credenciais inválidas."
WORKER_NOT_FOUND = "Trabalhador não encontrado."


@dataclass
class ProfileChanges:
    """
    Explicit set of profile columns to write. None means "leave unchanged".
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password_hash: Optional[bytes] = None

    def is_empty(self) -> bool:
        return self.name is None and self.email is None and self.password_hash is None

    def apply_to(self, worker: Worker, now: datetime) -> None:
        if self.name is not None:
            worker.name = self.name
        if self.email is not None:
            worker.email = self.email
        if self.password_hash is not None:
            worker.password_hash = self.password_hash
        worker.last_update = now


def to_user_response(worker: Worker) -> UserResponse:
    """Map a Worker (with cooperative loaded) to the client-facing user payload."""
    cooperative = worker.cooperative
    return UserResponse(
        id=str(worker.id),
        name=worker.name,
        email=worker.email,
        cpf=worker.cpf or None,
        cooperative_id=str(worker.cooperative_id) if worker.cooperative_id else None,
        cooperative_name=cooperative.name if cooperative is not None else None,
    )


class AuthService:
    """Login, profile lookup and profile update."""

    async def _get_worker(self, db: AsyncSession, worker_id: int) -> Optional[Worker]:
        result = await db.execute(
            select(Worker)
            .options(selectinload(Worker.cooperative))
            .where(Worker.id == worker_id)
        )
        return result.scalar_one_or_none()

    async def login(self, db: AsyncSession, cpf: str, password: str) -> LoginResponse:
        """
        Check CPF + password and issue an access token.

        Args:
            cpf: 11 digits (normalized by LoginRequest)
            password: plaintext password

        Raises:
            AuthenticationError: unknown CPF or wrong password (same message)
        """
        try:
            result = await db.execute(
                select(Worker)
                .options(selectinload(Worker.cooperative))
                .where(Worker.cpf == cpf)
                .limit(1)
            )
            worker = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"}) from e

        if worker is None or not worker.password_hash:
            logger.info("Login rejected: no worker with a password for the given CPF")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await verify_password(password, worker.password_hash):
            logger.info("Login rejected: wrong password for worker %s", worker.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("Worker %s logged in", worker.id)
        return LoginResponse(
            access_token=create_access_token(worker.id),
            user=to_user_response(worker),
        )

    async def get_profile(self, db: AsyncSession, worker_id: int) -> UserResponse:
        """
        Raises:
            NotFoundError: the token refers to a worker that no longer exists
        """
        try:
            worker = await self._get_worker(db, worker_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading worker %s: %s", worker_id, str(e))
            raise DatabaseError(context={"worker_id": worker_id}) from e

        if worker is None:
            raise NotFoundError(WORKER_NOT_FOUND, resource="worker", resource_id=str(worker_id))
        return to_user_response(worker)

    async def update_profile(
        self,
        db: AsyncSession,
        worker_id: int,
        request: UpdateProfileRequest,
    ) -> UpdateProfileResponse:
        """
        Apply a partial profile update.

        Steps:
            1. Load the worker (404 if gone)
            2. Collect name/email changes
            3. If a new password is requested: the worker must already have one
               (400) and currentPassword must match it (401)
            4. No changes → "Nenhuma alteração realizada."; otherwise write the
               changes plus last_update

        Raises:
            NotFoundError, ValidationError, AuthenticationError, DatabaseError
        """
        try:
            worker = await self._get_worker(db, worker_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading worker %s: %s", worker_id, str(e))
            raise DatabaseError(context={"worker_id": worker_id}) from e

        if worker is None:
            raise NotFoundError(WORKER_NOT_FOUND, resource="worker", resource_id=str(worker_id))

        changes = ProfileChanges(
            name=request.name or None,
            email=str(request.email) if request.email else None,
        )

        if request.new_password:
            # currentPassword presence is enforced by UpdateProfileRequest
            if not worker.password_hash:
                raise ValidationError(
                    "Usuário não possui senha definida para alteração.",
                    field="currentPassword",
                )
            if not await verify_password(request.current_password, worker.password_hash):
                logger.info("Password change rejected for worker %s: wrong current password", worker_id)
                raise AuthenticationError("Senha atual incorreta.")
            changes.password_hash = await hash_password(request.new_password)

        if changes.is_empty():
            return UpdateProfileResponse(
                message="Nenhuma alteração realizada.",
                user=to_user_response(worker),
            )

        changes.apply_to(worker, datetime.now(timezone.utc))
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating worker %s: %s", worker_id, str(e), exc_info=True)
            raise DatabaseError(context={"worker_id": worker_id}) from e

        logger.info(
            "Worker %s updated profile (name=%s, email=%s, password=%s)",
            worker_id,
            changes.name is not None,
            changes.email is not None,
            changes.password_hash is not None,
        )
        return UpdateProfileResponse(
            message="Perfil atualizado com sucesso.",
            user=to_user_response(worker),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
