"""
Coleta Backend — Authentication Gate
======================================

What:  Password hashing, access-token issuing/verification, and the FastAPI
       dependency that protects routes.
Why:   Every route except /auth/login and /health requires a logged-in worker.
How:   bcrypt for passwords, PyJWT (HS256) for bearer tokens. The dependency
       `get_current_worker` is listed explicitly on each protected route; it
       turns the Authorization header into an AuthenticatedWorker or raises
       AuthenticationError (401) before the handler body runs.

Token format:
    {"sub": "<worker id>", "iat": <issued at>, "exp": <issued at + 7 days>}
    Only the worker identity is embedded; everything else is read from the
    database on each request.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

# auto_error=False: missing headers are reported through our own 401 format
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedWorker:
    """Identity of the caller, attached to the request by get_current_worker."""

    worker_id: int


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


async def hash_password(password: str) -> bytes:
    """Hash a password with the configured bcrypt cost (runs off the event loop)."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return await run_in_threadpool(bcrypt.hashpw, _password_bytes(password), salt)


async def verify_password(password: str, password_hash: Optional[bytes]) -> bool:
    """
    Compare a plaintext password with a stored bcrypt hash.

    A missing or malformed stored hash is a failed verification; the malformed
    case is logged because it means the stored data is broken.
    """
    if not password_hash:
        return False
    try:
        return await run_in_threadpool(
            bcrypt.checkpw, _password_bytes(password), bytes(password_hash)
        )
    except ValueError as e:
        logger.warning("Stored password hash is not a valid bcrypt hash: %s", e)
        return False


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

def create_access_token(
    worker_id: int,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an access token for `worker_id` (default lifetime: jwt_expires_days)."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expires_days)
    payload = {
        "sub": str(worker_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """
    Verify signature and expiry, return the worker id embedded in the token.

    Raises:
        AuthenticationError: expired, tampered, malformed, or subject-less token
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise AuthenticationError("Sessão expirada. Faça login novamente.")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected invalid access token: %s", type(e).__name__)
        raise AuthenticationError("Token de acesso inválido.")

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthenticationError("Token de acesso inválido.")
    return subject


# ══════════════════════════════════════════════════════════════════════════
# Request dependency
# ══════════════════════════════════════════════════════════════════════════

async def get_current_worker(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedWorker:
    """
    FastAPI dependency for protected routes.

    Usage:
        @router.get("/me")
        async def me(worker: AuthenticatedWorker = Depends(get_current_worker)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Token de acesso não informado.")

    subject = decode_access_token(credentials.credentials)
    try:
        worker_id = int(subject)
    except ValueError:
        raise AuthenticationError("Token de acesso inválido.")
    return AuthenticatedWorker(worker_id=worker_id)
