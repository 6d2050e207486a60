"""
Coleta Backend — Authentication & Profile Schemas
===================================================

What:  Contracts for POST /auth/login, GET /auth/me and PUT /auth/me.
How:   Field validators normalize input (CPF reduced to digits) so the
       service layer only ever sees clean values. Violations surface as
       RequestValidationError, rendered as 400 by main.py.
"""

import re
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from app.schemas.common import CamelModel

_NON_DIGITS = re.compile(r"\D")


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(CamelModel):
    """
    Login credentials.

    The CPF may be sent formatted ("123.456.789-09"); punctuation is stripped
    and exactly 11 digits must remain.
    """
    cpf: str = Field(min_length=11, description="Worker CPF, formatted or digits only")
    password: str = Field(min_length=1, description="Plaintext password")

    @field_validator("cpf")
    @classmethod
    def normalize_cpf(cls, v: str) -> str:
        digits = _NON_DIGITS.sub("", v)
        if len(digits) != 11:
            raise ValueError("Informe um CPF válido.")
        return digits


class UpdateProfileRequest(CamelModel):
    """
    Partial profile update. Every field is optional; absent fields are untouched.

    newPassword requires currentPassword, checked here so the request is
    rejected before any database work.
    """
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    current_password: Optional[str] = Field(default=None, min_length=1)
    new_password: Optional[str] = Field(default=None, min_length=6)

    @model_validator(mode="after")
    def require_current_password(self) -> "UpdateProfileRequest":
        if self.new_password and not self.current_password:
            raise ValueError("Senha atual é necessária para definir uma nova senha")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(CamelModel):
    """The authenticated worker as seen by the client. Ids are strings."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    cpf: Optional[str] = None
    cooperative_id: Optional[str] = None
    cooperative_name: Optional[str] = None


class LoginResponse(CamelModel):
    access_token: str = Field(description="Bearer token, valid for 7 days")
    user: UserResponse


class UpdateProfileResponse(CamelModel):
    message: str
    user: UserResponse
