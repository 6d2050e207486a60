"""
Coleta Backend — Weighing Schemas
===================================

What:  Contracts for GET /weighings/me, POST /weighings and POST /weighings/requests.

Weight handling:
    weightGrams accepts a JSON number or a numeric string (older app versions
    send strings). It must be finite and strictly greater than zero; anything
    else is rejected with 400 before the service touches the database, as are
    weights under half a gram (they round to 0.000 kg at the storage scale).
"""

import math
from datetime import datetime
from typing import Optional, Union

from pydantic import Field, field_validator

from app.schemas.common import CamelModel
from app.services.units import grams_to_kilograms

# NUMERIC(10, 3) kilograms holds at most 9_999_999.999 kg
MAX_WEIGHT_GRAMS = 9_999_999_999


class CreateWeighingRequest(CamelModel):
    material_id: str = Field(
        min_length=1,
        description="Material id or material name (case-insensitive)",
    )
    weight_grams: float = Field(description="Weight in grams, > 0")
    device_external_id: Optional[str] = Field(
        default=None,
        description="Identifier reported by the scale; accepted but not stored",
    )
    bag_filled: Optional[bool] = Field(default=None, description="Whether the bag is full")

    @field_validator("material_id", mode="before")
    @classmethod
    def coerce_material_id(cls, v: object) -> object:
        # Numeric ids sent as JSON numbers are treated like their string form
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and not v.strip():
            raise ValueError("Informe o material coletado.")
        return v

    @field_validator("weight_grams", mode="before")
    @classmethod
    def coerce_weight(cls, v: Union[int, float, str, None]) -> float:
        if isinstance(v, bool) or v is None:
            raise ValueError("Peso inválido.")
        if isinstance(v, str):
            try:
                v = float(v.strip())
            except ValueError:
                raise ValueError("Peso inválido.")
        if not isinstance(v, (int, float)) or not math.isfinite(v):
            raise ValueError("Peso inválido.")
        if v <= 0:
            raise ValueError("O peso precisa ser maior que zero.")
        if v > MAX_WEIGHT_GRAMS:
            raise ValueError("Peso acima do limite permitido.")
        try:
            grams_to_kilograms(v)
        except ValueError:
            # Under half a gram: would be stored as 0.000 kg
            raise ValueError("O peso precisa ser maior que zero.")
        return v

    @field_validator("device_external_id")
    @classmethod
    def strip_device_id(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        stripped = v.strip()
        if not stripped:
            raise ValueError("Identificador do dispositivo inválido.")
        return stripped


class WeighingResponse(CamelModel):
    id: str
    user_id: str
    material_id: str
    material_name: str
    weight_grams: int
    created_at: datetime


class WeighingRequestAck(CamelModel):
    status: str = "queued"
