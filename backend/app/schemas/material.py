"""Coleta Backend — Material catalog schema (GET /materials)."""

from app.schemas.common import CamelModel


class MaterialResponse(CamelModel):
    id: str
    name: str
