"""Coleta Backend — Leaderboard schema (GET /leaderboard/top-collectors)."""

from pydantic import Field

from app.schemas.common import CamelModel


class TopCollectorResponse(CamelModel):
    worker_id: str
    worker_name: str
    total_weight_kg: float = Field(description="Sum of weighings in kg, rounded to 2 decimals")
    total_weighings: int
