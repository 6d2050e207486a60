"""
Coleta Backend — Measurement SQLAlchemy Model
===============================================

What:  ORM model for the `measurements` ledger: one row per weighing event.
Why:   Source of the personal history and of the cooperative leaderboard.
How:   Weight is stored in kilograms as NUMERIC(10, 3) so that integer grams
       survive the round trip exactly (see app.services.units).
Who:   WeighingService (append + history) and LeaderboardService (aggregation).

Lifecycle:
    Append-only. Rows are inserted once and never updated or deleted.
    created_at is always assigned by the server.

Query Patterns:
    - History: WHERE worker_id = :id ORDER BY created_at DESC LIMIT 100
      → idx_measurements_worker_created
    - Leaderboard: GROUP BY worker_id joined to workers of one cooperative
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, BigIntId
from app.models.material import Material


class Measurement(Base):
    __tablename__ = "measurements"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    # ── References ────────────────────────────────────────────────────────
    worker_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("workers.id"),
        nullable=False,
    )
    material_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("materials.id"),
        nullable=False,
    )
    device_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("devices.id"),
        nullable=False,
    )
    material: Mapped[Material] = relationship(lazy="raise")

    # ── Payload ───────────────────────────────────────────────────────────
    weight_kg: Mapped[Decimal] = mapped_column(
        Numeric(10, 3, asdecimal=True),
        nullable=False,
        comment="Weight in kilograms, exact decimal, always > 0",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="Server-assigned weighing time (UTC)",
    )
    bag_filled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    __table_args__ = (
        CheckConstraint("weight_kg > 0", name="ck_measurements_weight_positive"),
        Index("idx_measurements_worker_created", "worker_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Measurement(id={self.id}, worker_id={self.worker_id}, "
            f"weight_kg={self.weight_kg})>"
        )
