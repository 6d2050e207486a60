"""
Coleta Backend — Worker SQLAlchemy Model
==========================================

What:  ORM model for the `workers` table (the collectors who log in).
Why:   Holds identity, credentials and cooperative membership.
How:   CPF is stored as 11 plain digits; the bcrypt hash is stored as opaque bytes.
Who:   AuthService (login/profile), WeighingService and LeaderboardService.

Lifecycle:
    1. Provisioned outside this service (with or without a cooperative)
    2. Name, email and password changed through PUT /auth/me (last_update bumped)
    3. Never deleted here

Invariant:
    A worker with cooperative_id = NULL cannot record weighings or query the
    leaderboard; services raise PreconditionError in that case.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, BigIntId
from app.models.cooperative import Cooperative


class Worker(Base):
    __tablename__ = "workers"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    # Nullable: legacy rows were imported without names; the leaderboard shows
    # a placeholder label for them.
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Credentials ───────────────────────────────────────────────────────
    cpf: Mapped[Optional[str]] = mapped_column(
        String(11),
        nullable=True,
        unique=True,
        comment="Brazilian taxpayer id, digits only",
    )
    password_hash: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary,
        nullable=True,
        comment="bcrypt hash (opaque bytes); NULL means login is disabled",
    )

    # ── Membership ────────────────────────────────────────────────────────
    cooperative_id: Mapped[Optional[int]] = mapped_column(
        BigIntId,
        ForeignKey("cooperatives.id"),
        nullable=True,
    )
    cooperative: Mapped[Optional[Cooperative]] = relationship(lazy="raise")

    last_update: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the profile was last changed (UTC)",
    )

    __table_args__ = (
        Index("idx_workers_cooperative_id", "cooperative_id"),
    )

    def __repr__(self) -> str:
        return f"<Worker(id={self.id}, cooperative_id={self.cooperative_id})>"
