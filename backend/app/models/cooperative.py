"""
Coleta Backend — Cooperative SQLAlchemy Model
===============================================

What:  ORM model for the `cooperatives` table.
Why:   Groups workers and weighing devices; the leaderboard is scoped to one.
Who:   Read when building the user payload (cooperativeName) and when
       resolving the cooperative of the authenticated worker.

Reference data: provisioned outside this service, never written here.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, BigIntId


class Cooperative(Base):
    __tablename__ = "cooperatives"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name of the cooperative",
    )

    def __repr__(self) -> str:
        return f"<Cooperative(id={self.id}, name='{self.name}')>"
