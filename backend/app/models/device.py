"""
Coleta Backend — Device SQLAlchemy Model
==========================================

What:  ORM model for the `devices` table (weighing stations).
Why:   Each measurement records the station that produced it.
How:   Created lazily by WeighingService: the first weighing of a cooperative
       without a device creates one, later weighings reuse the first match.

There is no unique constraint on cooperative_id. Two concurrent first
weighings of the same cooperative may each create a device; both rows stay
valid and later lookups simply pick one of them.
"""

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, BigIntId


class Device(Base):
    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    cooperative_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("cooperatives.id"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_devices_cooperative_id", "cooperative_id"),
    )

    def __repr__(self) -> str:
        return f"<Device(id={self.id}, cooperative_id={self.cooperative_id})>"
