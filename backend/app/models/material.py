"""
Coleta Backend — Material SQLAlchemy Model
============================================

What:  ORM model for the `materials` catalog (PET, cardboard, aluminium, ...).
Why:   Every weighing references the material that was collected.
Who:   MaterialService (listing + resolver) and WeighingService.

Read-only reference data. Names are unique and looked up case-insensitively,
so the index is on lower(name).
"""

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, BigIntId


class Material(Base):
    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Display name; unique, compared case-insensitively on lookup",
    )

    def __repr__(self) -> str:
        return f"<Material(id={self.id}, name='{self.name}')>"


# Serves the case-insensitive lookup in MaterialService.resolve_material
Index("idx_materials_name_lower", func.lower(Material.name))
