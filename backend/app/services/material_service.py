"""
Coleta Backend — Material Service (Catalog + Resolver)
========================================================

What:  Lists the material catalog and resolves a user-supplied material identifier.
Why:   The weighing screen sends either the material id or its display name.
How:   Read-only queries against `materials`.

Resolution Order (resolve_material):
    1. Trim whitespace
    2. If the text is an integer → exact id lookup; a hit wins immediately
    3. Otherwise, or on an id miss → case-insensitive exact name match
    4. No match → None (the caller turns this into a 404)

    No fuzzy or partial matching: "Pap" never resolves to "Papelão".
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.material import Material
from app.schemas.material import MaterialResponse

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?\d+")
_BIGINT_MIN = -(2**63)
_BIGINT_MAX = 2**63 - 1


def parse_material_id(identifier: str) -> Optional[int]:
    """Integer value of `identifier` if it is a BIGINT-sized integer literal, else None."""
    if not _INTEGER.fullmatch(identifier):
        return None
    value = int(identifier)
    if not _BIGINT_MIN <= value <= _BIGINT_MAX:
        return None
    return value


class MaterialService:
    """Catalog listing and id-or-name resolution."""

    async def list_materials(self, db: AsyncSession) -> List[MaterialResponse]:
        """All materials ordered by name ascending."""
        try:
            result = await db.execute(select(Material).order_by(Material.name.asc()))
            materials = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing materials: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        return [MaterialResponse(id=str(m.id), name=m.name) for m in materials]

    async def resolve_material(
        self, db: AsyncSession, identifier: str
    ) -> Optional[Material]:
        """
        Map a free-form identifier to exactly one Material.

        A numeric-looking name that is also a valid id resolves to the id match.

        Returns:
            The Material, or None when neither the id nor the name matches.
        """
        trimmed = identifier.strip()

        try:
            material_id = parse_material_id(trimmed)
            if material_id is not None:
                by_id = await db.get(Material, material_id)
                if by_id is not None:
                    return by_id

            if not trimmed:
                return None

            result = await db.execute(
                select(Material)
                .where(func.lower(Material.name) == trimmed.lower())
                .limit(1)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error resolving material %r: %s", trimmed, str(e))
            raise DatabaseError(context={"identifier": trimmed}) from e


# ── Singleton Instance ────────────────────────────────────────────────────
material_service = MaterialService()
