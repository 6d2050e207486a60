"""
Coleta Backend — Leaderboard Service
======================================

What:  Ranks the top collectors of the caller's cooperative by collected weight.
Why:   Shown on the app's home screen as a friendly competition.
How:   One GROUP BY over the ledger (restricted to the cooperative's workers),
       one name lookup, then the pure ranking step `rank_collectors`.

Ranking rules:
    - total weight: SUM(weight_kg), rounded half-up to 2 decimals
    - total weighings: COUNT(*)
    - order: total weight descending; ties keep the grouping order (stable sort)
    - size: top 3
    - missing worker record or empty name → "Coletor"
    - no weighings in the cooperative → []
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, PreconditionError
from app.models.measurement import Measurement
from app.models.worker import Worker
from app.schemas.leaderboard import TopCollectorResponse
from app.services.units import round_kilograms

logger = logging.getLogger(__name__)

TOP_COLLECTORS_LIMIT = 3
WORKER_PLACEHOLDER = "Coletor"


@dataclass(frozen=True)
class CollectorAggregate:
    """One GROUP BY row: a worker's summed weight and weighing count."""

    worker_id: int
    total_weight_kg: Optional[Decimal]
    total_weighings: int


def rank_collectors(
    aggregates: Sequence[CollectorAggregate],
    names: Dict[int, Optional[str]],
    limit: int = TOP_COLLECTORS_LIMIT,
) -> List[TopCollectorResponse]:
    """
    Turn aggregates into the ranked leaderboard.

    Args:
        aggregates: grouped ledger totals, in grouping order
        names: worker id → display name for the workers that still exist
        limit: number of entries to keep
    """
    entries = [
        TopCollectorResponse(
            worker_id=str(aggregate.worker_id),
            worker_name=names.get(aggregate.worker_id) or WORKER_PLACEHOLDER,
            total_weight_kg=round_kilograms(aggregate.total_weight_kg or 0),
            total_weighings=aggregate.total_weighings,
        )
        for aggregate in aggregates
    ]
    entries.sort(key=lambda entry: entry.total_weight_kg, reverse=True)
    return entries[:limit]


class LeaderboardService:
    """Top collectors of a cooperative."""

    async def aggregate_cooperative(
        self, db: AsyncSession, cooperative_id: int
    ) -> List[CollectorAggregate]:
        """SUM/COUNT of measurements per worker, restricted to one cooperative."""
        result = await db.execute(
            select(
                Measurement.worker_id,
                func.sum(Measurement.weight_kg),
                func.count(Measurement.id),
            )
            .join(Worker, Worker.id == Measurement.worker_id)
            .where(Worker.cooperative_id == cooperative_id)
            .group_by(Measurement.worker_id)
        )
        return [
            CollectorAggregate(
                worker_id=worker_id,
                total_weight_kg=Decimal(str(total)) if total is not None else None,
                total_weighings=count,
            )
            for worker_id, total, count in result.all()
        ]

    async def top_collectors(
        self,
        db: AsyncSession,
        worker_id: int,
        limit: int = TOP_COLLECTORS_LIMIT,
    ) -> List[TopCollectorResponse]:
        """
        Leaderboard of the cooperative the authenticated worker belongs to.

        Raises:
            PreconditionError: worker missing or without cooperative
            DatabaseError: any database failure
        """
        try:
            worker = await db.get(Worker, worker_id)
            if worker is None or worker.cooperative_id is None:
                raise PreconditionError(
                    "Cooperativa não definida para o coletor autenticado.",
                    context={"worker_id": worker_id},
                )

            aggregates = await self.aggregate_cooperative(db, worker.cooperative_id)
            if not aggregates:
                return []

            result = await db.execute(
                select(Worker.id, Worker.name).where(
                    Worker.id.in_([a.worker_id for a in aggregates])
                )
            )
            names = {row_id: name for row_id, name in result.all()}
        except SQLAlchemyError as e:
            logger.error("Database error building leaderboard: %s", str(e), exc_info=True)
            raise DatabaseError(context={"worker_id": worker_id}) from e

        return rank_collectors(aggregates, names, limit)


# ── Singleton Instance ────────────────────────────────────────────────────
leaderboard_service = LeaderboardService()
