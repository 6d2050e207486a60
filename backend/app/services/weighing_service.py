"""
Coleta Backend — Weighing Service
===================================

What:  Records weighings into the measurement ledger and reads a worker's history.
Why:   Core workflow of the app: a collector puts material on the scale and saves it.
How:   Composes MaterialService (resolver), the unit normalizer and the
       lazily-created cooperative device.

Creation Flow (POST /weighings):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐    ┌──────────┐
    │  Worker  │───▶│  Resolve    │───▶│  Find/create │───▶│  g → kg  │───▶│  Insert  │
    │  + coop  │    │  material   │    │  device      │    │ (Decimal)│    │  row     │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘    └──────────┘

    Worker without cooperative → PreconditionError (400)
    Unknown material           → NotFoundError (404)

Each step is an independent statement inside the request session; the commit
in get_db_session is the only transaction boundary.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import DatabaseError, NotFoundError, PreconditionError
from app.models.device import Device
from app.models.material import Material
from app.models.measurement import Measurement
from app.models.worker import Worker
from app.schemas.weighing import (
    CreateWeighingRequest,
    WeighingRequestAck,
    WeighingResponse,
)
from app.services.material_service import material_service
from app.services.units import grams_to_kilograms, kilograms_to_grams

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100
MATERIAL_PLACEHOLDER = "Material"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_weighing_response(
    measurement: Measurement, material: Optional[Material] = None
) -> WeighingResponse:
    """Map a ledger row to the client DTO (kilograms back to integer grams)."""
    if material is None:
        material = measurement.material
    return WeighingResponse(
        id=str(measurement.id),
        user_id=str(measurement.worker_id),
        material_id=str(measurement.material_id),
        material_name=material.name if material is not None else MATERIAL_PLACEHOLDER,
        weight_grams=kilograms_to_grams(measurement.weight_kg),
        created_at=_as_utc(measurement.created_at),
    )


class WeighingService:
    """History, creation and the weighing-request acknowledgment."""

    async def list_for_worker(
        self,
        db: AsyncSession,
        worker_id: int,
        limit: int = HISTORY_LIMIT,
    ) -> List[WeighingResponse]:
        """Most recent weighings of `worker_id`, newest first."""
        try:
            result = await db.execute(
                select(Measurement)
                .options(selectinload(Measurement.material))
                .where(Measurement.worker_id == worker_id)
                .order_by(Measurement.created_at.desc(), Measurement.id.desc())
                .limit(limit)
            )
            measurements = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing weighings of %s: %s", worker_id, str(e), exc_info=True)
            raise DatabaseError(context={"worker_id": worker_id}) from e

        return [to_weighing_response(m) for m in measurements]

    async def get_or_create_device(self, db: AsyncSession, cooperative_id: int) -> Device:
        """
        First device registered for the cooperative, created on first use.

        Not guarded against concurrent first use: two simultaneous first
        weighings may each insert a device.
        """
        result = await db.execute(
            select(Device)
            .where(Device.cooperative_id == cooperative_id)
            .order_by(Device.id.asc())
            .limit(1)
        )
        device = result.scalar_one_or_none()
        if device is not None:
            return device

        device = Device(cooperative_id=cooperative_id)
        db.add(device)
        await db.flush()
        logger.info("Created device %s for cooperative %s", device.id, cooperative_id)
        return device

    async def create_weighing(
        self,
        db: AsyncSession,
        worker_id: int,
        request: CreateWeighingRequest,
    ) -> WeighingResponse:
        """
        Append one weighing to the ledger.

        Args:
            worker_id: authenticated worker
            request: validated body (weight already checked > 0)

        Raises:
            PreconditionError: worker missing or without cooperative
            NotFoundError: material not resolvable
            DatabaseError: any database failure
        """
        try:
            worker = await db.get(Worker, worker_id)
            if worker is None or worker.cooperative_id is None:
                raise PreconditionError(
                    "Cooperativa não encontrada para o trabalhador autenticado.",
                    context={"worker_id": worker_id},
                )

            material = await material_service.resolve_material(db, request.material_id)
            if material is None:
                raise NotFoundError(
                    "Material não encontrado.",
                    resource="material",
                    resource_id=request.material_id.strip(),
                )

            device = await self.get_or_create_device(db, worker.cooperative_id)

            measurement = Measurement(
                worker_id=worker_id,
                material_id=material.id,
                device_id=device.id,
                weight_kg=grams_to_kilograms(request.weight_grams),
                created_at=datetime.now(timezone.utc),
                bag_filled=bool(request.bag_filled),
            )
            db.add(measurement)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating weighing for %s: %s", worker_id, str(e), exc_info=True)
            raise DatabaseError(context={"worker_id": worker_id}) from e

        if request.device_external_id:
            logger.debug(
                "Weighing %s reported by external device %s",
                measurement.id,
                request.device_external_id,
            )
        logger.info(
            "Worker %s recorded weighing %s: material=%s weight_kg=%s device=%s",
            worker_id,
            measurement.id,
            material.id,
            measurement.weight_kg,
            device.id,
        )
        return to_weighing_response(measurement, material)

    def acknowledge_request(self, worker_id: int) -> WeighingRequestAck:
        """
        Acknowledge a "please weigh for me" request from the app.

        Nothing is enqueued; the request is only logged.
        """
        logger.info("Weighing request registered for worker %s", worker_id)
        return WeighingRequestAck(status="queued")


# ── Singleton Instance ────────────────────────────────────────────────────
weighing_service = WeighingService()
