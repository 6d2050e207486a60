"""
Coleta Backend — Weighing Route Tests
=======================================

What:  POST /weighings, GET /weighings/me and POST /weighings/requests.

What we test:
    ✅ Create returns 201 with the weighing DTO; grams survive the kg round trip
    ✅ materialId accepts the id, the id as a JSON number, or the name
    ✅ Invalid weights (including under half a gram) are rejected with 400 and nothing is stored
    ✅ Fractional grams are stored at the ledger scale; create and history agree
    ✅ Unknown material → 404; worker without cooperative → 400
    ✅ The cooperative device is created once and reused
    ✅ History is per worker, newest first, capped at 100
    ✅ Weighing requests are acknowledged with 202 {"status": "queued"}
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.models import Device, Measurement


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


class TestCreateWeighing:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_dto(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": str(seeded.pet_id), "weightGrams": 1234},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == str(seeded.alice_id)
        assert body["materialId"] == str(seeded.pet_id)
        assert body["materialName"] == "PET"
        assert body["weightGrams"] == 1234
        assert isinstance(body["id"], str)
        created_at = datetime.fromisoformat(body["createdAt"].replace("Z", "+00:00"))
        assert created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_weight_stored_in_kilograms(self, test_client, seeded, auth_headers, session_factory):
        await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "PET", "weightGrams": 2500},
        )

        async with session_factory() as session:
            measurement = (await session.execute(select(Measurement))).scalar_one()
        assert measurement.weight_kg == Decimal("2.5")
        assert measurement.bag_filled is False

    @pytest.mark.asyncio
    async def test_material_by_name_any_casing(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "  papelão ", "weightGrams": 800},
        )
        assert response.status_code == 201
        assert response.json()["materialId"] == str(seeded.papelao_id)
        assert response.json()["materialName"] == "Papelão"

    @pytest.mark.asyncio
    async def test_material_id_as_json_number(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": seeded.aluminio_id, "weightGrams": 300},
        )
        assert response.status_code == 201
        assert response.json()["materialName"] == "Alumínio"

    @pytest.mark.asyncio
    async def test_weight_as_numeric_string(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "PET", "weightGrams": "450"},
        )
        assert response.status_code == 201
        assert response.json()["weightGrams"] == 450

    @pytest.mark.asyncio
    async def test_fractional_grams_round_half_up(
        self, test_client, seeded, auth_headers, session_factory
    ):
        headers = auth_headers(seeded.alice_id)
        response = await test_client.post(
            "/weighings",
            headers=headers,
            json={"materialId": "PET", "weightGrams": 1500.5},
        )
        assert response.status_code == 201
        assert response.json()["weightGrams"] == 1501

        async with session_factory() as session:
            measurement = (await session.execute(select(Measurement))).scalar_one()
        assert measurement.weight_kg == Decimal("1.501")

        history = await test_client.get("/weighings/me", headers=headers)
        assert history.json() == [response.json()]

    @pytest.mark.asyncio
    async def test_half_gram_is_smallest_storable_weight(
        self, test_client, seeded, auth_headers, session_factory
    ):
        headers = auth_headers(seeded.alice_id)
        response = await test_client.post(
            "/weighings",
            headers=headers,
            json={"materialId": "PET", "weightGrams": 0.5},
        )
        assert response.status_code == 201
        assert response.json()["weightGrams"] == 1

        async with session_factory() as session:
            measurement = (await session.execute(select(Measurement))).scalar_one()
        assert measurement.weight_kg == Decimal("0.001")

        history = await test_client.get("/weighings/me", headers=headers)
        assert [w["weightGrams"] for w in history.json()] == [1]

    @pytest.mark.asyncio
    async def test_bag_filled_is_stored(self, test_client, seeded, auth_headers, session_factory):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={
                "materialId": "PET",
                "weightGrams": 100,
                "bagFilled": True,
                "deviceExternalId": "balanca-01",
            },
        )
        assert response.status_code == 201

        async with session_factory() as session:
            measurement = (await session.execute(select(Measurement))).scalar_one()
        assert measurement.bag_filled is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "weight,message",
        [
            (0, "O peso precisa ser maior que zero."),
            (-5, "O peso precisa ser maior que zero."),
            (0.4, "O peso precisa ser maior que zero."),
            (0.0001, "O peso precisa ser maior que zero."),
            ("0.4", "O peso precisa ser maior que zero."),
            ("abc", "Peso inválido."),
            (None, "Peso inválido."),
            (True, "Peso inválido."),
            (10_000_000_000, "Peso acima do limite permitido."),
        ],
    )
    async def test_invalid_weight_rejected(
        self, test_client, seeded, auth_headers, session_factory, weight, message
    ):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "PET", "weightGrams": weight},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == message
        assert await _count(session_factory, Measurement) == 0

    @pytest.mark.asyncio
    async def test_missing_weight_rejected(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "PET"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("material_id", ["", "   "])
    async def test_blank_material_rejected(self, test_client, seeded, auth_headers, material_id):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": material_id, "weightGrams": 100},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_material_is_404(self, test_client, seeded, auth_headers, session_factory):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "Vidro", "weightGrams": 100},
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Material não encontrado."
        assert await _count(session_factory, Measurement) == 0

    @pytest.mark.asyncio
    async def test_worker_without_cooperative_is_400(
        self, test_client, seeded, auth_headers, session_factory
    ):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.sem_coop_id),
            json={"materialId": "PET", "weightGrams": 100},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "precondition_failed"
        assert await _count(session_factory, Measurement) == 0
        assert await _count(session_factory, Device) == 0

    @pytest.mark.asyncio
    async def test_unknown_worker_is_400(self, test_client, seeded, auth_headers):
        response = await test_client.post(
            "/weighings",
            headers=auth_headers(9999),
            json={"materialId": "PET", "weightGrams": 100},
        )
        assert response.status_code == 400


class TestDeviceProvisioning:

    @pytest.mark.asyncio
    async def test_device_created_once_per_cooperative(
        self, test_client, seeded, auth_headers, session_factory
    ):
        for worker_id in (seeded.alice_id, seeded.bruno_id):
            response = await test_client.post(
                "/weighings",
                headers=auth_headers(worker_id),
                json={"materialId": "PET", "weightGrams": 100},
            )
            assert response.status_code == 201

        async with session_factory() as session:
            devices = (await session.execute(select(Device))).scalars().all()
            device_ids = set((await session.execute(select(Measurement.device_id))).scalars())

        assert len(devices) == 1
        assert devices[0].cooperative_id == seeded.central_id
        assert device_ids == {devices[0].id}

    @pytest.mark.asyncio
    async def test_each_cooperative_gets_its_own_device(
        self, test_client, seeded, auth_headers, session_factory
    ):
        for worker_id in (seeded.alice_id, seeded.erica_id):
            await test_client.post(
                "/weighings",
                headers=auth_headers(worker_id),
                json={"materialId": "PET", "weightGrams": 100},
            )

        async with session_factory() as session:
            cooperatives = set((await session.execute(select(Device.cooperative_id))).scalars())
        assert cooperatives == {seeded.central_id, seeded.norte_id}

    @pytest.mark.asyncio
    async def test_existing_device_reused(self, test_client, seeded, auth_headers, session_factory):
        async with session_factory() as session:
            device = Device(cooperative_id=seeded.central_id)
            session.add(device)
            await session.commit()
            device_id = device.id

        await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.alice_id),
            json={"materialId": "PET", "weightGrams": 100},
        )

        async with session_factory() as session:
            measurement = (await session.execute(select(Measurement))).scalar_one()
        assert measurement.device_id == device_id
        assert await _count(session_factory, Device) == 1


class TestWeighingHistory:

    @pytest.mark.asyncio
    async def test_history_newest_first(self, test_client, seeded, auth_headers):
        headers = auth_headers(seeded.alice_id)
        for grams in (100, 200, 300):
            await test_client.post(
                "/weighings", headers=headers, json={"materialId": "PET", "weightGrams": grams}
            )

        response = await test_client.get("/weighings/me", headers=headers)

        assert response.status_code == 200
        assert [w["weightGrams"] for w in response.json()] == [300, 200, 100]

    @pytest.mark.asyncio
    async def test_history_only_includes_own_weighings(self, test_client, seeded, auth_headers):
        await test_client.post(
            "/weighings",
            headers=auth_headers(seeded.bruno_id),
            json={"materialId": "PET", "weightGrams": 100},
        )

        response = await test_client.get("/weighings/me", headers=auth_headers(seeded.alice_id))
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_history_capped_at_100(self, test_client, seeded, auth_headers, session_factory):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        async with session_factory() as session:
            device = Device(cooperative_id=seeded.central_id)
            session.add(device)
            await session.flush()
            session.add_all(
                Measurement(
                    worker_id=seeded.alice_id,
                    material_id=seeded.pet_id,
                    device_id=device.id,
                    weight_kg=Decimal(i) / 1000,
                    created_at=base + timedelta(minutes=i),
                )
                for i in range(1, 106)
            )
            await session.commit()

        response = await test_client.get("/weighings/me", headers=auth_headers(seeded.alice_id))

        weighings = response.json()
        assert len(weighings) == 100
        assert weighings[0]["weightGrams"] == 105
        assert weighings[-1]["weightGrams"] == 6

    @pytest.mark.asyncio
    async def test_history_requires_auth(self, test_client):
        response = await test_client.get("/weighings/me")
        assert response.status_code == 401


class TestWeighingRequests:

    @pytest.mark.asyncio
    async def test_request_acknowledged(self, test_client, seeded, auth_headers, session_factory):
        response = await test_client.post(
            "/weighings/requests", headers=auth_headers(seeded.alice_id)
        )

        assert response.status_code == 202
        assert response.json() == {"status": "queued"}
        assert await _count(session_factory, Measurement) == 0

    @pytest.mark.asyncio
    async def test_request_requires_auth(self, test_client):
        response = await test_client.post("/weighings/requests")
        assert response.status_code == 401
