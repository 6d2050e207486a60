"""
Coleta Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool),
       an app built around that engine, and an httpx AsyncClient talking to it
       through ASGITransport. No server, no PostgreSQL.

Fixture Hierarchy (all function-scoped):
    engine ─┬─ session_factory ── seeded (cooperatives, workers, materials)
            └─ app ── test_client
    auth_headers: builds "Authorization: Bearer ..." for a worker id
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-that-is-at-least-32-characters-long"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fast hashing; the cost factor is not under test
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass
from typing import Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers tables)
from app.database import Base, build_session_factory
from app.main import create_app
from app.models import Cooperative, Material, Worker
from app.security import create_access_token, hash_password

PASSWORD = "senha123"


@dataclass
class SeedData:
    """Ids of the rows inserted by the `seeded` fixture."""

    central_id: int
    norte_id: int
    alice_id: int
    bruno_id: int
    carla_id: int
    davi_id: int
    erica_id: int
    sem_coop_id: int
    pet_id: int
    papelao_id: int
    aluminio_id: int
    named_one_id: int
    named_99_id: int


@pytest_asyncio.fixture
async def engine():
    """
    Fresh in-memory database per test.

    StaticPool: every session shares the single connection, otherwise each
    checkout would see its own empty in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def seeded(session_factory) -> SeedData:
    """
    Two cooperatives, six workers, five materials.

    Workers: alice, bruno, carla, davi in "Cooperativa Central";
    erica in "Cooperativa Norte"; sem_coop without cooperative.
    All of them use the password PASSWORD. CPFs are 1000000000N.

    Materials are inserted in this order, so the ids are 1..5:
    PET, Papelão, Alumínio, "1", "99".
    """
    password_hash = await hash_password(PASSWORD)
    async with session_factory() as session:
        central = Cooperative(name="Cooperativa Central")
        norte = Cooperative(name="Cooperativa Norte")
        session.add_all([central, norte])
        await session.flush()

        def worker(n: int, name: str, cooperative_id):
            return Worker(
                name=name,
                email=f"{name.lower()}@coleta.org.br",
                cpf=f"1000000000{n}",
                password_hash=password_hash,
                cooperative_id=cooperative_id,
            )

        workers = [
            worker(1, "Alice", central.id),
            worker(2, "Bruno", central.id),
            worker(3, "Carla", central.id),
            worker(4, "Davi", central.id),
            worker(5, "Erica", norte.id),
            worker(6, "SemCoop", None),
        ]
        session.add_all(workers)

        materials = [Material(name=name) for name in ("PET", "Papelão", "Alumínio", "1", "99")]
        for material in materials:
            session.add(material)
            await session.flush()

        await session.commit()

        return SeedData(
            central_id=central.id,
            norte_id=norte.id,
            alice_id=workers[0].id,
            bruno_id=workers[1].id,
            carla_id=workers[2].id,
            davi_id=workers[3].id,
            erica_id=workers[4].id,
            sem_coop_id=workers[5].id,
            pet_id=materials[0].id,
            papelao_id=materials[1].id,
            aluminio_id=materials[2].id,
            named_one_id=materials[3].id,
            named_99_id=materials[4].id,
        )


@pytest.fixture
def app(engine):
    return create_app(engine=engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient wired straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers() -> Callable[[int], Dict[str, str]]:
    def build(worker_id: int) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(worker_id)}"}

    return build
