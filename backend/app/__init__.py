"""
Coleta Backend
==============

HTTP API behind the recycling-cooperative weighing app.

Layers, top to bottom:
    routes/      FastAPI routers; parse, authenticate, delegate
    security.py  bearer token → AuthenticatedWorker, bcrypt helpers
    services/    material resolver, unit normalizer, weighings, leaderboard
    schemas/     Pydantic request/response contracts (camelCase on the wire)
    models/      SQLAlchemy tables: cooperatives, workers, materials,
                 devices, measurements
    database.py  engine + AsyncSession per request

Run with `uvicorn app.main:app` from the backend/ directory.
"""

__version__ = "1.0.0"
