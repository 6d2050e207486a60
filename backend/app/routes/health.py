"""
Coleta Backend — Health Check Route
=====================================

What:  GET /health liveness probe for Docker and load balancers.
Why:   Unauthenticated and database-free: it answers as long as the process
       can serve requests, so a database outage does not restart the container.
"""

from fastapi import APIRouter

from app.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Service liveness check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
