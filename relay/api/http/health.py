"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from relay.dependencies import DispatcherDep, RegistryDep
from relay.logging import logger
from relay.storage.db import engine

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    database: str
    broadcast_backend: str
    active_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(
    response: Response, registry: RegistryDep, dispatcher: DispatcherDep
) -> HealthResponse:
    """
    Check health of the database and the broadcast backend.

    Returns 503 Service Unavailable if either is unhealthy.
    """
    db_status = "healthy"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"

    backend_status = (
        "healthy" if await dispatcher.backend.ping() else "unhealthy"
    )

    overall_status = (
        "healthy"
        if db_status == "healthy" and backend_status == "healthy"
        else "unhealthy"
    )
    if overall_status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall_status,
        database=db_status,
        broadcast_backend=f"{dispatcher.backend.name}:{backend_status}",
        active_connections=len(registry),
    )
