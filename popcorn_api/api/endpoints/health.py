# /health endpoint
# popcorn_api/api/endpoints/health.py

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel

from popcorn_api.api import deps
from popcorn_api.data_access.database import get_db_manager

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "ok"
    database: bool = False
    cache: bool = False


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Perform a Health Check",
    response_description="Returns the health status of the API.",
)
async def health_check():
    """
    Liveness check. Reports whether the database engine and Redis client
    were initialized, without querying either.
    """
    return HealthResponse(
        status="ok",
        database=get_db_manager() is not None,
        cache=deps.redis_client is not None,
    )
