# FastAPI dependencies (database session, cache, services)
# popcorn_api/api/deps.py

import logging
from typing import AsyncGenerator, Optional

import redis.asyncio as redis
from fastapi import Depends, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from popcorn_api.core.config import settings
from popcorn_api.data_access.database import close_db_manager, get_db_manager, init_db_manager
from popcorn_api.data_access.movie_repository import MovieRepository
from popcorn_api.data_access.redis_client import CacheRepository
from popcorn_api.services.movie_service import MovieService

logger = logging.getLogger(__name__)

# --- Shared clients (initialized in the lifespan) ---
redis_client: Optional[redis.Redis] = None


async def initialize_connections():
    """
    Initializes the database engine and the Redis client.
    Called during FastAPI startup from the lifespan handler.
    """
    global redis_client
    logger.info("Initializing external connections...")

    # --- Database Initialization ---
    try:
        init_db_manager(
            settings.DATABASE_URL.get_secret_value(),
            pool_size=settings.DATABASE_POOL_SIZE,
            echo=settings.DATABASE_ECHO,
        )
    except (SQLAlchemyError, ImportError) as e:
        # Requests will answer 503 until the engine exists
        logger.error(f"Database engine creation failed: {e}", exc_info=True)

    # --- Redis Initialization ---
    try:
        logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL.get_secret_value()[:15]}...")
        redis_client = redis.from_url(
            settings.REDIS_URL.get_secret_value(),
            encoding="utf-8",
            decode_responses=True,
        )
        await redis_client.ping()
        logger.info("Redis client initialized successfully.")
    except RedisError as e:
        # The API keeps serving, uncached
        logger.error(f"Redis connection failed during initialization: {e}", exc_info=True)
        redis_client = None
    except Exception as e:
        logger.error(f"Unexpected error initializing Redis client: {e}", exc_info=True)
        redis_client = None


async def close_connections():
    """
    Closes the database engine and the Redis client.
    Called during FastAPI shutdown from the lifespan handler.
    """
    global redis_client
    logger.info("Closing external connections...")
    await close_db_manager()
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis client closed.")


# --- Database Dependency ---

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields one database session per request.

    Raises:
        HTTPException 503: If the database engine is not available.
    """
    db_manager = get_db_manager()
    if db_manager is None:
        logger.critical("Database engine is not available. Check initialization.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available.",
        )
    async with db_manager.session_scope() as session:
        yield session


# --- Cache Dependency ---

def get_cache() -> CacheRepository:
    """
    FastAPI dependency that provides the response cache.

    A missing Redis client is not an error: the repository then reports
    every read as a miss and skips every write.
    """
    return CacheRepository(redis_client)


# --- Service Dependencies ---

def get_movie_service(
    session: AsyncSession = Depends(get_db_session),
    cache: CacheRepository = Depends(get_cache),
) -> MovieService:
    return MovieService(
        repository=MovieRepository(session),
        cache=cache,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
    )
