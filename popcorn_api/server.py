"""
Primary FastAPI application entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from popcorn_api.api.api import api_router
from popcorn_api.api.deps import close_connections, initialize_connections
from popcorn_api.core.config import settings
from popcorn_api.core.logging_config import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.info("Starting Popcorn API server...")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Application startup: Initializing connections...")
    await initialize_connections()
    yield
    # Shutdown
    logger.info("Application shutdown: Closing connections...")
    await close_connections()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/", status_code=status.HTTP_200_OK)
async def root():
    """Root endpoint to confirm the API is running."""
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("popcorn_api.server:app", host="0.0.0.0", port=8080, reload=True)
