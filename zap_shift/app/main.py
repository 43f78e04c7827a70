"""
FastAPI Application Entry Point.

This is the main application file for the Zap Shift parcel delivery backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from zap_shift.app.core.config import settings
from zap_shift.app.api.router import router as api_router
from zap_shift.app.db.session import engine, Base
from zap_shift.app.core.observability import ObservabilityMiddleware, configure_logging
from zap_shift.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from zap_shift.app.models.user import User
from zap_shift.app.models.rider import Rider
from zap_shift.app.models.parcel import Parcel
from zap_shift.app.models.payment import Payment
from zap_shift.app.models.tracking_log import TrackingLog

configure_logging(settings.log_level)
logger = logging.getLogger("zap_shift")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Disposes the connection pool on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s started", settings.app_name)
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel delivery coordination backend",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/", tags=["Root"])
async def root():
    return "Zap Shift server is running!"


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


app.include_router(api_router)


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logger.info("Zap Shift server listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run("zap_shift.app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
