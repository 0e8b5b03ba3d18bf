# pyright: reportMissingTypeStubs=false
"""
Clinic Scheduling Backend API

A FastAPI application exposing the appointment scheduling engine: doctor
availability, booking, rescheduling, cancellation and appointment lifecycle.

Features:
- Slot availability derived from weekly hours, per-center schedules,
  vacations and date overrides
- Double-booking prevention enforced by the database
- Periodic absence sweep (APScheduler)
- PostgreSQL database with SQLAlchemy ORM
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import appointments, availability
from core.config import ABSENCE_SWEEP_ENABLED, LOG_LEVEL
from core.constants import CORS_ORIGINS
from core.exceptions import SchedulingError
from services.absence_sweep_scheduler import start_absence_sweep_scheduler, stop_absence_sweep_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Clinic Scheduling Backend API")

    # Database sessions are created fresh for each scheduler run
    if ABSENCE_SWEEP_ENABLED:
        try:
            await start_absence_sweep_scheduler()
        except Exception as e:
            logger.exception(f"Failed to start absence sweep scheduler: {e}")

    yield

    if ABSENCE_SWEEP_ENABLED:
        try:
            await stop_absence_sweep_scheduler()
        except Exception as e:
            logger.exception(f"Error stopping absence sweep scheduler: {e}")

    logger.info("Shutting down Clinic Scheduling Backend API")


# Create FastAPI application
app = FastAPI(
    title="Clinic Scheduling Backend",
    description="Appointment scheduling and availability engine for multi-center clinics",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    availability.router,
    prefix="/api",
    tags=["availability"],
    responses={
        400: {"description": "Bad request"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)

app.include_router(
    appointments.router,
    prefix="/api",
    tags=["appointments"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal server error"},
    },
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Clinic Scheduling Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Global exception handlers
@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Handle domain errors raised by the scheduling services."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} ({exc.code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "code": "VALIDATION_ERROR"},
    )

