"""
Vet Appointment Notifications API
Main application file
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import uvicorn

from app.core.clock import utcnow
from app.core.config import settings
from app.core.exceptions import InvalidTransition, NotFound
from app.core.init_db import init_db, seed_initial_data
from app.routers import appointment, contact_preferences, reminders, vaccination
from app import models  # noqa: F401  registers every table on Base.metadata

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.log_format
)
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application
# ============================================================================

docs_url = "/docs" if not settings.is_production else None
redoc_url = "/redoc" if not settings.is_production else None

app = FastAPI(
    title="Vet Appointment Notifications API",
    version=settings.app_version,
    description="Appointment lifecycle, reminder scans and SMS/email notifications for a veterinary clinic",
    docs_url=docs_url,
    redoc_url=redoc_url,
)

# ============================================================================
# CORS Configuration
# ============================================================================

if settings.API_CORS_ORIGINS and settings.API_CORS_ORIGINS.strip() == "*":
    # Allow all origins (credentials must be False)
    origins = ["*"]
    allow_credentials = False
else:
    origins = list(settings.cors_origins)
    if settings.API_CORS_ORIGINS:
        origins.extend(o.strip() for o in settings.API_CORS_ORIGINS.split(",") if o.strip())
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Domain Error Handlers
# ============================================================================

@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "current_status": exc.current,
            "requested_status": exc.requested,
        },
    )

# ============================================================================
# Root & Health Endpoints
# ============================================================================

@app.get("/", tags=["Root"])
def root():
    """Root endpoint - API information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "documentation": docs_url,
        "endpoints": {
            "health": "/health",
            "appointments": "/api/appointments",
            "owners": "/api/owners",
            "vaccinations": "/api/vaccinations",
            "reminders": "/api/reminders",
        }
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for API monitoring"""
    return {
        "status": "ok",
        "message": f"{settings.app_name} is running",
        "version": settings.app_version,
        "environment": settings.ENVIRONMENT,
        "timestamp": utcnow().isoformat(),
    }

# ============================================================================
# Event Handlers
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Clinic timezone: {settings.clinic_timezone}")
    logger.info(f"SMS enabled: {settings.twilio_enabled and settings.twilio_sms_enabled}, Email enabled: {settings.email_enabled}")
    logger.info("=" * 60)

    try:
        logger.info("Ensuring database tables exist...")
        init_db()
        logger.info("✓ Database tables ready")
        if settings.seed_database:
            seed_initial_data()
    except Exception as e:
        logger.error(f"✗ Database initialization failed: {e}")
        logger.warning("Application will continue, but database operations may fail")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.app_name}")

# ============================================================================
# Router Registration
# ============================================================================

app.include_router(appointment.router)  # Booking and status transitions
app.include_router(contact_preferences.router)  # Owner notification preferences
app.include_router(vaccination.router)  # Vaccination schedule
app.include_router(reminders.router)  # Scheduler-triggered reminder scans

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
