import logging
from datetime import UTC, datetime

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.payments import router as payments_router
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.deps import get_db
from app.jobs.reminder_scheduler import ReminderScheduler
from app.middleware.correlation_id import CorrelationIdMiddleware

logger = logging.getLogger(__name__)

app = FastAPI(title="JetSki Booking Backend")

app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-client-info", "apikey"],
)

app.include_router(payments_router)


@app.on_event("startup")
async def startup_event():
    """Configure logging, log enabled integrations and start the reminder timer."""
    configure_logging()

    # Log enabled integrations summary (no secrets)
    logger.info(
        "Startup: Configuration loaded - "
        f"Environment: {settings.app_env}, "
        f"Database: {settings.database_enabled}, "
        f"Square: {settings.square_enabled}, "
        f"Email: {settings.email_enabled}, "
        f"SMS: {settings.sms_enabled}"
    )
    if not settings.email_enabled:
        logger.warning("RESEND_API_KEY not set - confirmation emails will be skipped")
    if not settings.sms_enabled:
        logger.warning("Twilio credentials not set - SMS confirmations will be skipped")

    if settings.feature_reminders_enabled and settings.reminder_scheduler_enabled:
        scheduler = ReminderScheduler(settings)
        scheduler.start()
        app.state.reminder_scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event():
    scheduler = getattr(app.state, "reminder_scheduler", None)
    if scheduler is not None:
        await scheduler.stop()


@app.get("/health")
def health():
    """
    Health check endpoint with feature flag and integration visibility.

    Returns 200 immediately - used for basic health checks.
    """
    return {
        "ok": True,
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "features": {
            "notifications_enabled": settings.feature_notifications_enabled,
            "reminders_enabled": settings.feature_reminders_enabled,
        },
        "integrations": {
            "database": settings.database_enabled,
            "square": settings.square_enabled,
            "email": settings.email_enabled,
            "sms": settings.sms_enabled,
        },
    }


@app.get("/ready")
def ready(db: Session | None = Depends(get_db)):
    """
    Readiness check endpoint - verifies database connectivity.

    Returns 200 if database is accessible, 503 if not.
    """
    if db is None:
        return JSONResponse(status_code=503, content={"ok": False, "database": "not_configured"})
    try:
        db.execute(text("SELECT 1"))
        return {"ok": True, "database": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"ok": False, "database": "unavailable"})
