"""
Day-before reminder sweep with idempotency tracking.

Finds tomorrow's confirmed + paid bookings and sends each customer the
confirmation email and SMS once. A booking counts as reminded when
reminder_sent_at is set (claimed with an atomic conditional update) or when
its notes already carry the legacy "Reminder sent at" line.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.constants.event_types import REMINDER_SENTINEL, reminder_note_line
from app.constants.providers import CHANNEL_CONFIRMATION_EMAIL, CHANNEL_SMS
from app.constants.statuses import BOOKING_STATUS_CONFIRMED, PAYMENT_STATUS_PAID
from app.core.config import Settings
from app.db import session as db_session
from app.db.models import Booking
from app.services.bookings import BookingRepository, PersistenceError
from app.services.notifications import (
    send_confirmation_email,
    send_sms_confirmation,
    settle_deliveries,
)
from app.utils.datetime_utils import dt_replace_utc, tomorrow_in_timezone, utc_now

logger = logging.getLogger(__name__)

REMINDED = "reminded"
SKIPPED = "skipped"
FAILED = "failed"


def reminder_already_sent(booking: Booking) -> bool:
    if booking.reminder_sent_at is not None:
        return True
    return REMINDER_SENTINEL in (booking.internal_notes or "")


def append_reminder_note(existing_notes: str | None, sent_at: datetime) -> str:
    line = reminder_note_line(sent_at.isoformat())
    return f"{existing_notes}\n{line}" if existing_notes else line


async def send_booking_reminder(
    repo: BookingRepository,
    booking: Booking,
    settings: Settings,
    now: datetime,
) -> str:
    """
    Remind one booking (idempotent).

    Args:
        repo: Booking repository bound to the sweep's session
        booking: Booking loaded with customer and vehicles
        settings: Application settings
        now: Timestamp recorded as the reminder time

    Returns:
        "reminded", "skipped" (already reminded) or "failed" (claim could not be written)
    """
    if reminder_already_sent(booking):
        logger.debug(f"Reminder already sent for booking {booking.id} - skipping")
        return SKIPPED

    try:
        claimed = repo.claim_reminder(booking.id, now)
    except PersistenceError as e:
        # Nothing was sent, so the booking stays eligible for the next sweep
        logger.error(f"Failed to claim reminder for booking {booking.id}: {e}")
        return FAILED

    if not claimed:
        logger.info(f"Reminder for booking {booking.id} already claimed by another sweep")
        return SKIPPED

    customer = booking.customer
    outcomes = await settle_deliveries(
        {
            CHANNEL_CONFIRMATION_EMAIL: send_confirmation_email(booking, customer, settings),
            CHANNEL_SMS: send_sms_confirmation(
                getattr(customer, "phone", None),
                booking.rental_date,
                booking.start_time,
                settings,
            ),
        }
    )
    statuses = {channel: outcome.get("status") for channel, outcome in outcomes.items()}
    logger.info(f"Reminder for booking {booking.id}: {statuses}")

    try:
        repo.patch_booking_notes(booking.id, append_reminder_note(booking.internal_notes, now))
    except PersistenceError as e:
        logger.error(f"Failed to mark reminder sent for booking {booking.id}: {e}")

    return REMINDED


async def send_reminders_for_tomorrow(
    db: Session | None,
    settings: Settings,
    now: datetime | None = None,
) -> dict:
    """
    Sweep tomorrow's confirmed + paid bookings and send reminders.

    Args:
        db: Database session (None = persistence not configured, sweep is a no-op)
        settings: Application settings (timezone, transports)
        now: Reference instant for "tomorrow" (defaults to the current time)

    Returns:
        Summary dict with counts
    """
    repo = BookingRepository(db)
    if not repo.is_configured:
        return {"status": "skipped", "reason": "Database not configured"}

    if not settings.feature_reminders_enabled:
        logger.debug("Reminders feature disabled (feature flag) - skipping sweep")
        return {"status": "skipped", "reason": "Reminders feature disabled"}

    now = dt_replace_utc(now) or utc_now()
    tomorrow = tomorrow_in_timezone(settings.reminder_timezone, now)

    try:
        bookings = repo.fetch_bookings_by_date_status_payment(
            tomorrow, BOOKING_STATUS_CONFIRMED, PAYMENT_STATUS_PAID
        )
    except PersistenceError as e:
        logger.error(f"Failed to fetch reminders for {tomorrow}: {e}")
        return {"status": "error", "date": tomorrow.isoformat(), "error": str(e)}

    results = {
        "status": "completed",
        "date": tomorrow.isoformat(),
        "checked": len(bookings),
        REMINDED: 0,
        SKIPPED: 0,
        FAILED: 0,
    }

    for booking in bookings:
        try:
            outcome = await send_booking_reminder(repo, booking, settings, now)
        except Exception as e:
            logger.error(f"Error sending reminder for booking {booking.id}: {e}", exc_info=True)
            outcome = FAILED
        results[outcome] += 1

    logger.info(
        f"Reminder sweep for {tomorrow}: checked={results['checked']}, "
        f"reminded={results[REMINDED]}, skipped={results[SKIPPED]}, failed={results[FAILED]}"
    )
    return results


async def run_reminder_sweep_job(settings: Settings) -> dict:
    """Run one sweep with its own database session (scheduler / CLI entrypoint)."""
    if not db_session.is_database_configured():
        return {"status": "skipped", "reason": "Database not configured"}

    db = db_session.SessionLocal()
    try:
        return await send_reminders_for_tomorrow(db, settings)
    finally:
        db.close()
