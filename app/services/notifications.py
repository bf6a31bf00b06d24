"""
Booking notification dispatcher.

After a successful payment the booking is loaded fresh and three independent
sends go out together: customer confirmation email, admin alert email and
customer SMS. Each send settles on its own; one failing channel never blocks
or fails the others, and nothing here propagates to the payment flow.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from app.constants.providers import CHANNEL_ADMIN_EMAIL, CHANNEL_CONFIRMATION_EMAIL, CHANNEL_SMS
from app.constants.statuses import DELIVERY_FAILED, DELIVERY_SENT, DELIVERY_SKIPPED
from app.core.config import Settings
from app.db import session as db_session
from app.db.models import Booking
from app.services.bookings import BookingRepository, PersistenceError
from app.services.integrations.email_sender import send_email
from app.services.integrations.sms_sender import send_sms
from app.services.messaging.composer import (
    admin_subject,
    build_admin_notification_email,
    build_confirmation_email_for_booking,
    build_sms_confirmation,
    confirmation_subject,
)

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Booking that was notified plus the outcome of every channel."""

    booking: Booking
    outcomes: dict[str, dict] = field(default_factory=dict)

    def statuses(self) -> dict[str, str]:
        return {channel: outcome.get("status") for channel, outcome in self.outcomes.items()}

    @property
    def sent_count(self) -> int:
        return sum(1 for status in self.statuses().values() if status == DELIVERY_SENT)


def _skipped(channel: str, reason: str) -> dict:
    return {"channel": channel, "status": DELIVERY_SKIPPED, "reason": reason}


async def send_confirmation_email(booking: Booking | None, customer: Any, settings: Settings) -> dict:
    """Send the full confirmation email to the customer (skipped without an address)."""
    if booking is None or not getattr(customer, "email", None):
        return _skipped("email", "No customer email")
    html = build_confirmation_email_for_booking(booking, customer, settings.waiver_signing_url)
    return await send_email(
        to=customer.email,
        subject=confirmation_subject(booking),
        html=html,
        settings=settings,
    )


async def send_admin_notification(booking: Booking | None, customer: Any, settings: Settings) -> dict:
    """Send the compact new-booking alert to the admin inbox."""
    if booking is None:
        return _skipped("email", "No booking")
    return await send_email(
        to=settings.admin_email,
        subject=admin_subject(booking),
        html=build_admin_notification_email(booking, customer),
        settings=settings,
    )


async def send_sms_confirmation(
    to: str | None, rental_date: Any, start_time: Any, settings: Settings
) -> dict:
    """Text the customer a one-line confirmation (skipped without a phone number)."""
    if not to:
        return _skipped("sms", "No customer phone")
    return await send_sms(to=to, body=build_sms_confirmation(rental_date, start_time), settings=settings)


async def settle_deliveries(sends: dict[str, Awaitable[dict]]) -> dict[str, dict]:
    """
    Run every send concurrently and wait for all of them.

    An exception from one send becomes a "failed" outcome for that channel;
    it is logged and never re-raised.

    Args:
        sends: Mapping of channel name to the coroutine that performs the send

    Returns:
        Mapping of channel name to its result dict
    """
    channels = list(sends)
    results = await asyncio.gather(*sends.values(), return_exceptions=True)

    outcomes: dict[str, dict] = {}
    for channel, result in zip(channels, results):
        if isinstance(result, BaseException):
            logger.error(f"Notification channel {channel} raised: {result!r}")
            outcomes[channel] = {"channel": channel, "status": DELIVERY_FAILED, "error": str(result)}
        else:
            outcomes[channel] = result
    return outcomes


async def send_booking_notifications(
    db: Session | None,
    booking_id: int | str | None,
    settings: Settings,
) -> DispatchResult | None:
    """
    Load a booking and send its confirmation email, admin alert and SMS.

    Args:
        db: Database session (None when persistence is not configured)
        booking_id: Booking to notify about
        settings: Application settings

    Returns:
        DispatchResult with per-channel outcomes, or None when the booking
        doesn't exist or could not be loaded
    """
    if not booking_id:
        return None

    try:
        booking = BookingRepository(db).fetch_booking(booking_id)
        if booking is None:
            logger.info(f"Booking {booking_id} not found - no notifications sent")
            return None

        customer = booking.customer
        outcomes = await settle_deliveries(
            {
                CHANNEL_CONFIRMATION_EMAIL: send_confirmation_email(booking, customer, settings),
                CHANNEL_ADMIN_EMAIL: send_admin_notification(booking, customer, settings),
                CHANNEL_SMS: send_sms_confirmation(
                    getattr(customer, "phone", None),
                    booking.rental_date,
                    booking.start_time,
                    settings,
                ),
            }
        )
        result = DispatchResult(booking=booking, outcomes=outcomes)
        logger.info(f"Booking {booking.id} notifications: {result.statuses()}")
        return result

    except PersistenceError as e:
        logger.error(f"Notification error for booking {booking_id}: {e}")
        return None
    except Exception as e:
        logger.error(f"Unexpected notification error for booking {booking_id}: {e}", exc_info=True)
        return None


async def send_booking_notifications_job(booking_id: int | str, settings: Settings) -> DispatchResult | None:
    """
    Background-task wrapper for send_booking_notifications.

    Opens (and closes) its own database session so it can outlive the request
    that scheduled it.
    """
    db = db_session.SessionLocal() if db_session.is_database_configured() else None
    try:
        return await send_booking_notifications(db, booking_id, settings)
    finally:
        if db is not None:
            db.close()
