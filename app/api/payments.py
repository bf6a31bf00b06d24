import logging
from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.deps import get_db
from app.middleware.correlation_id import get_correlation_id
from app.schemas.payments import SquareConfigResponse, SquarePaymentRequest, SquarePaymentResponse
from app.services.bookings import BookingRepository, PersistenceError
from app.services.integrations.square_service import (
    SquareNotConfiguredError,
    SquarePaymentError,
    create_payment,
)
from app.services.notifications import send_booking_notifications_job

logger = logging.getLogger(__name__)

router = APIRouter()


def _payment_error_response(status_code: int, error: str) -> JSONResponse:
    """Build JSONResponse for payment errors: {"success": False, "error": ...}."""
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def _record_payment(db: Session | None, payload: SquarePaymentRequest, payment: dict) -> None:
    """
    Save the transaction and mark the booking paid (best effort).

    The card has already been charged, so database failures are logged and
    never turn the response into an error.
    """
    repo = BookingRepository(db)
    if not repo.is_configured:
        logger.warning("Database not configured - payment not recorded")
        return

    payment_id = payment.get("id")
    try:
        repo.record_transaction(
            booking_id=payload.booking_id,
            square_payment_id=payment_id,
            amount=Decimal(payload.amount) / 100,
            currency=payload.currency,
            status=payment.get("status"),
            payment_type=payload.payment_type,
            customer_email=payload.customer_email,
            customer_name=payload.customer_name,
            receipt_url=payment.get("receipt_url"),
        )
    except PersistenceError as e:
        logger.error(f"Failed to save transaction: {e}")

    if payload.booking_id:
        try:
            if not repo.mark_booking_paid(payload.booking_id, payment_id):
                logger.warning(f"Booking {payload.booking_id} not found - status not updated")
        except PersistenceError as e:
            logger.error(f"Failed to update booking: {e}")


@router.get("/square-config", response_model=SquareConfigResponse)
def square_config(settings: Settings = Depends(get_settings)):
    """Return the public Square identifiers the web payment form needs."""
    if not settings.square_app_id or not settings.square_location_id:
        return JSONResponse(status_code=500, content={"error": "Square configuration not found"})
    return SquareConfigResponse(
        application_id=settings.square_app_id,
        location_id=settings.square_location_id,
    )


@router.post("/square-payment", response_model=SquarePaymentResponse)
async def square_payment(
    payload: SquarePaymentRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session | None = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Charge a card through Square, record the result and queue booking notifications.

    Notifications run as a background task after the response is sent, so
    payment success is never gated on email/SMS delivery.
    """
    correlation_id = get_correlation_id(request)

    if not payload.source_id:
        return _payment_error_response(400, "Missing sourceId (payment token)")
    if not payload.amount or payload.amount <= 0:
        return _payment_error_response(400, "Invalid amount")
    if not payload.idempotency_key:
        return _payment_error_response(400, "Missing idempotencyKey")

    try:
        payment = await create_payment(
            source_id=payload.source_id,
            amount_cents=payload.amount,
            currency=payload.currency,
            idempotency_key=payload.idempotency_key,
            settings=settings,
            booking_id=payload.booking_id,
            customer_email=payload.customer_email,
        )
    except SquareNotConfiguredError:
        logger.error("Square credentials not configured")
        return _payment_error_response(500, "Payment system not configured")
    except SquarePaymentError as e:
        logger.warning(
            f"Payment declined for booking {payload.booking_id} "
            f"(correlation_id={correlation_id}): {e.detail}"
        )
        return _payment_error_response(400, e.detail)
    except Exception as e:
        logger.error(
            f"Payment processing error (correlation_id={correlation_id}): {e}", exc_info=True
        )
        return _payment_error_response(500, "Internal server error")

    _record_payment(db, payload, payment)

    if payload.booking_id:
        if settings.feature_notifications_enabled:
            background_tasks.add_task(send_booking_notifications_job, payload.booking_id, settings)
        else:
            logger.debug(
                f"Notifications feature disabled (feature flag) - skipping booking {payload.booking_id}"
            )

    logger.info(
        f"Payment {payment.get('id')} succeeded for booking {payload.booking_id} "
        f"(correlation_id={correlation_id})"
    )
    return SquarePaymentResponse(
        payment_id=payment.get("id"),
        status=payment.get("status"),
        receipt_url=payment.get("receipt_url"),
    )
