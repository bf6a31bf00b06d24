"""
Square service - charges a card nonce through the Square Payments API.
"""

import logging

from app.core.config import Settings
from app.services.integrations.http_client import create_httpx_client
from app.services.messaging.composer import load_booking_copy

logger = logging.getLogger(__name__)


class SquareNotConfiguredError(Exception):
    """SQUARE_ACCESS_TOKEN / SQUARE_LOCATION_ID missing."""


class SquarePaymentError(Exception):
    """Square rejected the payment (decline, validation error, ...)."""

    def __init__(self, detail: str, response_body: dict | None = None):
        super().__init__(detail)
        self.detail = detail
        self.response_body = response_body or {}


async def create_payment(
    *,
    source_id: str,
    amount_cents: int,
    currency: str,
    idempotency_key: str,
    settings: Settings,
    booking_id: int | None = None,
    customer_email: str | None = None,
) -> dict:
    """
    Create (and complete) a Square payment.

    Args:
        source_id: Card token from the web payments SDK
        amount_cents: Amount in the smallest currency unit
        currency: ISO currency code
        idempotency_key: Client-generated key so retries never double charge
        settings: Application settings (Square token, location, API version)
        booking_id: Booking being paid for (stored as reference_id)
        customer_email: Buyer email for the Square receipt

    Returns:
        Square payment object (id, status, receipt_url, ...)

    Raises:
        SquareNotConfiguredError: If Square credentials are missing
        SquarePaymentError: If Square returns errors or a non-2xx status
        httpx.HTTPError: On transport failure
    """
    if not settings.square_enabled:
        raise SquareNotConfiguredError("Square credentials not configured")

    business_name = load_booking_copy()["business_name"]
    payload = {
        "source_id": source_id,
        "idempotency_key": idempotency_key,
        "amount_money": {"amount": amount_cents, "currency": currency},
        "location_id": settings.square_location_id,
        "buyer_email_address": customer_email,
        "note": f"{business_name} Booking #{booking_id}" if booking_id else f"{business_name} Payment",
        "reference_id": str(booking_id) if booking_id else None,
    }
    headers = {
        "Square-Version": settings.square_api_version,
        "Authorization": f"Bearer {settings.square_access_token}",
        "Content-Type": "application/json",
    }

    async with create_httpx_client() as client:
        response = await client.post(
            f"{settings.square_api_base_url}/v2/payments",
            headers=headers,
            json={k: v for k, v in payload.items() if v is not None},
        )

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.is_error or data.get("errors"):
        logger.error(f"Square API error ({response.status_code}): {data or response.text}")
        errors = data.get("errors") or [{}]
        raise SquarePaymentError(errors[0].get("detail") or "Payment processing failed", data)

    payment = data.get("payment") or {}
    logger.info(f"Square payment {payment.get('id')} created (status={payment.get('status')})")
    return payment
