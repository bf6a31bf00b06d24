"""
SMS delivery via the Twilio Messages API.
"""

import logging

import httpx

from app.constants.providers import PROVIDER_TWILIO
from app.constants.statuses import DELIVERY_FAILED, DELIVERY_SENT, DELIVERY_SKIPPED
from app.core.config import Settings
from app.services.integrations.http_client import create_httpx_client

logger = logging.getLogger(__name__)


async def send_sms(to: str, body: str, settings: Settings) -> dict:
    """
    Send a plain-text SMS.

    Never raises: an unconfigured transport is a skip, a non-2xx response or
    network error is logged and returned as a failed result.

    Args:
        to: Destination phone number (E.164)
        body: Pre-built message text
        settings: Application settings (Twilio credentials and sender number)

    Returns:
        dict with status and Twilio message sid or error detail
    """
    result = {"channel": "sms", "provider": PROVIDER_TWILIO, "to": to}

    if not settings.sms_enabled:
        logger.warning("Twilio not configured - skipping SMS send")
        return {**result, "status": DELIVERY_SKIPPED, "reason": "SMS transport not configured"}

    url = (
        f"{settings.twilio_api_base_url}/2010-04-01/Accounts/"
        f"{settings.twilio_account_sid}/Messages.json"
    )
    data = {
        "From": settings.twilio_from_number,
        "To": to,
        "Body": body,
    }

    try:
        async with create_httpx_client() as client:
            response = await client.post(
                url,
                data=data,
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
            )
    except httpx.HTTPError as e:
        logger.error(f"Twilio request failed for {to}: {e}")
        return {**result, "status": DELIVERY_FAILED, "error": str(e)}

    if response.is_error:
        logger.error(f"Twilio SMS error ({response.status_code}): {response.text}")
        return {
            **result,
            "status": DELIVERY_FAILED,
            "status_code": response.status_code,
            "error": response.text[:500],
        }

    sid = response.json().get("sid")
    logger.info(f"Sent SMS to {to} (sid={sid})")
    return {**result, "status": DELIVERY_SENT, "id": sid}
