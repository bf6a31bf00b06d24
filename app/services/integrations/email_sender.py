"""
Email delivery via the Resend HTTP API.

Missing credentials turn every send into a logged no-op; transport failures
are logged and reported in the result, never raised.
"""

import logging

import httpx

from app.constants.providers import PROVIDER_RESEND
from app.constants.statuses import DELIVERY_FAILED, DELIVERY_SENT, DELIVERY_SKIPPED
from app.core.config import Settings
from app.services.integrations.http_client import create_httpx_client

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, html: str, settings: Settings) -> dict:
    """
    Send an HTML email.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body
        settings: Application settings (Resend key, sender identity)

    Returns:
        dict with status ("sent", "skipped" or "failed"), provider message id or error
    """
    result = {"channel": "email", "provider": PROVIDER_RESEND, "to": to}

    if not settings.email_enabled:
        logger.warning("Resend not configured - skipping email send")
        return {**result, "status": DELIVERY_SKIPPED, "reason": "Email transport not configured"}

    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": settings.resend_from,
        "to": [to],
        "subject": subject,
        "html": html,
    }

    try:
        async with create_httpx_client() as client:
            response = await client.post(settings.resend_api_url, headers=headers, json=payload)
    except httpx.HTTPError as e:
        logger.error(f"Resend request failed for {to}: {e}")
        return {**result, "status": DELIVERY_FAILED, "error": str(e)}

    if response.is_error:
        logger.error(f"Resend email error ({response.status_code}): {response.text}")
        return {
            **result,
            "status": DELIVERY_FAILED,
            "status_code": response.status_code,
            "error": response.text[:500],
        }

    message_id = response.json().get("id")
    logger.info(f"Sent email '{subject}' to {to} (id={message_id})")
    return {**result, "status": DELIVERY_SENT, "id": message_id}
