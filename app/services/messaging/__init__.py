# Messaging: booking confirmation / admin email / SMS composers and business copy
# Re-export so "from app.services.messaging import ..." works for callers.

from app.services.messaging.composer import (
    build_admin_notification_email,
    build_confirmation_email,
    build_confirmation_email_for_booking,
    build_sms_confirmation,
    load_booking_copy,
)

__all__ = [
    "build_admin_notification_email",
    "build_confirmation_email",
    "build_confirmation_email_for_booking",
    "build_sms_confirmation",
    "load_booking_copy",
]
