"""
Provider and channel constants for outbound integrations.

Use these instead of string literals to avoid drift and typos.
"""

PROVIDER_RESEND = "resend"
PROVIDER_TWILIO = "twilio"

# Notification channels (keys of DispatchResult.outcomes)
CHANNEL_CONFIRMATION_EMAIL = "confirmation_email"
CHANNEL_ADMIN_EMAIL = "admin_email"
CHANNEL_SMS = "sms"
