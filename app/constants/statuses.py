"""
Booking and payment status constants - centralized to avoid string drift.
"""

# Booking lifecycle
BOOKING_STATUS_PENDING = "pending"
BOOKING_STATUS_CONFIRMED = "confirmed"

# Payment lifecycle
PAYMENT_STATUS_UNPAID = "unpaid"
PAYMENT_STATUS_PAID = "paid"

# Delivery outcomes returned by the email/SMS adapters
DELIVERY_SENT = "sent"
DELIVERY_SKIPPED = "skipped"
DELIVERY_FAILED = "failed"
