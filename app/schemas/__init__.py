"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.payments import (
    SquareConfigResponse,
    SquarePaymentRequest,
    SquarePaymentResponse,
)

__all__ = [
    "SquareConfigResponse",
    "SquarePaymentRequest",
    "SquarePaymentResponse",
]
