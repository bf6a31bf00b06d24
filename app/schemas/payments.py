"""
Payment API request/response schemas.

Field names on the wire are camelCase (what the web checkout sends).
"""

from pydantic import BaseModel, ConfigDict, Field


class SquarePaymentRequest(BaseModel):
    """Request schema for charging a card through Square."""

    model_config = ConfigDict(populate_by_name=True)

    source_id: str | None = Field(default=None, alias="sourceId")
    amount: int | None = None  # Cents
    currency: str = "USD"
    booking_id: int | None = Field(default=None, alias="bookingId")
    customer_email: str | None = Field(default=None, alias="customerEmail")
    customer_name: str | None = Field(default=None, alias="customerName")
    payment_type: str = Field(default="full", alias="paymentType")
    idempotency_key: str | None = Field(default=None, alias="idempotencyKey")


class SquarePaymentResponse(BaseModel):
    """Successful payment response."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    payment_id: str = Field(alias="paymentId")
    status: str | None = None
    receipt_url: str | None = Field(default=None, alias="receiptUrl")


class SquareConfigResponse(BaseModel):
    """Public Square identifiers for the web payment form."""

    model_config = ConfigDict(populate_by_name=True)

    application_id: str = Field(alias="applicationId")
    location_id: str = Field(alias="locationId")
