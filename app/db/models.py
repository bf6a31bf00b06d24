from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional
from app.constants.statuses import BOOKING_STATUS_PENDING, PAYMENT_STATUS_UNPAID
from app.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    # None = unknown, False = customer told us they have none (drives email wording)
    has_boater_certificate: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="customer")


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    booking_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, unique=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=True, index=True
    )

    # Schedule
    rental_date: Mapped[Optional[Date]] = mapped_column(Date, nullable=True, index=True)
    start_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)  # HH:MM or HH:MM:SS
    duration_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Price breakdown (dollars)
    subtotal: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)
    tax_amount: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)
    credit_card_fee: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)
    discount_amount: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)
    addons_price: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)  # Damage waiver
    total_amount: Mapped[Optional[Numeric]] = mapped_column(Numeric(10, 2), nullable=True)

    # Status
    status: Mapped[str] = mapped_column(String(32), default=BOOKING_STATUS_PENDING, index=True)
    payment_status: Mapped[str] = mapped_column(String(32), default=PAYMENT_STATUS_UNPAID, index=True)
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    internal_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reminder_sent_at: Mapped[Optional[DateTime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer: Mapped[Optional["Customer"]] = relationship("Customer", back_populates="bookings")
    vehicles: Mapped[list["BookingVehicle"]] = relationship(
        "BookingVehicle", back_populates="booking", cascade="all, delete-orphan"
    )


class BookingVehicle(Base):
    __tablename__ = "booking_vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    booking_id: Mapped[int] = mapped_column(Integer, ForeignKey("bookings.id"), index=True)
    vehicle_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="vehicles")


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    booking_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("bookings.id"), nullable=True, index=True
    )
    square_payment_id: Mapped[str] = mapped_column(String(255), unique=True)
    amount: Mapped[Numeric] = mapped_column(Numeric(10, 2))  # Dollars (Square charges in cents)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    payment_type: Mapped[str] = mapped_column(String(32), default="full")
    customer_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
