"""
Booking persistence - the read/patch operations the notification core needs.

Not found is a normal None result. Database failures surface as
PersistenceError so callers can tell them apart from "no such booking".
"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.constants.statuses import BOOKING_STATUS_CONFIRMED, PAYMENT_STATUS_PAID
from app.db.models import Booking, Transaction

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A database read or write failed."""


class PersistenceNotConfiguredError(PersistenceError):
    """No database is configured for this process."""


def _booking_query():
    return select(Booking).options(
        selectinload(Booking.customer),
        selectinload(Booking.vehicles),
    ).execution_options(populate_existing=True)


class BookingRepository:
    """Booking reads and writes over a SQLAlchemy session."""

    def __init__(self, db: Session | None):
        self._db = db

    @property
    def is_configured(self) -> bool:
        return self._db is not None

    def _session(self) -> Session:
        if self._db is None:
            raise PersistenceNotConfiguredError("Database not configured (DATABASE_URL is unset)")
        return self._db

    def fetch_booking(self, booking_id: int | str) -> Booking | None:
        """
        Load a booking with its customer and vehicles, always from the database.

        Returns:
            Booking, or None when no booking has that id
        """
        db = self._session()
        try:
            key = int(booking_id)
        except (TypeError, ValueError):
            logger.debug(f"Booking id {booking_id!r} is not numeric - treating as not found")
            return None
        try:
            return db.execute(_booking_query().where(Booking.id == key)).scalar_one_or_none()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to fetch booking {booking_id}: {e}") from e

    def fetch_bookings_by_date_status_payment(
        self, rental_date: date, status: str, payment_status: str
    ) -> list[Booking]:
        db = self._session()
        try:
            query = _booking_query().where(
                Booking.rental_date == rental_date,
                Booking.status == status,
                Booking.payment_status == payment_status,
            ).order_by(Booking.id)
            return list(db.execute(query).scalars().all())
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to fetch bookings for {rental_date}: {e}") from e

    def patch_booking_notes(self, booking_id: int, notes: str) -> bool:
        """Overwrite internal_notes. Returns False when the booking no longer exists."""
        db = self._session()
        try:
            result = db.execute(
                update(Booking).where(Booking.id == booking_id).values(internal_notes=notes)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update notes for booking {booking_id}: {e}") from e
        return result.rowcount > 0

    def claim_reminder(self, booking_id: int, sent_at: datetime) -> bool:
        """
        Atomically stamp reminder_sent_at if it is still empty.

        Returns:
            True if this caller set the stamp, False if it was already set
        """
        db = self._session()
        try:
            result = db.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.reminder_sent_at.is_(None))
                .values(reminder_sent_at=sent_at)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to claim reminder for booking {booking_id}: {e}") from e
        return result.rowcount == 1

    def record_transaction(
        self,
        *,
        booking_id: int | None,
        square_payment_id: str,
        amount: Decimal,
        currency: str,
        status: str | None,
        payment_type: str,
        customer_email: str | None = None,
        customer_name: str | None = None,
        receipt_url: str | None = None,
    ) -> Transaction:
        db = self._session()
        transaction = Transaction(
            booking_id=booking_id,
            square_payment_id=square_payment_id,
            amount=amount,
            currency=currency,
            status=status,
            payment_type=payment_type,
            customer_email=customer_email,
            customer_name=customer_name,
            receipt_url=receipt_url,
        )
        try:
            db.add(transaction)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save transaction {square_payment_id}: {e}") from e
        return transaction

    def mark_booking_paid(self, booking_id: int, payment_id: str) -> bool:
        """Set status=confirmed / payment_status=paid after a successful charge."""
        db = self._session()
        try:
            result = db.execute(
                update(Booking)
                .where(Booking.id == booking_id)
                .values(
                    status=BOOKING_STATUS_CONFIRMED,
                    payment_status=PAYMENT_STATUS_PAID,
                    payment_id=payment_id,
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to update booking {booking_id}: {e}") from e
        return result.rowcount > 0
