"""
Tests for the Square payment endpoints (/square-config and /square-payment).
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

from app.db.models import Booking, Transaction
from app.services.integrations.square_service import SquareNotConfiguredError, SquarePaymentError

PAYMENT = {
    "id": "sq_pay_1",
    "status": "COMPLETED",
    "receipt_url": "https://squareup.com/receipt/preview/sq_pay_1",
}


def _payload(**overrides):
    body = {
        "sourceId": "cnon:card-nonce-ok",
        "amount": 32100,
        "currency": "USD",
        "customerEmail": "jane@example.com",
        "customerName": "Jane Smith",
        "paymentType": "full",
        "idempotencyKey": "idem-1",
    }
    body.update(overrides)
    return body


def test_square_config_returns_public_ids(client):
    response = client.get("/square-config")
    assert response.status_code == 200
    assert response.json() == {"applicationId": "sandbox-sq0idb-test", "locationId": "LOC_TEST"}


def test_square_config_missing_returns_500(client, test_settings):
    test_settings.square_app_id = None
    response = client.get("/square-config")
    assert response.status_code == 500
    assert response.json() == {"error": "Square configuration not found"}


@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_payment_validation_errors(mock_create, client):
    cases = [
        (_payload(sourceId=None), "Missing sourceId (payment token)"),
        (_payload(amount=0), "Invalid amount"),
        (_payload(amount=-5), "Invalid amount"),
        (_payload(idempotencyKey=None), "Missing idempotencyKey"),
    ]
    for body, error in cases:
        response = client.post("/square-payment", json=body)
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": error}

    mock_create.assert_not_called()


@patch("app.api.payments.send_booking_notifications_job", new_callable=AsyncMock)
@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_successful_payment_records_and_notifies(mock_create, mock_notify, client, db, make_booking, test_settings):
    booking = make_booking(status="pending", payment_status="unpaid")
    mock_create.return_value = PAYMENT

    response = client.post("/square-payment", json=_payload(bookingId=booking.id))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "paymentId": "sq_pay_1",
        "status": "COMPLETED",
        "receiptUrl": "https://squareup.com/receipt/preview/sq_pay_1",
    }
    assert mock_create.await_args.kwargs["amount_cents"] == 32100
    assert mock_create.await_args.kwargs["booking_id"] == booking.id

    db.expire_all()
    stored = db.get(Booking, booking.id)
    assert stored.status == "confirmed"
    assert stored.payment_status == "paid"
    assert stored.payment_id == "sq_pay_1"

    transaction = db.query(Transaction).filter_by(square_payment_id="sq_pay_1").one()
    assert transaction.booking_id == booking.id
    assert transaction.amount == Decimal("321.00")
    assert transaction.customer_email == "jane@example.com"
    assert transaction.receipt_url == PAYMENT["receipt_url"]

    mock_notify.assert_awaited_once_with(booking.id, test_settings)


@patch("app.api.payments.send_booking_notifications_job", new_callable=AsyncMock)
@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_payment_without_booking_skips_notifications(mock_create, mock_notify, client, db):
    mock_create.return_value = PAYMENT

    response = client.post("/square-payment", json=_payload())

    assert response.status_code == 200
    mock_notify.assert_not_called()
    assert db.query(Transaction).count() == 1


@patch("app.api.payments.send_booking_notifications_job", new_callable=AsyncMock)
@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_notifications_feature_flag_off(mock_create, mock_notify, client, make_booking, test_settings):
    booking = make_booking()
    mock_create.return_value = PAYMENT
    test_settings.feature_notifications_enabled = False

    response = client.post("/square-payment", json=_payload(bookingId=booking.id))

    assert response.status_code == 200
    mock_notify.assert_not_called()


@patch("app.api.payments.send_booking_notifications_job", new_callable=AsyncMock)
@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_declined_payment_returns_400(mock_create, mock_notify, client, db, make_booking):
    booking = make_booking(status="pending", payment_status="unpaid")
    mock_create.side_effect = SquarePaymentError("Card declined.")

    response = client.post("/square-payment", json=_payload(bookingId=booking.id))

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Card declined."}
    mock_notify.assert_not_called()
    db.expire_all()
    assert db.get(Booking, booking.id).payment_status == "unpaid"
    assert db.query(Transaction).count() == 0


@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_square_not_configured_returns_500(mock_create, client):
    mock_create.side_effect = SquareNotConfiguredError("missing")

    response = client.post("/square-payment", json=_payload())

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Payment system not configured"}


@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_unexpected_error_returns_500(mock_create, client):
    mock_create.side_effect = RuntimeError("socket closed")

    response = client.post("/square-payment", json=_payload())

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


@patch("app.api.payments.send_booking_notifications_job", new_callable=AsyncMock)
@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_unknown_booking_still_returns_success(mock_create, mock_notify, client):
    """The card is already charged; a missing booking row is logged, not an error."""
    mock_create.return_value = PAYMENT

    response = client.post("/square-payment", json=_payload(bookingId=999999))

    assert response.status_code == 200
    assert response.json()["success"] is True


@patch("app.api.payments.create_payment", new_callable=AsyncMock)
def test_correlation_id_echoed(mock_create, client):
    mock_create.return_value = PAYMENT

    response = client.post(
        "/square-payment", json=_payload(), headers={"X-Correlation-ID": "checkout-abc"}
    )

    assert response.headers["X-Correlation-ID"] == "checkout-abc"
