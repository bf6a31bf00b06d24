"""
Booking message composers - confirmation email, admin alert and SMS text.

All composers are pure: the same booking/customer input always yields the
same output, and missing fields render as placeholders instead of raising.
Fixed business copy lives in app/copy/booking_copy.yml.
"""

import html
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from app.utils.formatting import currency, format_date, format_duration, format_time, to_decimal

logger = logging.getLogger(__name__)

BOOKING_COPY_PATH = Path(__file__).resolve().parent.parent.parent / "copy" / "booking_copy.yml"

NOT_AVAILABLE = "N/A"


def _get_default_copy() -> dict[str, Any]:
    """Copy used when the YAML file is missing or unreadable."""
    return {
        "business_name": "JetSki Miami",
        "tagline": "Ocean-Deep Adventures Await",
        "location": {"name": "Miami Beach Marina", "address": "300 Alton Rd, Miami Beach, FL"},
        "support_phone": "+1 786-863-1721",
        "certificate_note": {
            "required": "Boater Certificate required if born on/after Jan 1, 1988.",
            "reminder": "Bring your Boater Certificate if required.",
        },
        "what_to_bring": [
            "Government issued ID",
            "{certificate_note}",
            "Sunscreen, sunglasses, and water",
        ],
        "waiver_cta": "Complete your waiver before arrival to save time.",
        "cancellation_policy": (
            "Free cancellation up to 24 hours before your scheduled start time. "
            "Within 24 hours, deposits are non-refundable."
        ),
        "sms_confirmation": (
            "Your {business_name} booking is confirmed! Date: {date}, Time: {time}. "
            "See you at {location_name}! 🌊"
        ),
    }


def _merge_copy(defaults: dict[str, Any], loaded: Any) -> dict[str, Any]:
    """
    Overlay loaded YAML onto the defaults, one level of nesting deep.

    Keys whose value doesn't match the default's type are ignored, so a
    partial or malformed file can never leave a section half-missing.
    """
    if not isinstance(loaded, dict):
        raise ValueError(f"expected a mapping, got {type(loaded).__name__}")

    merged = dict(defaults)
    for key, value in loaded.items():
        default = defaults.get(key)
        if default is None:
            merged[key] = value
        elif not isinstance(value, type(default)):
            logger.warning(f"Booking copy key '{key}' has the wrong type, using default")
        elif isinstance(default, dict):
            merged[key] = {**default, **{k: v for k, v in value.items() if isinstance(v, str)}}
        elif isinstance(default, list):
            merged[key] = [item for item in value if isinstance(item, str)] or default
        else:
            merged[key] = value
    return merged


@lru_cache(maxsize=1)
def load_booking_copy() -> dict[str, Any]:
    """
    Load business copy from YAML, merged over the built-in defaults.
    Cached for the life of the process.
    """
    copy = _get_default_copy()
    try:
        if BOOKING_COPY_PATH.exists():
            with open(BOOKING_COPY_PATH, encoding="utf-8") as f:
                copy = _merge_copy(copy, yaml.safe_load(f) or {})
            logger.info(f"Loaded booking copy from {BOOKING_COPY_PATH}")
        else:
            logger.warning(f"Booking copy not found at {BOOKING_COPY_PATH}, using defaults")
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Failed to load booking copy: {e}, using defaults")
        copy = _get_default_copy()
    return copy


def _esc(value: Any, placeholder: str) -> str:
    if value is None or value == "":
        return html.escape(placeholder)
    return html.escape(str(value))


def vehicle_count(booking: Any) -> int:
    """Number of jet skis on the booking; 1 when no vehicle rows are attached."""
    vehicles = getattr(booking, "vehicles", None)
    return len(vehicles) if vehicles else 1


def waiver_line(damage_waiver_price: Any) -> str:
    amount = to_decimal(damage_waiver_price)
    if amount is not None and amount > 0:
        return f"Included ({currency(damage_waiver_price)})"
    return "Not added"


def certificate_note(has_boater_certificate: bool | None) -> str:
    notes = load_booking_copy()["certificate_note"]
    if has_boater_certificate is False:
        return notes["required"]
    return notes["reminder"]


def discount_line(discount_amount: Any) -> str:
    if discount_amount:
        return f"- {currency(discount_amount)}"
    return currency(0)


def _row(label: str, value: str, value_class: str = "value") -> str:
    return (
        f'<div class="row"><div class="label">{label}</div>'
        f'<div class="{value_class}">{value}</div></div>'
    )


_EMAIL_STYLE = """
    body { margin:0; padding:0; background:#081a2b; font-family: 'Arial', sans-serif; }
    .container { max-width:600px; margin:0 auto; background:#0c2238; color:#f5f8ff; }
    .header { padding:24px; text-align:center; background:linear-gradient(135deg,#041221,#0f2d4a); }
    .logo { font-size:24px; font-weight:700; color:#f2c56b; letter-spacing:1px; }
    .content { padding:24px; }
    .card { background:#112b44; border-radius:12px; padding:20px; margin-bottom:16px; }
    .title { font-size:20px; font-weight:700; margin-bottom:8px; color:#f2c56b; }
    .row { display:flex; justify-content:space-between; padding:6px 0; border-bottom:1px solid rgba(255,255,255,0.08); }
    .row:last-child { border-bottom:none; }
    .label { color:#b6c6d9; }
    .value { font-weight:600; }
    .highlight { color:#f2c56b; font-weight:700; }
    .cta { display:inline-block; background:#f2c56b; color:#081a2b; padding:12px 18px; border-radius:999px; text-decoration:none; font-weight:700; }
    .footer { padding:20px; font-size:12px; color:#9fb1c6; text-align:center; }
    @media (max-width: 480px) {
      .row { flex-direction:column; align-items:flex-start; }
      .value { margin-top:4px; }
    }
"""


def build_confirmation_email(
    *,
    customer_name: str | None = None,
    booking_number: str | None = None,
    rental_date: Any = None,
    start_time: Any = None,
    duration_hours: Any = None,
    jetski_count: int = 1,
    subtotal: Any = None,
    tax_amount: Any = None,
    credit_card_fee: Any = None,
    discount_amount: Any = None,
    total_amount: Any = None,
    damage_waiver_price: Any = None,
    has_boater_certificate: bool | None = None,
    waiver_url: str = "",
) -> str:
    """
    Build the customer confirmation email (full HTML document).

    Args:
        customer_name: Guest name ("Guest" when missing)
        booking_number: Human-facing booking number
        rental_date: Rental date (ISO string or date)
        start_time: Start time (HH:MM[:SS] string or time)
        duration_hours: Rental length in hours
        jetski_count: Number of jet skis
        subtotal, tax_amount, credit_card_fee, discount_amount, total_amount: Price breakdown
        damage_waiver_price: Add-on price; a positive amount means the waiver was bought
        has_boater_certificate: False switches the checklist to the required-certificate wording
        waiver_url: Link for the waiver-signing button

    Returns:
        HTML string
    """
    copy = load_booking_copy()
    business = html.escape(copy["business_name"])
    note = certificate_note(has_boater_certificate)

    reservation_rows = "\n        ".join(
        [
            _row("Guest", _esc(customer_name, "Guest")),
            _row("Booking #", _esc(booking_number, "—")),
            _row("Date", html.escape(str(format_date(rental_date)))),
            _row("Start Time", html.escape(str(format_time(start_time, rental_date)))),
            _row("Duration", f"{html.escape(format_duration(duration_hours))} hour(s)"),
            _row("JetSkis", str(jetski_count)),
            _row("Damage Waiver", waiver_line(damage_waiver_price)),
        ]
    )
    breakdown_rows = "".join(
        [
            _row("Subtotal", currency(subtotal)),
            _row("Tax", currency(tax_amount)),
            _row("Credit Card Fee", currency(credit_card_fee)),
            _row("Discount", discount_line(discount_amount)),
        ]
    )
    checklist = "\n        ".join(
        f"<div>• {html.escape(item.replace('{certificate_note}', note))}</div>"
        for item in copy["what_to_bring"]
    )
    location = copy["location"]

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>Booking Confirmation - {business}</title>
  <style>{_EMAIL_STYLE}  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <div class="logo">{business}</div>
      <div>Booking Confirmation</div>
    </div>
    <div class="content">
      <div class="card">
        <div class="title">Reservation Details</div>
        {reservation_rows}
      </div>

      <div class="card">
        <div class="title">Payment Summary</div>
        {breakdown_rows}
        {_row("Total", currency(total_amount), "value highlight")}
      </div>

      <div class="card">
        <div class="title">What to Bring</div>
        {checklist}
      </div>

      <div class="card">
        <div class="title">Location</div>
        <div>{html.escape(location["name"])}</div>
        <div>{html.escape(location["address"])}</div>
      </div>

      <div class="card">
        <div class="title">Waiver Signing</div>
        <div>{html.escape(copy["waiver_cta"])}</div>
        <div style="margin-top:12px;"><a class="cta" href="{html.escape(waiver_url, quote=True)}">Sign Waiver</a></div>
      </div>

      <div class="card">
        <div class="title">Cancellation Policy</div>
        <div>{html.escape(copy["cancellation_policy"])}</div>
      </div>

      <div class="card">
        <div class="title">Need Help?</div>
        <div>Call or text us anytime: <strong>{html.escape(copy["support_phone"])}</strong></div>
      </div>
    </div>
    <div class="footer">
      © {business} · {html.escape(copy["tagline"])}
    </div>
  </div>
</body>
</html>"""


def build_confirmation_email_for_booking(booking: Any, customer: Any, waiver_url: str) -> str:
    """Map a booking + customer record onto build_confirmation_email()."""
    return build_confirmation_email(
        customer_name=getattr(customer, "full_name", None),
        booking_number=getattr(booking, "booking_number", None),
        rental_date=getattr(booking, "rental_date", None),
        start_time=getattr(booking, "start_time", None),
        duration_hours=getattr(booking, "duration_hours", None),
        jetski_count=vehicle_count(booking),
        subtotal=getattr(booking, "subtotal", None),
        tax_amount=getattr(booking, "tax_amount", None),
        credit_card_fee=getattr(booking, "credit_card_fee", None),
        discount_amount=getattr(booking, "discount_amount", None),
        total_amount=getattr(booking, "total_amount", None),
        damage_waiver_price=getattr(booking, "addons_price", None),
        has_boater_certificate=getattr(customer, "has_boater_certificate", None),
        waiver_url=waiver_url,
    )


def build_admin_notification_email(booking: Any, customer: Any) -> str:
    """Compact HTML summary of a new booking for the admin inbox."""
    business = html.escape(load_booking_copy()["business_name"])
    rental_date = getattr(booking, "rental_date", None)
    lines = [
        f"<h2>New {business} Booking</h2>",
        f"<p><strong>Booking #:</strong> {_esc(getattr(booking, 'booking_number', None), NOT_AVAILABLE)}</p>",
        (
            f"<p><strong>Customer:</strong> {_esc(getattr(customer, 'full_name', None), NOT_AVAILABLE)} "
            f"({_esc(getattr(customer, 'email', None), NOT_AVAILABLE)})</p>"
        ),
        f"<p><strong>Phone:</strong> {_esc(getattr(customer, 'phone', None), NOT_AVAILABLE)}</p>",
        f"<p><strong>Date:</strong> {html.escape(str(format_date(rental_date)))}</p>",
        (
            "<p><strong>Start:</strong> "
            f"{html.escape(str(format_time(getattr(booking, 'start_time', None), rental_date)))}</p>"
        ),
        (
            "<p><strong>Duration:</strong> "
            f"{html.escape(format_duration(getattr(booking, 'duration_hours', None)))} hour(s)</p>"
        ),
        f"<p><strong>JetSkis:</strong> {vehicle_count(booking)}</p>",
        f"<p><strong>Total:</strong> {currency(getattr(booking, 'total_amount', None))}</p>",
    ]
    return "\n".join(lines)


def build_sms_confirmation(rental_date: Any, start_time: Any) -> str:
    """One-line SMS confirmation with the formatted date and time."""
    copy = load_booking_copy()
    return copy["sms_confirmation"].format(
        business_name=copy["business_name"],
        date=format_date(rental_date),
        time=format_time(start_time, rental_date),
        location_name=copy["location"]["name"],
    )


def confirmation_subject(booking: Any) -> str:
    number = getattr(booking, "booking_number", None) or ""
    return f"{load_booking_copy()['business_name']} Booking Confirmation #{number}"


def admin_subject(booking: Any) -> str:
    number = getattr(booking, "booking_number", None) or NOT_AVAILABLE
    return f"New Booking #{number}"
