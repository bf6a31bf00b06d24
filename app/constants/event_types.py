"""
Log/event markers shared between the reminder sweep and the booking notes field.
"""

# Written into bookings.internal_notes after a reminder; older rows only carry this line.
REMINDER_SENTINEL = "Reminder sent at"


def reminder_note_line(sent_at_iso: str) -> str:
    """Note line appended to internal_notes when a reminder goes out."""
    return f"{REMINDER_SENTINEL} {sent_at_iso}"
