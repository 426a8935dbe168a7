"""
Weekly slot cell codec.

A day cell holds one of three shapes: an empty string (free), the break
sentinel, or a JSON booking ``{"n": name, "t": phone, "d": department,
"pid": patient id}``. Cells written by older clients as ``"Name - date"`` are
read through a fallback and never reported as errors.
"""

import json
from dataclasses import dataclass
from typing import Union

BREAK_SENTINEL = "ISTIRAHAT"
LEGACY_SEPARATOR = " - "


@dataclass(frozen=True)
class SlotBooking:
    name: str
    phone: str = ""
    department: str = ""
    patient_id: str = ""


SlotValue = Union[SlotBooking, str]


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_slot_value(raw: str) -> SlotValue:
    """Interpret a raw cell as "", BREAK_SENTINEL or a SlotBooking."""
    if not raw or not raw.strip():
        return ""
    if raw == BREAK_SENTINEL:
        return BREAK_SENTINEL
    try:
        data = json.loads(raw)
    except ValueError:
        parts = raw.split(LEGACY_SEPARATOR)
        return SlotBooking(
            name=parts[0].strip() or raw.strip(),
            department=parts[1] if len(parts) > 1 else "",
        )
    if isinstance(data, dict) and "n" in data:
        name = _text(data.get("n"))
        if not name.strip():
            return ""
        return SlotBooking(
            name=name,
            phone=_text(data.get("t")),
            department=_text(data.get("d")),
            patient_id=_text(data.get("pid")),
        )
    return ""


def serialize_slot_booking(booking: SlotBooking) -> str:
    if not booking.name or not booking.name.strip():
        raise ValueError("Slot booking requires a name")
    return json.dumps(
        {"n": booking.name, "t": booking.phone, "d": booking.department, "pid": booking.patient_id},
        ensure_ascii=False,
    )


def normalize_cell(raw: str) -> str:
    """Rewrite any cell into one of the three canonical shapes (legacy text becomes JSON)."""
    value = parse_slot_value(raw)
    if isinstance(value, SlotBooking):
        return serialize_slot_booking(value)
    return value


def is_booked(raw: str) -> bool:
    return isinstance(parse_slot_value(raw), SlotBooking)


def is_valid_cell(raw: str) -> bool:
    """True when ``raw`` is one of the three canonical cell shapes."""
    if raw == "" or raw == BREAK_SENTINEL:
        return True
    try:
        data = json.loads(raw)
    except ValueError:
        return False
    name = data.get("n") if isinstance(data, dict) else None
    return isinstance(name, str) and bool(name.strip())
