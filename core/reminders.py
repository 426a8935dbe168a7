from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from core.entities import WeeklySlot
from core.slot_codec import SlotBooking, parse_slot_value
from core.time_utils import day_key, minutes_of_day


@dataclass
class TodayBooking:
    jam: str
    name: str
    phone: str
    minute_of_day: int


def todays_bookings(slots: List[WeeklySlot], now: datetime) -> List[TodayBooking]:
    """Booked cells in today's column, in slot order."""
    column = day_key(now.date())
    result = []
    for slot in slots:
        parsed = parse_slot_value(slot.cell(column))
        if isinstance(parsed, SlotBooking):
            result.append(TodayBooking(slot.jam, parsed.name, parsed.phone, minutes_of_day(slot.jam)))
    return result


def nearest_upcoming(bookings: List[TodayBooking], now: datetime) -> Optional[TodayBooking]:
    current = now.hour * 60 + now.minute
    for b in bookings:
        if b.minute_of_day >= current:
            return b
    return None


def time_label(booking: TodayBooking, now: datetime) -> str:
    diff = booking.minute_of_day - (now.hour * 60 + now.minute)
    if diff <= 0:
        return "Sekarang"
    if diff < 60:
        return f"{diff} menit lagi"
    hours, minutes = divmod(diff, 60)
    if minutes:
        return f"{hours} jam {minutes} menit lagi"
    return f"{hours} jam lagi"
