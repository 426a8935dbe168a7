from datetime import date, datetime

import pytest

from core.reminders import nearest_upcoming, time_label, todays_bookings
from core.slot_codec import SlotBooking, serialize_slot_booking
from core.time_utils import day_key, format_date_with_day, format_long_date, minutes_of_day
from services.weekly_slot_service import default_weekly_slots

# 2024-01-01 is a Monday
MONDAY_0930 = datetime(2024, 1, 1, 9, 30)


@pytest.fixture
def slots():
    slots = default_weekly_slots()
    slots[1].senin = serialize_slot_booking(SlotBooking("Budi", "0812"))    # 09:00
    slots[3].senin = "Sari - Konservasi"                                  # 11:00, legacy cell
    slots[6].senin = serialize_slot_booking(SlotBooking("Andi"))           # 14:00
    slots[6].selasa = serialize_slot_booking(SlotBooking("Tono"))
    return slots


class TestTodaysBookings:
    def test_only_todays_column(self, slots):
        bookings = todays_bookings(slots, MONDAY_0930)
        assert [(b.jam, b.name) for b in bookings] == [("09:00", "Budi"), ("11:00", "Sari"), ("14:00", "Andi")]

    def test_nearest_upcoming_skips_past(self, slots):
        nearest = nearest_upcoming(todays_bookings(slots, MONDAY_0930), MONDAY_0930)
        assert nearest.name == "Sari"

    def test_nothing_left(self, slots):
        late = datetime(2024, 1, 1, 20, 0)
        assert nearest_upcoming(todays_bookings(slots, late), late) is None


class TestTimeLabel:
    @pytest.mark.parametrize("now, expected", [
        (datetime(2024, 1, 1, 11, 0), "Sekarang"),
        (datetime(2024, 1, 1, 10, 45), "15 menit lagi"),
        (datetime(2024, 1, 1, 9, 30), "1 jam 30 menit lagi"),
        (datetime(2024, 1, 1, 9, 0), "2 jam lagi"),
    ])
    def test_labels(self, slots, now, expected):
        sari = todays_bookings(slots, now)[1]
        assert time_label(sari, now) == expected


class TestDates:
    def test_format_date_with_day(self):
        assert format_date_with_day("2024-01-01") == "Senin, 01/01/2024"
        assert format_date_with_day("") == "-"
        assert format_date_with_day("kemarin") == "-"

    def test_format_long_date(self):
        assert format_long_date(date(2024, 8, 17)) == "Sabtu, 17 Agustus 2024"

    def test_day_key_and_minutes(self):
        assert day_key(date(2024, 1, 7)) == "minggu"
        assert minutes_of_day("13:45") == 825
