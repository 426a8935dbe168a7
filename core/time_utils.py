from datetime import date

from core.entities import DAY_KEYS

DAY_NAMES_BY_WEEKDAY = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def date_stamp(today: date | None = None) -> str:
    """YYYYMMDD, used in export file names."""
    return (today or date.today()).strftime("%Y%m%d")


def day_key(moment: date) -> str:
    """Weekly-slot column for a date (Monday -> 'senin')."""
    return DAY_KEYS[moment.weekday()]


def minutes_of_day(hhmm: str) -> int:
    hours, _, minutes = hhmm.partition(":")
    return int(hours) * 60 + int(minutes or 0)


def format_date_with_day(date_str: str) -> str:
    """'2024-01-01' -> 'Senin, 01/01/2024'; '-' for empty or unparseable input."""
    if not date_str:
        return "-"
    try:
        d = date.fromisoformat(date_str)
    except ValueError:
        return "-"
    return f"{DAY_NAMES_BY_WEEKDAY[d.weekday()]}, {d:%d/%m/%Y}"


def format_long_date(d: date) -> str:
    """'Senin, 1 Januari 2024'."""
    return f"{DAY_NAMES_BY_WEEKDAY[d.weekday()]}, {d.day} {MONTH_NAMES[d.month - 1]} {d.year}"
