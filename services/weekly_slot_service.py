import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core import entities
from core.entities import DAY_KEYS
from core.errors import ValidationError
from core.slot_codec import BREAK_SENTINEL, normalize_cell, parse_slot_value
from models.weekly_slot import WeeklySlot

logger = logging.getLogger(__name__)

BREAK_HOUR = "12:00"
VISIBLE_DAYS = ["senin", "selasa", "rabu", "kamis", "jumat"]
VISIBLE_FROM = "08:00"
VISIBLE_UNTIL = "16:00"


def default_weekly_slots() -> List[entities.WeeklySlot]:
    """Hourly rows 08:00-24:00 with the lunch hour marked as a break every day."""
    slots = []
    for i, hour in enumerate(range(8, 25), start=1):
        jam = f"{hour:02d}:00"
        cells = {day: (BREAK_SENTINEL if jam == BREAK_HOUR else "") for day in DAY_KEYS}
        slots.append(entities.WeeklySlot(id=f"w{i}", jam=jam, **cells))
    return slots


def slot_to_entity(row: WeeklySlot) -> entities.WeeklySlot:
    return entities.WeeklySlot(
        id=row.id,
        jam=row.jam,
        **{day: getattr(row, day) or "" for day in DAY_KEYS},
    )


def list_weekly_slots(db: Session, week_key: Optional[str] = None) -> List[entities.WeeklySlot]:
    rows = (
        db.query(WeeklySlot)
        .filter(WeeklySlot.week_key == (week_key or ""))
        .order_by(WeeklySlot.sort_order, WeeklySlot.jam)
        .all()
    )
    return [slot_to_entity(r) for r in rows]


def upsert_weekly_slot(
    db: Session,
    slot: entities.WeeklySlot,
    week_key: Optional[str] = None,
    sort_order: Optional[int] = None,
) -> WeeklySlot:
    if not slot.jam:
        raise ValidationError("Jam slot tidak boleh kosong")
    key = week_key or ""
    row = db.query(WeeklySlot).filter(WeeklySlot.id == slot.id, WeeklySlot.week_key == key).first()
    if row is None:
        row = WeeklySlot(id=slot.id, week_key=key, sort_order=sort_order if sort_order is not None else 0)
        db.add(row)
    elif sort_order is not None:
        row.sort_order = sort_order

    row.jam = slot.jam
    for day in DAY_KEYS:
        setattr(row, day, normalize_cell(slot.cell(day)))

    db.commit()
    db.refresh(row)
    return row


def seed_default_slots(db: Session, week_key: Optional[str] = None) -> List[entities.WeeklySlot]:
    defaults = default_weekly_slots()
    for order, slot in enumerate(defaults, start=1):
        upsert_weekly_slot(db, slot, week_key, sort_order=order)
    logger.info("Seeded %d default weekly slots", len(defaults))
    return defaults


def visible_slots(slots: List[entities.WeeklySlot]) -> List[entities.WeeklySlot]:
    return [s for s in slots if VISIBLE_FROM <= s.jam <= VISIBLE_UNTIL]


def filled_count(slots: List[entities.WeeklySlot]) -> int:
    """Booked cells in the visible Mon-Fri 08:00-16:00 window."""
    count = 0
    for slot in visible_slots(slots):
        for day in VISIBLE_DAYS:
            value = parse_slot_value(slot.cell(day))
            if value != "" and value != BREAK_SENTINEL:
                count += 1
    return count
