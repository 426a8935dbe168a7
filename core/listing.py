"""Search, sort and paging helpers for the list views."""

import math
from typing import List, Optional, Sequence, TypeVar

from core.entities import Appointment, Department, Patient

T = TypeVar("T")

PAGE_SIZES = [10, "All"]


def filter_departments(departments: List[Department], query: str) -> List[Department]:
    q = (query or "").strip().lower()
    if not q:
        return departments
    return [d for d in departments if q in d.name.lower()]


def filter_requirements(patients: List[Patient], query: str) -> List[Patient]:
    q = (query or "").strip().lower()
    if not q:
        return patients
    return [p for p in patients if q in p.requirement.lower()]


def sort_appointments(appointments: List[Appointment]) -> List[Appointment]:
    """Newest first by date then time; ISO strings sort chronologically."""
    return sorted(appointments, key=lambda a: (a.tanggal, a.jam), reverse=True)


def filter_appointments(appointments: List[Appointment], term: str) -> List[Appointment]:
    t = (term or "").strip().lower()
    if not t:
        return appointments
    return [
        a for a in appointments
        if t in a.nama_pasien.lower()
        or t in a.departemen.lower()
        or t in a.rencana_perawatan.lower()
        or t in a.kasus.lower()
        or t in a.kubikel.lower()
    ]


def total_pages(count: int, page_size: Optional[int]) -> int:
    if not page_size:
        return 1
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page: int, page_size: Optional[int]) -> List[T]:
    """``page_size`` None means all rows; ``page`` is clamped into range."""
    if not page_size:
        return list(items)
    page = min(max(page, 1), total_pages(len(items), page_size))
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def page_numbers(page: int, pages: int) -> List[int]:
    """Compact pager; -1 and -2 stand for the left and right ellipsis."""
    if pages <= 7:
        return list(range(1, pages + 1))
    if page <= 4:
        return [1, 2, 3, 4, 5, -1, pages]
    if page >= pages - 3:
        return [1, -1, pages - 4, pages - 3, pages - 2, pages - 1, pages]
    return [1, -1, page - 1, page, page + 1, -2, pages]
