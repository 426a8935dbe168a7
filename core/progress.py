import math
from typing import Dict, List

from core.entities import MAX_STATUS_WEIGHT, Patient, STATUS_DONE, STATUS_WEIGHT


def weighted_progress(patients: List[Patient]) -> int:
    """Completion percentage: sum of status weights over count * max weight."""
    if not patients:
        return 0
    total = sum(STATUS_WEIGHT.get(p.status, 0) for p in patients)
    # Half-up rounding, not banker's
    return math.floor(total * 100 / (len(patients) * MAX_STATUS_WEIGHT) + 0.5)


def completed_count(patients: List[Patient]) -> int:
    return sum(1 for p in patients if p.status == STATUS_DONE)


def progress_color(percent: int) -> str:
    if percent <= 20:
        return "#c0392b"
    if percent <= 40:
        return "#d35400"
    if percent <= 60:
        return "#d4a017"
    if percent <= 80:
        return "#6aab3d"
    return "#1e8c3a"


class CelebrationTracker:
    """Remembers the last progress seen per department.

    A department celebrates when progress moves from a known value other
    than 100 to exactly 100 while it has at least one requirement. The first
    observation only records the value, so a department loaded at 100% does
    not celebrate.
    """

    def __init__(self):
        self._last: Dict[str, int] = {}

    def observe(self, dept_id: str, progress: int, patient_count: int) -> bool:
        previous = self._last.get(dept_id)
        self._last[dept_id] = progress
        return (
            patient_count > 0
            and progress == 100
            and previous is not None
            and previous != 100
        )

    def forget(self, dept_id: str) -> None:
        self._last.pop(dept_id, None)
