"""Pure state transforms used as optimistic mutations. None of them mutate their input."""

from dataclasses import replace
from typing import Callable, List, Optional, TypeVar

from core.entities import (
    Appointment,
    ClinicState,
    DAY_KEYS,
    Department,
    Patient,
    SubDepartment,
    WeeklySlot,
)

T = TypeVar("T")


def array_move(items: List[T], old_index: int, new_index: int) -> List[T]:
    """Move one item to a new index, shifting the rest (drag-and-drop semantics)."""
    result = list(items)
    item = result.pop(old_index)
    result.insert(new_index, item)
    return result


def move_by_id(items: List[T], active_id: str, over_id: str) -> Optional[List[T]]:
    """Reorder after dropping ``active_id`` onto ``over_id``; None when nothing moves."""
    if active_id == over_id:
        return None
    ids = [getattr(i, "id") for i in items]
    if active_id not in ids or over_id not in ids:
        return None
    return array_move(items, ids.index(active_id), ids.index(over_id))


# -----------------------------
# Departments
# -----------------------------
def add_department(state: ClinicState, dept: Department) -> ClinicState:
    return replace(state, departments=[*state.departments, dept])


def remove_department(state: ClinicState, dept_id: str) -> ClinicState:
    return replace(state, departments=[d for d in state.departments if d.id != dept_id])


def replace_department(state: ClinicState, dept: Department) -> ClinicState:
    return replace(state, departments=[dept if d.id == dept.id else d for d in state.departments])


def update_department(state: ClinicState, dept_id: str, fn: Callable[[Department], Department]) -> ClinicState:
    return replace(state, departments=[fn(d) if d.id == dept_id else d for d in state.departments])


def add_sub_department(dept: Department, sub: SubDepartment) -> Department:
    return replace(dept, sub_departments=[*dept.sub_departments, sub])


def remove_sub_department(dept: Department, sub_id: str) -> Department:
    return replace(dept, sub_departments=[s for s in dept.sub_departments if s.id != sub_id])


# -----------------------------
# Requirements inside a department
# -----------------------------
def map_patients(
    dept: Department,
    sub_id: Optional[str],
    fn: Callable[[List[Patient]], List[Patient]],
) -> Department:
    """Apply ``fn`` to the patient list that owns the row: a sub-department's or the department's."""
    if sub_id and dept.has_sub_departments:
        return replace(
            dept,
            sub_departments=[
                replace(s, patients=fn(s.patients)) if s.id == sub_id else s
                for s in dept.sub_departments
            ],
        )
    return replace(dept, patients=fn(dept.patients))


def add_patient(dept: Department, patient: Patient, sub_id: Optional[str] = None) -> Department:
    return map_patients(dept, sub_id, lambda ps: [*ps, patient])


def replace_patient(dept: Department, patient: Patient, sub_id: Optional[str] = None) -> Department:
    return map_patients(dept, sub_id, lambda ps: [patient if p.id == patient.id else p for p in ps])


def remove_patient(dept: Department, patient_id: str, sub_id: Optional[str] = None) -> Department:
    return map_patients(dept, sub_id, lambda ps: [p for p in ps if p.id != patient_id])


def set_patients(dept: Department, patients: List[Patient], sub_id: Optional[str] = None) -> Department:
    return map_patients(dept, sub_id, lambda _ps: list(patients))


def patient_list(dept: Department, sub_id: Optional[str] = None) -> List[Patient]:
    if sub_id and dept.has_sub_departments:
        for s in dept.sub_departments:
            if s.id == sub_id:
                return s.patients
        return []
    return dept.patients


# -----------------------------
# Appointments
# -----------------------------
def add_appointment(state: ClinicState, appt: Appointment) -> ClinicState:
    return replace(state, appointments=[*state.appointments, appt])


def replace_appointment(state: ClinicState, appt: Appointment) -> ClinicState:
    return replace(state, appointments=[appt if a.id == appt.id else a for a in state.appointments])


def remove_appointment(state: ClinicState, appt_id: str) -> ClinicState:
    return replace(state, appointments=[a for a in state.appointments if a.id != appt_id])


# -----------------------------
# Weekly slots
# -----------------------------
def set_slot_cell(slots: List[WeeklySlot], slot_id: str, day: str, value: str) -> List[WeeklySlot]:
    if day not in DAY_KEYS:
        raise KeyError(day)
    if not any(s.id == slot_id for s in slots):
        raise LookupError(f"Slot {slot_id} not found")
    return [replace(s, **{day: value}) if s.id == slot_id else s for s in slots]
