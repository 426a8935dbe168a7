"""
Feature-level mutations for the dashboard.

Every method validates its input first (raising ValidationError before the
state or the backend is touched), then hands a pure mutation and a persist
call for the one changed entity to the SyncController. Methods return the
controller's result: True when the change was kept, False when it was
rolled back.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from core import mutations
from core.entities import (
    Appointment,
    ClinicState,
    DAY_KEYS,
    Department,
    Patient,
    PatientEntry,
    STATUS_NEW,
    STATUS_OPTIONS,
    SubDepartment,
    WeeklySlot,
    new_id,
)
from core.errors import PersistenceError, ValidationError
from core.slot_codec import SlotBooking, serialize_slot_booking
from core.sync import Store, SyncController
from services.photo_service import plan_photo
from services.persistence import PersistenceService
from services.weekly_slot_service import default_weekly_slots

logger = logging.getLogger(__name__)

NO_DEPARTMENT = "__none__"


def _required(value: Optional[str], message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(message)
    return value


# ------------------------------------------
# Initial load
# ------------------------------------------
def load_weekly_slots(backend: PersistenceService, week_key: Optional[str] = None) -> List[WeeklySlot]:
    """Stored slots when complete, seeded defaults when empty, defaults otherwise."""
    stored = backend.list_weekly_slots(week_key)
    defaults = default_weekly_slots()
    if len(stored) >= len(defaults):
        return stored
    if not stored:
        try:
            return backend.seed_default_slots(week_key)
        except PersistenceError as e:
            logger.error("Seeding weekly slots failed: %s", e)
            return defaults
    logger.warning(
        "Weekly slot table has %d rows, expected %d; showing defaults",
        len(stored),
        len(defaults),
    )
    return defaults


def load_state(backend: PersistenceService) -> ClinicState:
    return ClinicState(
        departments=backend.list_departments(),
        appointments=backend.list_appointments(),
        weekly_slots=load_weekly_slots(backend),
    )


class ClinicActions:
    def __init__(self, store: Store, controller: SyncController, backend: PersistenceService):
        self.store = store
        self.controller = controller
        self.backend = backend

    @property
    def state(self) -> ClinicState:
        return self.store.state

    # -----------------------------
    # Lookups
    # -----------------------------
    def department(self, dept_id: str) -> Department:
        for d in self.state.departments:
            if d.id == dept_id:
                return d
        raise LookupError(f"Departemen {dept_id} tidak ditemukan")

    def patient(self, dept_id: str, patient_id: str) -> Tuple[Patient, Optional[str]]:
        patient, sub_id = self.department(dept_id).find_patient(patient_id)
        if patient is None:
            raise LookupError(f"Requirement {patient_id} tidak ditemukan")
        return patient, sub_id

    @staticmethod
    def _check_placement(dept: Department, sub_id: Optional[str]) -> None:
        """Requirements live on the department or in one of its sub-departments, never both."""
        if not dept.has_sub_departments:
            if sub_id:
                raise ValidationError(f'Departemen "{dept.name}" tidak memiliki sub-departemen')
            return
        if not sub_id:
            raise ValidationError("Pilih sub-departemen untuk requirement ini")
        if not any(s.id == sub_id for s in dept.sub_departments):
            raise ValidationError(f"Sub-departemen {sub_id} tidak ditemukan")

    def _update_patient(self, dept_id: str, patient: Patient, sub_id: Optional[str], **kwargs) -> bool:
        updated = replace(patient, **kwargs)
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.replace_patient(d, updated, sub_id)),
            lambda: self.backend.upsert_patient(updated, dept_id, sub_id),
            **self._messages(kwargs),
            label=f"patient {patient.id}",
        )

    @staticmethod
    def _messages(changes: dict) -> dict:
        if "requirement" in changes:
            return {"success": "Requirement diperbarui"}
        if "status" in changes:
            return {"failure": "Gagal mengubah status. Perubahan dibatalkan."}
        if "entries" in changes:
            return {
                "success": "Daftar pasien diperbarui",
                "failure": "Gagal menyimpan pasien. Perubahan dibatalkan.",
            }
        return {"success": "Requirement diperbarui"}

    # -----------------------------
    # Departments
    # -----------------------------
    def add_department(self, name: str, has_sub_departments: bool = False) -> bool:
        name = _required(name, "Nama departemen tidak boleh kosong")
        dept = Department(
            id=new_id("dept"),
            name=name,
            has_sub_departments=has_sub_departments,
            sort_order=len(self.state.departments) + 1,
        )
        return self.controller.run(
            lambda s: mutations.add_department(s, dept),
            lambda: self.backend.upsert_department(dept),
            success=f'Departemen "{name}" berhasil ditambahkan',
            failure="Gagal menambah departemen. Perubahan dibatalkan.",
            label=f"department {dept.id}",
        )

    def update_department(self, dept_id: str, name: str) -> bool:
        name = _required(name, "Nama departemen tidak boleh kosong")
        updated = replace(self.department(dept_id), name=name)
        return self.controller.run(
            lambda s: mutations.replace_department(s, updated),
            lambda: self.backend.upsert_department(updated),
            success="Departemen diperbarui",
            failure="Gagal menyimpan departemen. Perubahan dibatalkan.",
            label=f"department {dept_id}",
        )

    def delete_department(self, dept_id: str) -> bool:
        return self.controller.run(
            lambda s: mutations.remove_department(s, dept_id),
            lambda: self.backend.delete_department(dept_id),
            success="Departemen berhasil dihapus",
            failure="Gagal menghapus departemen. Perubahan dibatalkan.",
            label=f"department {dept_id}",
        )

    def add_sub_department(self, dept_id: str, name: str) -> bool:
        name = _required(name, "Nama sub-departemen tidak boleh kosong")
        dept = self.department(dept_id)
        if not dept.has_sub_departments:
            raise ValidationError(f'Departemen "{dept.name}" tidak memiliki sub-departemen')
        sub = SubDepartment(id=new_id("sub"), name=name, sort_order=len(dept.sub_departments) + 1)
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.add_sub_department(d, sub)),
            lambda: self.backend.upsert_sub_department(sub, dept_id),
            success=f'Sub-departemen "{name}" ditambahkan',
            failure="Gagal menambah sub-departemen. Perubahan dibatalkan.",
            label=f"sub-department {sub.id}",
        )

    def delete_sub_department(self, dept_id: str, sub_id: str) -> bool:
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.remove_sub_department(d, sub_id)),
            lambda: self.backend.delete_sub_department(sub_id),
            success="Sub-departemen dihapus",
            failure="Gagal menghapus sub-departemen. Perubahan dibatalkan.",
            label=f"sub-department {sub_id}",
        )

    # -----------------------------
    # Requirements
    # -----------------------------
    def add_requirement(
        self,
        dept_id: str,
        requirement: str,
        status: str = STATUS_NEW,
        sub_id: Optional[str] = None,
    ) -> bool:
        requirement = _required(requirement, "Requirement tidak boleh kosong")
        if status not in STATUS_OPTIONS:
            raise ValidationError(f"Status tidak dikenal: {status}")
        dept = self.department(dept_id)
        self._check_placement(dept, sub_id)
        siblings = mutations.patient_list(dept, sub_id)
        patient = Patient(
            id=new_id("p"),
            requirement=requirement,
            status=status,
            sort_order=max((p.sort_order for p in siblings), default=0) + 1,
        )

        def persist():
            order = self.backend.next_sort_order(dept_id, sub_id)
            saved = replace(patient, sort_order=order)
            self.backend.upsert_patient(saved, dept_id, sub_id, order)
            # keep the local row on the order the database assigned
            if order != patient.sort_order:
                self.store.apply(
                    lambda s: mutations.update_department(
                        s, dept_id, lambda d: mutations.replace_patient(d, saved, sub_id)
                    )
                )

        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.add_patient(d, patient, sub_id)),
            persist,
            success="Requirement ditambahkan",
            label=f"patient {patient.id}",
        )

    def edit_requirement(self, dept_id: str, patient_id: str, requirement: str, status: Optional[str] = None) -> bool:
        requirement = _required(requirement, "Requirement tidak boleh kosong")
        patient, sub_id = self.patient(dept_id, patient_id)
        status = status or patient.status
        if status not in STATUS_OPTIONS:
            raise ValidationError(f"Status tidak dikenal: {status}")
        return self._update_patient(dept_id, patient, sub_id, requirement=requirement, status=status)

    def change_status(self, dept_id: str, patient_id: str, status: str) -> bool:
        if status not in STATUS_OPTIONS:
            raise ValidationError(f"Status tidak dikenal: {status}")
        patient, sub_id = self.patient(dept_id, patient_id)
        return self._update_patient(dept_id, patient, sub_id, status=status)

    def save_entries(self, dept_id: str, patient_id: str, entries: Iterable[PatientEntry]) -> bool:
        cleaned = []
        for entry in entries:
            name = _required(entry.nama_pasien, "Nama pasien tidak boleh kosong")
            cleaned.append(PatientEntry(
                id=entry.id or new_id("pe"),
                nama_pasien=name,
                nomor_telp=(entry.nomor_telp or "").strip(),
            ))
        patient, sub_id = self.patient(dept_id, patient_id)
        return self._update_patient(dept_id, patient, sub_id, entries=cleaned)

    def delete_requirement(self, dept_id: str, patient_id: str) -> bool:
        _, sub_id = self.patient(dept_id, patient_id)
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.remove_patient(d, patient_id, sub_id)),
            lambda: self.backend.delete_patient(patient_id),
            success="Requirement dihapus",
            failure="Gagal menghapus. Perubahan dibatalkan.",
            label=f"patient {patient_id}",
        )

    def reorder_requirements(self, dept_id: str, active_id: str, over_id: str, sub_id: Optional[str] = None) -> bool:
        """Move ``active_id`` to the position of ``over_id``; positions are rewritten 1..n."""
        current = mutations.patient_list(self.department(dept_id), sub_id)
        moved = mutations.move_by_id(current, active_id, over_id)
        if moved is None:
            return True
        reordered = [replace(p, sort_order=idx) for idx, p in enumerate(moved, start=1)]

        def persist():
            for p in reordered:
                self.backend.set_patient_sort_order(p.id, p.sort_order)

        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.set_patients(d, reordered, sub_id)),
            persist,
            failure="Gagal menyimpan urutan.",
            label=f"order of {dept_id}/{sub_id or '-'}",
        )

    # -----------------------------
    # Photos
    # -----------------------------
    def attach_photo(self, dept_id: str, patient_id: str, data: bytes) -> bool:
        patient, sub_id = self.patient(dept_id, patient_id)
        photo = plan_photo(patient_id, data, self.backend.upload_dir)
        updated = replace(patient, photos=[*patient.photos, photo])
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.replace_patient(d, updated, sub_id)),
            lambda: self.backend.upload_photo(patient_id, data, photo),
            success="Foto ditambahkan",
            failure="Gagal mengunggah foto. Perubahan dibatalkan.",
            label=f"photo {photo.id}",
        )

    def remove_photo(self, dept_id: str, patient_id: str, photo_id: str) -> bool:
        patient, sub_id = self.patient(dept_id, patient_id)
        photo = next((ph for ph in patient.photos if ph.id == photo_id), None)
        if photo is None:
            raise LookupError(f"Foto {photo_id} tidak ditemukan")
        updated = replace(patient, photos=[ph for ph in patient.photos if ph.id != photo_id])
        return self.controller.run(
            lambda s: mutations.update_department(s, dept_id, lambda d: mutations.replace_patient(d, updated, sub_id)),
            lambda: self.backend.delete_photo(photo),
            success="Foto dihapus",
            failure="Gagal menghapus foto. Perubahan dibatalkan.",
            label=f"photo {photo_id}",
        )

    # -----------------------------
    # Appointments
    # -----------------------------
    @staticmethod
    def _validate_appointment(appt: Appointment) -> None:
        _required(appt.tanggal, "Tanggal tidak boleh kosong")
        _required(appt.jam, "Jam tidak boleh kosong")
        _required(appt.nama_pasien, "Nama pasien tidak boleh kosong")

    def add_appointment(self, appt: Appointment) -> bool:
        appt = replace(appt, id=appt.id or new_id("a"), checklist=False)
        self._validate_appointment(appt)
        return self.controller.run(
            lambda s: mutations.add_appointment(s, appt),
            lambda: self.backend.upsert_appointment(appt),
            success="Appointment ditambahkan",
            label=f"appointment {appt.id}",
        )

    def edit_appointment(self, appt: Appointment) -> bool:
        self._validate_appointment(appt)
        return self.controller.run(
            lambda s: mutations.replace_appointment(s, appt),
            lambda: self.backend.upsert_appointment(appt),
            success="Appointment diperbarui",
            label=f"appointment {appt.id}",
        )

    def delete_appointment(self, appt_id: str) -> bool:
        return self.controller.run(
            lambda s: mutations.remove_appointment(s, appt_id),
            lambda: self.backend.delete_appointment(appt_id),
            success="Appointment dihapus",
            failure="Gagal menghapus. Perubahan dibatalkan.",
            label=f"appointment {appt_id}",
        )

    def toggle_appointment(self, appt_id: str) -> bool:
        appt = next((a for a in self.state.appointments if a.id == appt_id), None)
        if appt is None:
            raise LookupError(f"Appointment {appt_id} tidak ditemukan")
        updated = replace(appt, checklist=not appt.checklist)
        return self.controller.run(
            lambda s: mutations.replace_appointment(s, updated),
            lambda: self.backend.upsert_appointment(updated),
            failure="Gagal menyimpan status. Perubahan dibatalkan.",
            label=f"appointment {appt_id}",
        )

    # -----------------------------
    # Weekly planner
    # -----------------------------
    def _set_slot(self, slot_id: str, day: str, value: str, success: str) -> bool:
        if day not in DAY_KEYS:
            raise ValidationError(f"Hari tidak dikenal: {day}")

        def mutate(s: ClinicState) -> ClinicState:
            return replace(s, weekly_slots=mutations.set_slot_cell(s.weekly_slots, slot_id, day, value))

        def persist():
            target = next(s for s in self.state.weekly_slots if s.id == slot_id)
            self.backend.upsert_weekly_slot(target)

        return self.controller.run(
            mutate,
            persist,
            success=success,
            failure="Gagal menyimpan jadwal. Perubahan dibatalkan.",
            label=f"slot {slot_id}/{day}",
        )

    def book_slot_for_patient(
        self,
        slot_id: str,
        day: str,
        dept_id: str,
        patient_id: str,
        entry_id: Optional[str] = None,
    ) -> bool:
        """Book a cell for a requirement's patient; the first entry unless ``entry_id`` is given."""
        dept = self.department(dept_id)
        patient, _ = self.patient(dept_id, patient_id)
        entry = next((e for e in patient.entries if e.id == entry_id), None) if entry_id else None
        name = entry.nama_pasien if entry else patient.nama_pasien
        phone = entry.nomor_telp if entry else patient.nomor_telp
        _required(name, "Requirement belum memiliki pasien")
        value = serialize_slot_booking(
            SlotBooking(name=name, phone=phone, department=dept.name, patient_id=patient.id)
        )
        return self._set_slot(slot_id, day, value, "Jadwal berhasil disimpan")

    def book_slot_manual(self, slot_id: str, day: str, name: str, phone: str = "", department: str = "") -> bool:
        name = _required(name, "Nama pasien tidak boleh kosong")
        department = "" if department == NO_DEPARTMENT else (department or "").strip()
        value = serialize_slot_booking(SlotBooking(name=name, phone=(phone or "").strip(), department=department))
        return self._set_slot(slot_id, day, value, "Jadwal berhasil disimpan")

    def clear_slot(self, slot_id: str, day: str) -> bool:
        return self._set_slot(slot_id, day, "", "Jadwal dihapus")


def bookable_patients(dept: Department) -> List[Tuple[Patient, Optional[SubDepartment]]]:
    """Requirements offered when booking a slot from a department.

    Sub-departments are flattened; departments without them only offer
    requirements that already have a patient.
    """
    if dept.has_sub_departments:
        return [(p, sub) for sub in dept.sub_departments for p in sub.patients]
    return [(p, None) for p in dept.patients if p.has_pasien]
