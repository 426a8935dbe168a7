"""
Persistence service used by the sync controller.

Each method opens a short-lived session, delegates to the matching
``services/*_service.py`` function and converts database errors into
PersistenceError so callers only need to handle the clinic error types.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core import entities
from core.config import UPLOAD_DIR
from core.database import SessionLocal
from core.errors import PersistenceError
from services import (
    appointment_service,
    auth_service,
    department_service,
    patient_service,
    photo_service,
    weekly_slot_service,
)

logger = logging.getLogger(__name__)

LOGO_PATH_PREFIX = "branding/logo"


class PersistenceService:
    def __init__(self, session_factory=None, upload_dir: str = UPLOAD_DIR):
        self._session_factory = session_factory or SessionLocal
        self.upload_dir = upload_dir

    @contextmanager
    def _db(self):
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Database error: %s", e)
            raise PersistenceError(str(e)) from e
        finally:
            db.close()

    # -----------------------------
    # Departments
    # -----------------------------
    def list_departments(self) -> List[entities.Department]:
        with self._db() as db:
            return department_service.list_departments(db)

    def upsert_department(self, dept: entities.Department) -> None:
        with self._db() as db:
            department_service.upsert_department(db, dept)

    def delete_department(self, dept_id: str) -> None:
        with self._db() as db:
            department_service.delete_department(db, dept_id, self.upload_dir)

    def upsert_sub_department(self, sub: entities.SubDepartment, parent_id: str) -> None:
        with self._db() as db:
            department_service.upsert_sub_department(db, sub, parent_id)

    def delete_sub_department(self, sub_id: str) -> None:
        with self._db() as db:
            department_service.delete_sub_department(db, sub_id, self.upload_dir)

    # -----------------------------
    # Requirements
    # -----------------------------
    def upsert_patient(
        self,
        patient: entities.Patient,
        department_id: str,
        sub_department_id: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> None:
        with self._db() as db:
            patient_service.upsert_patient(db, patient, department_id, sub_department_id, sort_order)

    def delete_patient(self, patient_id: str) -> None:
        with self._db() as db:
            patient_service.delete_patient(db, patient_id, self.upload_dir)

    def set_patient_sort_order(self, patient_id: str, order: int) -> None:
        with self._db() as db:
            if not patient_service.set_patient_sort_order(db, patient_id, order):
                raise PersistenceError(f"Requirement {patient_id} tidak ditemukan")

    def next_sort_order(self, department_id: str, sub_department_id: Optional[str] = None) -> int:
        with self._db() as db:
            return patient_service.next_sort_order(db, department_id, sub_department_id)

    # -----------------------------
    # Photos
    # -----------------------------
    def upload_photo(self, patient_id: str, data: bytes, photo: Optional[entities.Photo] = None) -> entities.Photo:
        with self._db() as db:
            return photo_service.upload_photo(db, patient_id, data, self.upload_dir, photo)

    def delete_photo(self, photo: entities.Photo) -> None:
        with self._db() as db:
            photo_service.delete_photo(db, photo, self.upload_dir)

    # -----------------------------
    # Appointments
    # -----------------------------
    def list_appointments(self) -> List[entities.Appointment]:
        with self._db() as db:
            return appointment_service.list_appointments(db)

    def upsert_appointment(self, appt: entities.Appointment) -> None:
        with self._db() as db:
            appointment_service.upsert_appointment(db, appt)

    def delete_appointment(self, appt_id: str) -> None:
        with self._db() as db:
            appointment_service.delete_appointment(db, appt_id)

    # -----------------------------
    # Weekly slots
    # -----------------------------
    def list_weekly_slots(self, week_key: Optional[str] = None) -> List[entities.WeeklySlot]:
        with self._db() as db:
            return weekly_slot_service.list_weekly_slots(db, week_key)

    def upsert_weekly_slot(self, slot: entities.WeeklySlot, week_key: Optional[str] = None) -> None:
        with self._db() as db:
            weekly_slot_service.upsert_weekly_slot(db, slot, week_key)

    def seed_default_slots(self, week_key: Optional[str] = None) -> List[entities.WeeklySlot]:
        with self._db() as db:
            return weekly_slot_service.seed_default_slots(db, week_key)

    # -----------------------------
    # Admin credential & brand
    # -----------------------------
    def verify_admin_password(self, plaintext: str) -> bool:
        with self._db() as db:
            return auth_service.verify_admin_password(db, plaintext)

    def set_admin_password(self, plaintext: str) -> None:
        with self._db() as db:
            auth_service.set_admin_password(db, plaintext)

    def change_admin_password(self, current: str, new: str, confirm: str) -> None:
        with self._db() as db:
            auth_service.change_admin_password(db, current, new, confirm)

    def get_brand_settings(self) -> entities.Brand:
        with self._db() as db:
            return auth_service.get_brand_settings(db)

    def save_brand_settings(self, brand: entities.Brand, logo: Optional[bytes] = None) -> entities.Brand:
        if logo is not None:
            photo_service.check_upload_size(logo)
            ext = photo_service.detect_image_extension(logo)
            path = photo_service.write_blob(f"{LOGO_PATH_PREFIX}.{ext}", logo, self.upload_dir)
            brand = replace(brand, logo_path=path)
        with self._db() as db:
            return auth_service.save_brand_settings(db, brand)
