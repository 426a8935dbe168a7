import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core import entities
from core.entities import derive_legacy_fields
from models.patient import Patient, PatientEntry
from services.photo_service import photo_to_entity, remove_blob

logger = logging.getLogger(__name__)


# ------------------------------------------
# Row -> view entity
# ------------------------------------------
def patient_to_entity(row: Patient) -> entities.Patient:
    entries = [
        entities.PatientEntry(id=e.id, nama_pasien=e.nama_pasien, nomor_telp=e.nomor_telp or "")
        for e in row.entries
    ]
    # Rows written before the entry list existed only carry the legacy columns
    if not entries and row.has_pasien and row.nama_pasien:
        entries = [entities.PatientEntry(id=f"pe-{row.id}", nama_pasien=row.nama_pasien, nomor_telp=row.nomor_telp or "")]

    return entities.Patient(
        id=row.id,
        requirement=row.requirement,
        status=row.status,
        entries=entries,
        photos=[photo_to_entity(ph) for ph in row.photos],
        sort_order=row.sort_order or 0,
    )


def get_patient_row(db: Session, patient_id: str) -> Optional[Patient]:
    return db.query(Patient).filter(Patient.id == patient_id).first()


# ------------------------------------------
# Next sort order for a new requirement
# ------------------------------------------
def next_sort_order(db: Session, department_id: str, sub_department_id: Optional[str] = None) -> int:
    query = db.query(func.max(Patient.sort_order)).filter(Patient.department_id == department_id)
    if sub_department_id:
        query = query.filter(Patient.sub_department_id == sub_department_id)
    else:
        query = query.filter(Patient.sub_department_id.is_(None))
    current = query.scalar()
    return (current or 0) + 1


# ------------------------------------------
# Create or update a requirement and its entry list
# ------------------------------------------
def upsert_patient(
    db: Session,
    patient: entities.Patient,
    department_id: str,
    sub_department_id: Optional[str] = None,
    sort_order: Optional[int] = None,
) -> Patient:
    row = get_patient_row(db, patient.id)
    if row is None:
        row = Patient(id=patient.id)
        row.sort_order = sort_order if sort_order is not None else next_sort_order(db, department_id, sub_department_id)
        db.add(row)
    elif sort_order is not None:
        row.sort_order = sort_order

    row.department_id = department_id
    row.sub_department_id = sub_department_id or None
    row.requirement = patient.requirement
    row.status = patient.status

    has_pasien, nama, telp = derive_legacy_fields(patient.entries)
    row.has_pasien = has_pasien
    row.nama_pasien = nama
    row.nomor_telp = telp

    # Reuse rows by id so a reordered list does not delete and re-insert the same key
    existing = {e.id: e for e in row.entries}
    new_entries = []
    for position, entry in enumerate(patient.entries):
        entry_row = existing.get(entry.id) or PatientEntry(id=entry.id)
        entry_row.position = position
        entry_row.nama_pasien = entry.nama_pasien
        entry_row.nomor_telp = entry.nomor_telp or ""
        new_entries.append(entry_row)
    row.entries = new_entries

    db.commit()
    db.refresh(row)
    return row


def set_patient_sort_order(db: Session, patient_id: str, order: int) -> bool:
    row = get_patient_row(db, patient_id)
    if not row:
        return False
    row.sort_order = order
    db.commit()
    return True


# ------------------------------------------
# Delete a requirement: photo blobs, then photo rows, then the row
# ------------------------------------------
def delete_patient(db: Session, patient_id: str, upload_dir: str) -> bool:
    row = get_patient_row(db, patient_id)
    if not row:
        return False

    for photo in row.photos:
        remove_blob(photo.storage_path, upload_dir)

    row.photos.clear()
    db.flush()

    db.delete(row)
    db.commit()
    return True
