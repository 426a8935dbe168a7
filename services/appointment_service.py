from typing import List

from sqlalchemy.orm import Session

from core import entities
from models.appointment import Appointment


def appointment_to_entity(row: Appointment) -> entities.Appointment:
    return entities.Appointment(
        id=row.id,
        tanggal=row.tanggal,
        jam=(row.jam or "")[:5],
        kubikel=row.kubikel or "",
        rencana_perawatan=row.rencana_perawatan or "",
        kasus=row.kasus or "",
        departemen=row.departemen or "",
        nama_pasien=row.nama_pasien or "",
        nomor_telp=row.nomor_telp or "",
        checklist=bool(row.checklist),
    )


def list_appointments(db: Session) -> List[entities.Appointment]:
    rows = db.query(Appointment).order_by(Appointment.tanggal.desc(), Appointment.jam.desc()).all()
    return [appointment_to_entity(r) for r in rows]


def upsert_appointment(db: Session, appt: entities.Appointment) -> Appointment:
    row = db.query(Appointment).filter(Appointment.id == appt.id).first()
    if row is None:
        row = Appointment(id=appt.id)
        db.add(row)

    row.tanggal = appt.tanggal
    row.jam = appt.jam
    row.kubikel = appt.kubikel
    row.rencana_perawatan = appt.rencana_perawatan
    row.kasus = appt.kasus
    row.departemen = appt.departemen
    row.nama_pasien = appt.nama_pasien
    row.nomor_telp = appt.nomor_telp
    row.checklist = appt.checklist

    db.commit()
    db.refresh(row)
    return row


def delete_appointment(db: Session, appt_id: str) -> bool:
    row = db.query(Appointment).filter(Appointment.id == appt_id).first()
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True
