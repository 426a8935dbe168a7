# models/patient.py

from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from core.database import Base


class Patient(Base):
    """One requirement row of a department (historically a single patient)."""

    __tablename__ = "patients"

    id = Column(String, primary_key=True, index=True)

    department_id = Column(String, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    sub_department_id = Column(String, ForeignKey("sub_departments.id", ondelete="CASCADE"), nullable=True, index=True)

    requirement = Column(String, nullable=False)
    status = Column(String, nullable=False, default="Belum Dikerjakan")
    sort_order = Column(Integer, nullable=False, default=0)

    # Legacy single-patient columns, written only from derive_legacy_fields()
    has_pasien = Column(Boolean, nullable=False, default=False)
    nama_pasien = Column(String, nullable=False, default="")
    nomor_telp = Column(String, nullable=False, default="")

    entries = relationship(
        "PatientEntry",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="PatientEntry.position",
    )
    photos = relationship(
        "PatientPhoto",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="PatientPhoto.created_at",
    )

    def __repr__(self):
        return f"<Patient {self.id} - {self.requirement}>"


class PatientEntry(Base):
    __tablename__ = "patient_entries"

    id = Column(String, primary_key=True, index=True)
    patient_id = Column(String, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    nama_pasien = Column(String, nullable=False)
    nomor_telp = Column(String, nullable=False, default="")

    patient = relationship("Patient", back_populates="entries")


class PatientPhoto(Base):
    __tablename__ = "patient_photos"

    id = Column(String, primary_key=True, index=True)
    patient_id = Column(String, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    photo_url = Column(String, nullable=False)
    storage_path = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    patient = relationship("Patient", back_populates="photos")
