from sqlalchemy import Column, String, Boolean, Text

from core.database import Base


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String, primary_key=True, index=True)
    tanggal = Column(String, nullable=False, index=True)  # YYYY-MM-DD
    jam = Column(String, nullable=False)  # HH:MM
    kubikel = Column(String, nullable=False, default="")
    rencana_perawatan = Column(Text, nullable=False, default="")
    kasus = Column(Text, nullable=False, default="")

    # Free text, not a foreign key: departments may be renamed or deleted
    departemen = Column(String, nullable=False, default="")
    nama_pasien = Column(String, nullable=False, default="")
    nomor_telp = Column(String, nullable=False, default="")
    checklist = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Appointment {self.tanggal} {self.jam} - {self.nama_pasien}>"
