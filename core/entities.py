"""
View-state entities.

These are the plain objects the UI renders and the sync store holds. They are
independent of the SQLAlchemy rows in ``models/``; the services convert
between the two at the persistence boundary.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


STATUS_OPTIONS = [
    "Belum Dikerjakan",
    "Identifikasi Pasien",
    "Diskusi DPJP",
    "Tindakan",
    "Kontrol Pasca Tindakan",
    "Selesai",
]

STATUS_WEIGHT = {status: weight for weight, status in enumerate(STATUS_OPTIONS)}
MAX_STATUS_WEIGHT = len(STATUS_OPTIONS) - 1

STATUS_DONE = "Selesai"
STATUS_NEW = "Belum Dikerjakan"

DAY_KEYS = ["senin", "selasa", "rabu", "kamis", "jumat", "sabtu", "minggu"]
DAY_LABELS = {
    "senin": "Senin",
    "selasa": "Selasa",
    "rabu": "Rabu",
    "kamis": "Kamis",
    "jumat": "Jumat",
    "sabtu": "Sabtu",
    "minggu": "Minggu",
}


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass
class PatientEntry:
    id: str
    nama_pasien: str
    nomor_telp: str = ""


@dataclass
class Photo:
    id: str
    url: str
    storage_path: str


def derive_legacy_fields(entries: List[PatientEntry]) -> Tuple[bool, str, str]:
    """Return (has_pasien, nama_pasien, nomor_telp) for an entry list.

    The first entry doubles as the legacy single-patient view; an empty list
    yields empty strings.
    """
    if not entries:
        return False, "", ""
    first = entries[0]
    return True, first.nama_pasien, first.nomor_telp


@dataclass
class Patient:
    """A requirement row. ``entries`` is the only writable patient list."""

    id: str
    requirement: str
    status: str = STATUS_NEW
    entries: List[PatientEntry] = field(default_factory=list)
    photos: List[Photo] = field(default_factory=list)
    sort_order: int = 0

    @property
    def has_pasien(self) -> bool:
        return derive_legacy_fields(self.entries)[0]

    @property
    def nama_pasien(self) -> str:
        return derive_legacy_fields(self.entries)[1]

    @property
    def nomor_telp(self) -> str:
        return derive_legacy_fields(self.entries)[2]


@dataclass
class SubDepartment:
    id: str
    name: str
    patients: List[Patient] = field(default_factory=list)
    sort_order: int = 0


@dataclass
class Department:
    id: str
    name: str
    has_sub_departments: bool = False
    patients: List[Patient] = field(default_factory=list)
    sub_departments: List[SubDepartment] = field(default_factory=list)
    sort_order: int = 0

    def all_patients(self) -> List[Patient]:
        if self.has_sub_departments:
            return [p for sub in self.sub_departments for p in sub.patients]
        return list(self.patients)

    def find_patient(self, patient_id: str) -> Tuple[Optional[Patient], Optional[str]]:
        """Return (patient, sub_department_id) or (None, None)."""
        if self.has_sub_departments:
            for sub in self.sub_departments:
                for p in sub.patients:
                    if p.id == patient_id:
                        return p, sub.id
            return None, None
        for p in self.patients:
            if p.id == patient_id:
                return p, None
        return None, None


@dataclass
class Appointment:
    id: str
    tanggal: str
    jam: str
    kubikel: str = ""
    rencana_perawatan: str = ""
    kasus: str = ""
    departemen: str = ""
    nama_pasien: str = ""
    nomor_telp: str = ""
    checklist: bool = False


@dataclass
class WeeklySlot:
    id: str
    jam: str
    senin: str = ""
    selasa: str = ""
    rabu: str = ""
    kamis: str = ""
    jumat: str = ""
    sabtu: str = ""
    minggu: str = ""

    def cell(self, day: str) -> str:
        if day not in DAY_KEYS:
            raise KeyError(day)
        return getattr(self, day)


@dataclass
class ClinicState:
    departments: List[Department] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    weekly_slots: List[WeeklySlot] = field(default_factory=list)


@dataclass
class Brand:
    title: str
    subtitle: str = ""
    logo_path: Optional[str] = None
