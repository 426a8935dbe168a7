"""
Shared fixtures: a throwaway SQLite database, an upload directory, a
recording notifier and small image payloads.
"""
import io
import os

# Keep the module-level engine off the real data directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from PIL import Image

import models  # noqa: F401
from core.database import Base, make_engine, make_session_factory
from core.entities import (
    Appointment,
    ClinicState,
    Department,
    Patient,
    PatientEntry,
    SubDepartment,
)
from core.sync import Store, SyncController
from services.persistence import PersistenceService
from services.weekly_slot_service import default_weekly_slots


class RecordingNotifier:
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, message):
        self.successes.append(message)

    def error(self, message):
        self.errors.append(message)


# ============================================================
# Database
# ============================================================

@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'clinic.db'}")
    Base.metadata.create_all(bind=engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return str(path)


@pytest.fixture
def backend(session_factory, upload_dir):
    return PersistenceService(session_factory, upload_dir)


# ============================================================
# Sync plumbing
# ============================================================

@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def sample_state():
    """Two departments, one flat with three requirements and one with sub-departments."""
    flat = Department(
        id="dept-flat",
        name="Konservasi",
        patients=[
            Patient(id="A", requirement="Tumpatan kelas I", sort_order=1,
                    entries=[PatientEntry(id="e1", nama_pasien="Budi", nomor_telp="0812")]),
            Patient(id="B", requirement="Tumpatan kelas II", sort_order=2),
            Patient(id="C", requirement="Perawatan saluran akar", sort_order=3, status="Tindakan"),
        ],
    )
    nested = Department(
        id="dept-sub",
        name="Prostodonsia",
        has_sub_departments=True,
        sub_departments=[
            SubDepartment(id="sub-1", name="Gigi tiruan lengkap", patients=[
                Patient(id="D", requirement="GTL rahang atas",
                        entries=[PatientEntry(id="e2", nama_pasien="Sari")]),
            ]),
        ],
    )
    return ClinicState(
        departments=[flat, nested],
        appointments=[
            Appointment(id="a1", tanggal="2024-01-01", jam="09:00", nama_pasien="Budi"),
        ],
        weekly_slots=default_weekly_slots(),
    )


@pytest.fixture
def store(sample_state):
    return Store(sample_state)


@pytest.fixture
def controller(store, notifier):
    return SyncController(store, notifier)


# ============================================================
# Payloads
# ============================================================

def make_png(size=(4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()
