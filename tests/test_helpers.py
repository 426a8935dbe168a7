from datetime import date
from unittest.mock import MagicMock

import pytest

from core import helpers
from core.auth import hash_password, verify_password
from core.errors import PersistenceError
from core.helpers import format_phone_for_wa, whatsapp_url
from core.session_manager import is_session_valid
from services.persistence import PersistenceService


@pytest.mark.parametrize("raw, expected", [
    ("0812-3456-789", "628123456789"),
    ("+62 812 3456", "628123456"),
    ("62812", "62812"),
    ("812 345", "62812345"),
    ("(0812) 11", "6281211"),
])
def test_format_phone_for_wa(raw, expected):
    assert format_phone_for_wa(raw) == expected


def test_whatsapp_url():
    assert whatsapp_url("0812") == "https://wa.me/62812"


class TestSession:
    def test_same_day(self):
        assert is_session_valid("2024-05-01", today=date(2024, 5, 1))

    def test_previous_day_expired(self):
        assert not is_session_valid("2024-04-30", today=date(2024, 5, 1))

    def test_missing(self):
        assert not is_session_valid(None)


class TestPasswordHash:
    def test_round_trip(self):
        hashed = hash_password("rahasia")
        assert hashed != "rahasia"
        assert verify_password("rahasia", hashed)
        assert not verify_password("salah", hashed)

    def test_not_a_bcrypt_hash(self):
        assert verify_password("rahasia", "5e884898da28") is False
        assert verify_password("rahasia", "") is False


class _Stopped(Exception):
    pass


class TestGetClinicActions:
    @pytest.fixture
    def fake_st(self, monkeypatch):
        fake = MagicMock()
        fake.session_state = {}
        fake.stop.side_effect = _Stopped
        monkeypatch.setattr(helpers, "st", fake)
        return fake

    def test_load_failure_shows_error_and_stops(self, fake_st, monkeypatch):
        backend = MagicMock(spec=PersistenceService)
        backend.list_departments.side_effect = PersistenceError("db down")
        monkeypatch.setattr(helpers, "get_backend", lambda: backend)

        with pytest.raises(_Stopped):
            helpers.get_clinic_actions()

        fake_st.error.assert_called_once()
        assert "clinic_store" not in fake_st.session_state

    def test_store_kept_across_reruns(self, fake_st, monkeypatch, sample_state):
        backend = MagicMock(spec=PersistenceService)
        backend.list_departments.return_value = sample_state.departments
        backend.list_appointments.return_value = sample_state.appointments
        backend.list_weekly_slots.return_value = sample_state.weekly_slots
        monkeypatch.setattr(helpers, "get_backend", lambda: backend)

        first = helpers.get_clinic_actions()
        second = helpers.get_clinic_actions()

        assert first.store is second.store
        assert [d.id for d in second.state.departments] == ["dept-flat", "dept-sub"]
        backend.list_departments.assert_called_once()
