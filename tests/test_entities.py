import pytest

from core import mutations
from core.entities import Patient, PatientEntry, derive_legacy_fields, new_id


class TestLegacyFields:
    def test_empty_list(self):
        assert derive_legacy_fields([]) == (False, "", "")

    def test_first_entry_wins(self):
        entries = [PatientEntry("1", "Budi", "0812"), PatientEntry("2", "Sari", "0813")]
        assert derive_legacy_fields(entries) == (True, "Budi", "0812")

    def test_properties_follow_entries(self):
        p = Patient(id="p", requirement="Scaling")
        assert not p.has_pasien and p.nama_pasien == "" and p.nomor_telp == ""
        p.entries.append(PatientEntry("1", "Budi", "0812"))
        assert p.has_pasien
        assert p.nama_pasien == "Budi"
        assert p.nomor_telp == "0812"


class TestDepartmentLookup:
    def test_find_in_flat_department(self, sample_state):
        patient, sub_id = sample_state.departments[0].find_patient("B")
        assert patient.id == "B" and sub_id is None

    def test_find_in_sub_department(self, sample_state):
        patient, sub_id = sample_state.departments[1].find_patient("D")
        assert patient.id == "D" and sub_id == "sub-1"

    def test_missing(self, sample_state):
        assert sample_state.departments[0].find_patient("nope") == (None, None)

    def test_all_patients_flattens_subs(self, sample_state):
        assert [p.id for p in sample_state.departments[1].all_patients()] == ["D"]


class TestMutations:
    def test_array_move(self):
        assert mutations.array_move(["A", "B", "C"], 2, 0) == ["C", "A", "B"]

    def test_move_by_id_same_target_is_noop(self, sample_state):
        assert mutations.move_by_id(sample_state.departments[0].patients, "A", "A") is None

    def test_mutations_do_not_touch_input(self, sample_state):
        dept = sample_state.departments[0]
        updated = mutations.remove_patient(dept, "A")
        assert [p.id for p in dept.patients] == ["A", "B", "C"]
        assert [p.id for p in updated.patients] == ["B", "C"]

    def test_set_slot_cell_unknown_slot(self, sample_state):
        with pytest.raises(LookupError):
            mutations.set_slot_cell(sample_state.weekly_slots, "nope", "senin", "")

    def test_new_id_prefix(self):
        assert new_id("dept").startswith("dept-")
