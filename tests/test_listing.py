import pytest

from core.entities import Appointment, Department, Patient
from core.listing import (
    filter_appointments,
    filter_departments,
    filter_requirements,
    page_numbers,
    paginate,
    sort_appointments,
    total_pages,
)


def appt(id, tanggal, jam, **kw):
    return Appointment(id=id, tanggal=tanggal, jam=jam, **kw)


class TestSearch:
    def test_departments_by_name(self):
        depts = [Department(id="1", name="Konservasi"), Department(id="2", name="Periodonsia")]
        assert [d.id for d in filter_departments(depts, "  KONS ")] == ["1"]
        assert filter_departments(depts, "") == depts

    def test_requirements(self):
        ps = [Patient(id="1", requirement="Scaling"), Patient(id="2", requirement="Tumpatan")]
        assert [p.id for p in filter_requirements(ps, "tump")] == ["2"]

    @pytest.mark.parametrize("term", ["budi", "orto", "scaling", "gingiv", "k3"])
    def test_appointments_match_any_field(self, term):
        a = appt("a", "2024-01-01", "09:00", nama_pasien="Budi", departemen="Ortodonsia",
                 rencana_perawatan="Scaling", kasus="Gingivitis", kubikel="K3")
        assert filter_appointments([a], term) == [a]

    def test_appointments_no_match(self):
        assert filter_appointments([appt("a", "2024-01-01", "09:00", nama_pasien="Budi")], "sari") == []


class TestSortAndPage:
    def test_newest_first(self):
        appts = [appt("a", "2024-01-01", "09:00"), appt("b", "2024-01-02", "08:00"), appt("c", "2024-01-01", "10:00")]
        assert [a.id for a in sort_appointments(appts)] == ["b", "c", "a"]

    def test_paginate(self):
        items = list(range(25))
        assert total_pages(25, 10) == 3
        assert paginate(items, 3, 10) == [20, 21, 22, 23, 24]
        assert paginate(items, 9, 10) == [20, 21, 22, 23, 24]
        assert paginate(items, 1, None) == items
        assert total_pages(0, 10) == 1

    @pytest.mark.parametrize("page, pages, expected", [
        (1, 5, [1, 2, 3, 4, 5]),
        (2, 10, [1, 2, 3, 4, 5, -1, 10]),
        (9, 10, [1, -1, 6, 7, 8, 9, 10]),
        (5, 10, [1, -1, 4, 5, 6, -2, 10]),
    ])
    def test_page_numbers(self, page, pages, expected):
        assert page_numbers(page, pages) == expected
