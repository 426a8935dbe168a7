import io
from datetime import date

from openpyxl import load_workbook

from core.entities import Appointment, Department, Patient, PatientEntry, SubDepartment
from services.export_service import (
    DEPARTMENT_COLUMNS,
    export_appointments,
    export_departments,
    unique_sheet_name,
)


def open_workbook(payload):
    return load_workbook(io.BytesIO(payload))


class TestAppointmentsExport:
    def test_single_sheet_with_styled_header(self):
        appts = [Appointment(id="a1", tanggal="2024-01-01", jam="09:00", nama_pasien="Budi", checklist=True)]
        payload, filename = export_appointments(appts, today=date(2024, 3, 5))

        assert filename == "appointments_20240305.xlsx"
        wb = open_workbook(payload)
        assert wb.sheetnames == ["Appointments"]
        ws = wb["Appointments"]
        header = ws["A1"]
        assert header.value == "Tanggal"
        assert header.font.bold
        assert header.font.color.rgb.endswith("5A2080")
        assert header.fill.start_color.rgb.endswith("E8D6F5")
        assert ws.freeze_panes == "A2"
        assert ws["A2"].value == "Senin, 01/01/2024"
        assert ws["G2"].value == "Budi"
        assert ws["I2"].value == "Ya"


class TestDepartmentsExport:
    def test_one_sheet_per_department(self):
        long_name = "Departemen Ilmu Penyakit Mulut dan Radiologi"
        depts = [
            Department(id="d1", name="Konservasi", patients=[
                Patient(id="p1", requirement="Tumpatan", entries=[
                    PatientEntry("e1", "Budi", "0812"), PatientEntry("e2", "Sari", "0813"),
                ]),
                Patient(id="p2", requirement="PSA"),
            ]),
            Department(id="d2", name=long_name, has_sub_departments=True, sub_departments=[
                SubDepartment(id="s1", name="Radiologi", patients=[Patient(id="p3", requirement="Foto periapikal")]),
            ]),
        ]
        payload, filename = export_departments(depts, today=date(2024, 3, 5))

        assert filename == "departemen_20240305.xlsx"
        wb = open_workbook(payload)
        assert wb.sheetnames == ["Konservasi", long_name[:31]]

        ws = wb["Konservasi"]
        assert [c.value for c in ws[1]] == [c.header for c in DEPARTMENT_COLUMNS]
        assert [c.value for c in ws[2]][2:] == ["Belum Dikerjakan", "Budi", "0812", 2]
        assert ws["D3"].value == "Sari"
        assert ws["D4"].value == "-" and ws["F4"].value == 0

        assert wb[long_name[:31]]["A2"].value == "Radiologi"

    def test_empty_list_still_has_a_sheet(self):
        payload, _ = export_departments([])
        assert open_workbook(payload).sheetnames == ["Departemen"]


class TestSheetNames:
    def test_duplicates_get_suffix(self):
        used = set()
        assert unique_sheet_name("Bedah", used) == "Bedah"
        assert unique_sheet_name("bedah", used) == "bedah (2)"

    def test_forbidden_characters(self):
        assert unique_sheet_name("Ortho/Perio", set()) == "Ortho_Perio"
