"""
Excel export for appointments and departments.
One worksheet per logical group, fixed headers, styled header row.
"""

import io
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from core.entities import Appointment, Department, Patient
from core.time_utils import date_stamp, format_date_with_day

HEADER_BG = "E8D6F5"
HEADER_COLOR = "5A2080"
DEFAULT_WIDTH = 18
SHEET_NAME_LIMIT = 31

Cell = Union[str, int]


@dataclass
class Column:
    header: str
    key: str
    width: int = DEFAULT_WIDTH


@dataclass
class Sheet:
    name: str
    columns: List[Column]
    rows: List[Dict[str, Cell]] = field(default_factory=list)


APPOINTMENT_COLUMNS = [
    Column("Tanggal", "tanggal", 24),
    Column("Jam", "jam", 8),
    Column("Kubikel", "kubikel", 18),
    Column("Rencana Perawatan", "rencana", 30),
    Column("Kasus", "kasus", 24),
    Column("Departemen", "departemen", 24),
    Column("Nama Pasien", "nama", 24),
    Column("No. Telp", "telp", 18),
    Column("Selesai", "selesai", 10),
]

DEPARTMENT_COLUMNS = [
    Column("Sub-Departemen", "sub", 28),
    Column("Requirement", "req", 32),
    Column("Status", "status", 26),
    Column("Nama Pasien", "nama", 26),
    Column("No. Telp", "telp", 20),
    Column("Jml Pasien", "jml", 12),
]


def _cell_value(value: Optional[Cell]) -> Cell:
    if value is None or value == "":
        return ""
    return value if isinstance(value, int) else str(value)


def build_workbook(sheets: List[Sheet]) -> bytes:
    """Render sheets into an .xlsx payload."""
    wb = Workbook()
    wb.remove(wb.active)

    header_font = Font(bold=True, color=HEADER_COLOR, size=10, name="Arial")
    header_fill = PatternFill(start_color=HEADER_BG, end_color=HEADER_BG, fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")

    used_names = set()
    for sheet in sheets:
        title = unique_sheet_name(sheet.name, used_names)
        ws = wb.create_sheet(title=title)

        for col_idx, col in enumerate(sheet.columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=col.header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            ws.column_dimensions[get_column_letter(col_idx)].width = col.width

        for row_idx, row in enumerate(sheet.rows, 2):
            for col_idx, col in enumerate(sheet.columns, 1):
                ws.cell(row=row_idx, column=col_idx, value=_cell_value(row.get(col.key)))

        ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def unique_sheet_name(name: str, used: set) -> str:
    # Excel forbids these characters and limits names to 31 chars
    cleaned = "".join("_" if ch in '[]:*?/\\' else ch for ch in (name or "Sheet"))[:SHEET_NAME_LIMIT] or "Sheet"
    candidate, n = cleaned, 2
    while candidate.lower() in used:
        suffix = f" ({n})"
        candidate = cleaned[: SHEET_NAME_LIMIT - len(suffix)] + suffix
        n += 1
    used.add(candidate.lower())
    return candidate


# ------------------------------------------
# Appointments -> single sheet
# ------------------------------------------
def appointments_sheet(appointments: List[Appointment]) -> Sheet:
    rows = [
        {
            "tanggal": format_date_with_day(a.tanggal),
            "jam": a.jam,
            "kubikel": a.kubikel,
            "rencana": a.rencana_perawatan,
            "kasus": a.kasus,
            "departemen": a.departemen,
            "nama": a.nama_pasien,
            "telp": a.nomor_telp,
            "selesai": "Ya" if a.checklist else "Tidak",
        }
        for a in appointments
    ]
    return Sheet(name="Appointments", columns=APPOINTMENT_COLUMNS, rows=rows)


def export_appointments(appointments: List[Appointment], today: Optional[date] = None) -> Tuple[bytes, str]:
    payload = build_workbook([appointments_sheet(appointments)])
    return payload, f"appointments_{date_stamp(today)}.xlsx"


# ------------------------------------------
# Departments -> one sheet per department
# ------------------------------------------
def _requirement_rows(patients: List[Patient], sub_name: str = "") -> List[Dict[str, Cell]]:
    rows = []
    for p in patients:
        if p.entries:
            for entry in p.entries:
                rows.append({
                    "sub": sub_name,
                    "req": p.requirement,
                    "status": p.status,
                    "nama": entry.nama_pasien,
                    "telp": entry.nomor_telp,
                    "jml": len(p.entries),
                })
        else:
            rows.append({"sub": sub_name, "req": p.requirement, "status": p.status, "nama": "-", "telp": "-", "jml": 0})
    return rows


def department_sheet(dept: Department) -> Sheet:
    rows: List[Dict[str, Cell]] = []
    if dept.has_sub_departments:
        for sub in dept.sub_departments:
            rows.extend(_requirement_rows(sub.patients, sub.name))
    else:
        rows.extend(_requirement_rows(dept.patients))
    return Sheet(name=dept.name[:SHEET_NAME_LIMIT], columns=DEPARTMENT_COLUMNS, rows=rows)


def export_departments(departments: List[Department], today: Optional[date] = None) -> Tuple[bytes, str]:
    sheets = [department_sheet(d) for d in departments]
    if not sheets:
        sheets = [Sheet(name="Departemen", columns=DEPARTMENT_COLUMNS)]
    payload = build_workbook(sheets)
    return payload, f"departemen_{date_stamp(today)}.xlsx"
