from datetime import date, time
from typing import Optional

import streamlit as st

from core.entities import Appointment
from core.errors import ValidationError
from core.helpers import get_backend, get_clinic_actions, render_sidebar, whatsapp_url
from core.listing import PAGE_SIZES, filter_appointments, page_numbers, paginate, sort_appointments, total_pages
from core.session_manager import require_login
from core.time_utils import format_date_with_day
from services.export_service import export_appointments

require_login()
render_sidebar(get_backend().get_brand_settings())
actions = get_clinic_actions()


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return date.today()


def _parse_time(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError:
        return time(8, 0)


def appointment_form(key: str, appt: Optional[Appointment] = None) -> Optional[Appointment]:
    """Render the add/edit form; returns the submitted appointment or None."""
    appt = appt or Appointment(id="", tanggal=date.today().isoformat(), jam="08:00")
    dept_names = [d.name for d in actions.state.departments]
    with st.form(key, clear_on_submit=not appt.id):
        c1, c2, c3 = st.columns(3)
        tanggal = c1.date_input("Tanggal", value=_parse_date(appt.tanggal))
        jam = c2.time_input("Jam", value=_parse_time(appt.jam), step=900)
        kubikel = c3.text_input("Kubikel", value=appt.kubikel)
        nama = st.text_input("Nama Pasien", value=appt.nama_pasien)
        telp = st.text_input("No. Telp", value=appt.nomor_telp)
        options = [""] + dept_names
        departemen = st.selectbox(
            "Departemen",
            options,
            index=options.index(appt.departemen) if appt.departemen in options else 0,
        )
        rencana = st.text_area("Rencana Perawatan", value=appt.rencana_perawatan)
        kasus = st.text_input("Kasus", value=appt.kasus)
        submitted = st.form_submit_button("Simpan")

    if not submitted:
        return None
    return Appointment(
        id=appt.id,
        tanggal=tanggal.isoformat(),
        jam=jam.strftime("%H:%M"),
        kubikel=kubikel.strip(),
        rencana_perawatan=rencana.strip(),
        kasus=kasus.strip(),
        departemen=departemen,
        nama_pasien=nama.strip(),
        nomor_telp=telp.strip(),
        checklist=appt.checklist,
    )


def _toggled(appt_id: str, key: str, previous: bool):
    if not actions.toggle_appointment(appt_id):
        st.session_state[key] = previous


def render_row(appt: Appointment):
    cols = st.columns([3, 1, 3, 2, 1, 1, 1])
    cols[0].write(f"{format_date_with_day(appt.tanggal)}  \n{appt.jam} · {appt.kubikel or '-'}")
    cols[1].checkbox(
        "Selesai",
        value=appt.checklist,
        key=f"done_{appt.id}",
        on_change=_toggled,
        args=(appt.id, f"done_{appt.id}", appt.checklist),
    )
    cols[2].write(f"**{appt.nama_pasien}**  \n{appt.rencana_perawatan or '-'}")
    cols[3].write(f"{appt.departemen or '-'}  \n{appt.kasus or '-'}")
    if appt.nomor_telp:
        cols[4].link_button("WA", whatsapp_url(appt.nomor_telp))
    with cols[5].popover("Edit"):
        edited = appointment_form(f"edit_{appt.id}", appt)
        if edited is not None:
            try:
                if actions.edit_appointment(edited):
                    st.rerun()
            except ValidationError as e:
                st.error(str(e))
    if cols[6].button("🗑", key=f"del_{appt.id}"):
        if actions.delete_appointment(appt.id):
            st.rerun()


st.title("Appointments")

top = st.columns([3, 1, 1, 1])
term = top[0].text_input("Cari", placeholder="Nama, departemen, rencana, kasus, kubikel")
page_size_label = top[1].selectbox("Per halaman", PAGE_SIZES)
with top[2].popover("Tambah"):
    created = appointment_form("add_appointment")
    if created is not None:
        try:
            if actions.add_appointment(created):
                st.rerun()
        except ValidationError as e:
            st.error(str(e))

rows = filter_appointments(sort_appointments(actions.state.appointments), term)
with top[3]:
    payload, filename = export_appointments(rows)
    st.download_button(
        "Export Excel",
        data=payload,
        file_name=filename,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

if not rows:
    st.info("Belum ada appointment.")
    st.stop()

page_size = page_size_label if isinstance(page_size_label, int) else None
pages = total_pages(len(rows), page_size)
page = min(st.session_state.get("appointments_page", 1), pages)

for appt in paginate(rows, page, page_size):
    render_row(appt)
    st.markdown("---")

if pages > 1:
    numbers = page_numbers(page, pages)
    pager = st.columns(len(numbers))
    for col, n in zip(pager, numbers):
        if n < 0:
            col.write("…")
        elif col.button(str(n), key=f"page_{n}", disabled=n == page):
            st.session_state["appointments_page"] = n
            st.rerun()
st.caption(f"{len(rows)} appointment")
