from datetime import datetime
from typing import Optional

import streamlit as st

from core.entities import Department, Patient, PatientEntry, STATUS_OPTIONS
from core.errors import ValidationError
from core.helpers import (
    get_backend,
    get_celebration_tracker,
    get_clinic_actions,
    render_sidebar,
    whatsapp_url,
)
from core.listing import filter_departments, filter_requirements
from core.progress import completed_count, progress_color, weighted_progress
from core.reminders import nearest_upcoming, time_label, todays_bookings
from core.session_manager import require_login
from core.time_utils import format_long_date
from services.export_service import export_departments

# Page config is set globally in app.py

require_login()
render_sidebar(get_backend().get_brand_settings())
actions = get_clinic_actions()


def render_reminder():
    now = datetime.now()
    bookings = todays_bookings(actions.state.weekly_slots, now)
    st.caption(format_long_date(now.date()))
    if not bookings:
        st.info("Tidak ada jadwal pasien hari ini.")
        return

    upcoming = nearest_upcoming(bookings, now)
    if upcoming:
        st.success(f"**{upcoming.jam}** {upcoming.name} ({time_label(upcoming, now)})")
    with st.expander(f"Jadwal hari ini ({len(bookings)})"):
        for b in bookings:
            cols = st.columns([1, 3, 1])
            cols[0].write(b.jam)
            cols[1].write(b.name)
            if b.phone:
                cols[2].link_button("WhatsApp", whatsapp_url(b.phone))


def render_add_department():
    with st.popover("Tambah departemen"):
        with st.form("add_department_form", clear_on_submit=True):
            name = st.text_input("Nama departemen")
            has_sub = st.checkbox("Memiliki sub-departemen")
            submitted = st.form_submit_button("Simpan")
        if submitted:
            try:
                if actions.add_department(name, has_sub):
                    st.rerun()
            except ValidationError as e:
                st.error(str(e))


def _status_changed(dept_id: str, patient_id: str, key: str, previous: str):
    if not actions.change_status(dept_id, patient_id, st.session_state[key]):
        st.session_state[key] = previous


def render_entries_editor(dept: Department, patient: Patient):
    rows = [{"id": e.id, "nama_pasien": e.nama_pasien, "nomor_telp": e.nomor_telp} for e in patient.entries]
    with st.form(f"entries_{patient.id}"):
        edited = st.data_editor(
            rows,
            key=f"entries_editor_{patient.id}",
            num_rows="dynamic",
            column_config={
                "id": None,
                "nama_pasien": st.column_config.TextColumn("Nama Pasien", required=True),
                "nomor_telp": st.column_config.TextColumn("No. Telp"),
            },
            use_container_width=True,
        )
        submitted = st.form_submit_button("Simpan daftar pasien")
    if submitted:
        entries = [
            PatientEntry(id=r.get("id") or "", nama_pasien=r.get("nama_pasien") or "", nomor_telp=r.get("nomor_telp") or "")
            for r in edited
        ]
        try:
            if actions.save_entries(dept.id, patient.id, entries):
                st.rerun()
        except ValidationError as e:
            st.error(str(e))

    for e in patient.entries:
        if e.nomor_telp:
            st.link_button(f"WhatsApp {e.nama_pasien}", whatsapp_url(e.nomor_telp))


def render_photos(dept: Department, patient: Patient):
    if patient.photos:
        cols = st.columns(4)
        for i, photo in enumerate(patient.photos):
            with cols[i % 4]:
                st.image(photo.url, use_container_width=True)
                if st.button("Hapus", key=f"rm_photo_{photo.id}"):
                    if actions.remove_photo(dept.id, patient.id, photo.id):
                        st.rerun()

    with st.form(f"photo_{patient.id}", clear_on_submit=True):
        uploaded = st.file_uploader("Tambah foto", type=["png", "jpg", "jpeg", "webp"])
        submitted = st.form_submit_button("Unggah")
    if submitted and uploaded is not None:
        try:
            if actions.attach_photo(dept.id, patient.id, uploaded.getvalue()):
                st.rerun()
        except ValidationError as e:
            st.error(str(e))


def render_requirement(dept: Department, patient: Patient, sub_id: Optional[str], siblings: list, index: int):
    cols = st.columns([4, 3, 1, 1, 1])
    with cols[0]:
        st.markdown(f"**{patient.requirement}**")
        st.caption(patient.nama_pasien or "Belum ada pasien")
    with cols[1]:
        key = f"status_{patient.id}"
        st.selectbox(
            "Status",
            STATUS_OPTIONS,
            index=STATUS_OPTIONS.index(patient.status) if patient.status in STATUS_OPTIONS else 0,
            key=key,
            label_visibility="collapsed",
            on_change=_status_changed,
            args=(dept.id, patient.id, key, patient.status),
        )
    with cols[2]:
        if index > 0 and st.button("↑", key=f"up_{patient.id}"):
            if actions.reorder_requirements(dept.id, patient.id, siblings[index - 1].id, sub_id):
                st.rerun()
    with cols[3]:
        if index < len(siblings) - 1 and st.button("↓", key=f"down_{patient.id}"):
            if actions.reorder_requirements(dept.id, patient.id, siblings[index + 1].id, sub_id):
                st.rerun()
    with cols[4]:
        if st.button("🗑", key=f"del_{patient.id}"):
            if actions.delete_requirement(dept.id, patient.id):
                st.rerun()

    with st.expander(f"Detail ({len(patient.entries)} pasien, {len(patient.photos)} foto)"):
        with st.form(f"edit_req_{patient.id}"):
            requirement = st.text_input("Requirement", value=patient.requirement)
            submitted = st.form_submit_button("Simpan requirement")
        if submitted:
            try:
                if actions.edit_requirement(dept.id, patient.id, requirement):
                    st.rerun()
            except ValidationError as e:
                st.error(str(e))
        render_entries_editor(dept, patient)
        render_photos(dept, patient)


def render_requirement_list(dept: Department, patients: list, sub_id: Optional[str], query: str):
    shown = filter_requirements(patients, query)
    if not shown:
        st.caption("Belum ada requirement.")
    for i, p in enumerate(shown):
        render_requirement(dept, p, sub_id, shown, i)
        st.markdown("---")

    with st.form(f"add_req_{dept.id}_{sub_id or 'root'}", clear_on_submit=True):
        requirement = st.text_input("Requirement baru")
        submitted = st.form_submit_button("Tambah requirement")
    if submitted:
        try:
            if actions.add_requirement(dept.id, requirement, sub_id=sub_id):
                st.rerun()
        except ValidationError as e:
            st.error(str(e))


def render_department(dept: Department):
    patients = dept.all_patients()
    progress = weighted_progress(patients)

    if get_celebration_tracker().observe(dept.id, progress, len(patients)):
        st.balloons()
        st.toast(f"Departemen {dept.name} selesai 100%!", icon="🎉")

    with st.expander(f"{dept.name}  ·  {progress}%  ({completed_count(patients)}/{len(patients)} selesai)"):
        st.markdown(
            f"<div style='height:8px;border-radius:4px;background:#eee'>"
            f"<div style='width:{progress}%;height:8px;border-radius:4px;background:{progress_color(progress)}'></div></div>",
            unsafe_allow_html=True,
        )

        head = st.columns([3, 1, 1])
        query = head[0].text_input("Cari requirement", key=f"q_{dept.id}")
        with head[1].popover("Ubah nama"):
            with st.form(f"rename_{dept.id}"):
                name = st.text_input("Nama departemen", value=dept.name)
                submitted = st.form_submit_button("Simpan")
            if submitted:
                try:
                    if actions.update_department(dept.id, name):
                        st.rerun()
                except ValidationError as e:
                    st.error(str(e))
        if head[2].button("Hapus departemen", key=f"del_dept_{dept.id}"):
            if actions.delete_department(dept.id):
                get_celebration_tracker().forget(dept.id)
                st.rerun()

        if dept.has_sub_departments:
            for sub in dept.sub_departments:
                st.subheader(sub.name)
                if st.button("Hapus sub-departemen", key=f"del_sub_{sub.id}"):
                    if actions.delete_sub_department(dept.id, sub.id):
                        st.rerun()
                render_requirement_list(dept, sub.patients, sub.id, query)

            with st.form(f"add_sub_{dept.id}", clear_on_submit=True):
                sub_name = st.text_input("Sub-departemen baru")
                submitted = st.form_submit_button("Tambah sub-departemen")
            if submitted:
                try:
                    if actions.add_sub_department(dept.id, sub_name):
                        st.rerun()
                except ValidationError as e:
                    st.error(str(e))
        else:
            render_requirement_list(dept, dept.patients, None, query)


st.title("Dashboard")
render_reminder()

top = st.columns([3, 1, 1])
search = top[0].text_input("Cari departemen", placeholder="e.g., Konservasi")
with top[1]:
    render_add_department()
with top[2]:
    payload, filename = export_departments(actions.state.departments)
    st.download_button(
        "Export Excel",
        data=payload,
        file_name=filename,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

departments = filter_departments(actions.state.departments, search)
if not departments:
    st.info("Belum ada departemen.")
    st.stop()

for d in departments:
    render_department(d)
