import streamlit as st
from streamlit_searchbox import st_searchbox

from core.entities import DAY_LABELS
from core.errors import ValidationError
from core.helpers import get_backend, get_clinic_actions, render_sidebar, whatsapp_url
from core.session_manager import require_login
from core.slot_codec import BREAK_SENTINEL, SlotBooking, parse_slot_value
from services.clinic_actions import NO_DEPARTMENT, bookable_patients
from services.weekly_slot_service import VISIBLE_DAYS, filled_count, visible_slots


def main():
    require_login()
    render_sidebar(get_backend().get_brand_settings())
    actions = get_clinic_actions()
    slots = actions.state.weekly_slots

    st.title("Weekly Planning")
    shown = visible_slots(slots)
    st.caption(f"{filled_count(slots)} dari {len(shown) * len(VISIBLE_DAYS)} slot terisi")

    header = st.columns([1] + [2] * len(VISIBLE_DAYS))
    header[0].markdown("**Jam**")
    for col, day in zip(header[1:], VISIBLE_DAYS):
        col.markdown(f"**{DAY_LABELS[day]}**")

    for slot in shown:
        row = st.columns([1] + [2] * len(VISIBLE_DAYS))
        row[0].write(slot.jam)
        for col, day in zip(row[1:], VISIBLE_DAYS):
            value = parse_slot_value(slot.cell(day))
            if value == BREAK_SENTINEL:
                col.caption("Istirahat")
                continue
            label = value.name if isinstance(value, SlotBooking) else "+"
            if col.button(label, key=f"cell_{slot.id}_{day}", use_container_width=True):
                st.session_state["planner_cell"] = (slot.id, day)

    target = st.session_state.get("planner_cell")
    if not target:
        return

    slot_id, day = target
    slot = next((s for s in slots if s.id == slot_id), None)
    if slot is None:
        st.session_state.pop("planner_cell", None)
        return

    st.divider()
    st.subheader(f"{DAY_LABELS[day]}, {slot.jam}")
    current = parse_slot_value(slot.cell(day))
    if isinstance(current, SlotBooking):
        st.write(f"**{current.name}** {current.department}")
        if current.phone:
            st.link_button("WhatsApp", whatsapp_url(current.phone))

    mode = st.radio(
        "Isi dari",
        ["Pilih pasien", "Manual"],
        index=1 if isinstance(current, SlotBooking) and not current.patient_id else 0,
        horizontal=True,
    )

    if mode == "Pilih pasien":
        def search_requirements(term: str):
            term = (term or "").strip().lower()
            results = []
            for dept in actions.state.departments:
                for patient, sub in bookable_patients(dept):
                    if not patient.has_pasien:
                        continue
                    label = f"{patient.nama_pasien} · {patient.requirement} · {dept.name}"
                    if sub is not None:
                        label += f" / {sub.name}"
                    if not term or term in label.lower():
                        results.append((label, f"{dept.id}|{patient.id}"))
            return results[:20]

        selection = st_searchbox(
            search_requirements,
            key=f"planner_search_{slot_id}_{day}",
            placeholder="Cari nama pasien atau requirement",
        )
        if st.button("Simpan", type="primary", disabled=not selection):
            dept_id, patient_id = selection.split("|", 1)
            try:
                if actions.book_slot_for_patient(slot_id, day, dept_id, patient_id):
                    st.session_state.pop("planner_cell", None)
                    st.rerun()
            except ValidationError as e:
                st.error(str(e))
    else:
        booking = current if isinstance(current, SlotBooking) else SlotBooking(name="")
        dept_options = [NO_DEPARTMENT] + [d.name for d in actions.state.departments]
        with st.form(f"manual_{slot_id}_{day}"):
            name = st.text_input("Nama Pasien", value=booking.name)
            phone = st.text_input("No. Telp", value=booking.phone)
            department = st.selectbox(
                "Departemen",
                dept_options,
                index=dept_options.index(booking.department) if booking.department in dept_options else 0,
                format_func=lambda v: "Tanpa departemen" if v == NO_DEPARTMENT else v,
            )
            submitted = st.form_submit_button("Simpan", type="primary")
        if submitted:
            try:
                if actions.book_slot_manual(slot_id, day, name, phone, department):
                    st.session_state.pop("planner_cell", None)
                    st.rerun()
            except ValidationError as e:
                st.error(str(e))

    c1, c2 = st.columns(2)
    if c1.button("Kosongkan slot", disabled=not isinstance(current, SlotBooking)):
        if actions.clear_slot(slot_id, day):
            st.session_state.pop("planner_cell", None)
            st.rerun()
    if c2.button("Tutup"):
        st.session_state.pop("planner_cell", None)
        st.rerun()


if __name__ == "__main__":
    main()
