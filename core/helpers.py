import logging
import re

import streamlit as st

from core.config import configure_logging
from core.errors import ClinicError
from core.progress import CelebrationTracker
from core.setup_db import init_db
from core.sync import Store, SyncController
from services.clinic_actions import ClinicActions, load_state
from services.persistence import PersistenceService

logger = logging.getLogger(__name__)


def format_phone_for_wa(phone: str) -> str:
    """Normalise an Indonesian phone number to the 62... form wa.me expects."""
    clean = re.sub(r"[^\d+]", "", phone or "")
    if clean.startswith("0"):
        return "62" + clean[1:]
    if clean.startswith("+62"):
        return clean[1:]
    if not clean.startswith("62"):
        return "62" + clean
    return clean


def whatsapp_url(phone: str) -> str:
    return f"https://wa.me/{format_phone_for_wa(phone)}"


# -----------------------------
# Notifications
# -----------------------------
class StreamlitNotifier:
    """Toasts for the sync controller."""

    def success(self, message: str) -> None:
        st.toast(message, icon="✅")

    def error(self, message: str) -> None:
        st.toast(message, icon="⚠️")


# -----------------------------
# Session-scoped clinic state
# -----------------------------
@st.cache_resource
def get_backend() -> PersistenceService:
    """Create tables and the default admin password once per process."""
    configure_logging()
    init_db()
    return PersistenceService()


def get_clinic_actions() -> ClinicActions:
    """Build the store once per browser session and reuse it on every rerun."""
    if "clinic_store" not in st.session_state:
        try:
            state = load_state(get_backend())
        except ClinicError as e:
            logger.error("Loading clinic data failed: %s", e)
            st.error("Gagal memuat data klinik. Coba muat ulang halaman.")
            st.stop()
        st.session_state["clinic_store"] = Store(state)
    store = st.session_state["clinic_store"]
    controller = SyncController(store, StreamlitNotifier())
    return ClinicActions(store, controller, get_backend())


def get_celebration_tracker() -> CelebrationTracker:
    if "celebration_tracker" not in st.session_state:
        st.session_state.celebration_tracker = CelebrationTracker()
    return st.session_state.celebration_tracker


def reload_clinic_state():
    st.session_state.pop("clinic_store", None)


# -----------------------------
# Sidebar helpers
# -----------------------------
def hide_default_sidebar_nav():
    """Hide Streamlit's default multi-page navigation for a cleaner custom menu."""
    st.markdown(
        """
        <style>
        [data-testid="stSidebarNav"] { display: none; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def hide_sidebar_completely():
    """Hide the sidebar and its toggle, e.g. on the login page."""
    st.markdown(
        """
        <style>
        [data-testid="stSidebar"] { display: none !important; }
        [data-testid="collapsedControl"] { display: none !important; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar(brand=None):
    """Render the admin menu.

    Items:
    - Dashboard
    - Appointments
    - Weekly Planning
    - Settings
    - Logout
    """
    hide_default_sidebar_nav()
    with st.sidebar:
        if brand is not None:
            if brand.logo_path:
                st.image(brand.logo_path, width=64)
            st.markdown(f"### {brand.title}")
            if brand.subtitle:
                st.caption(brand.subtitle)
        if st.button("Dashboard", use_container_width=True):
            st.switch_page("pages/dashboard.py")
        if st.button("Appointments", use_container_width=True):
            st.switch_page("pages/appointments.py")
        if st.button("Weekly Planning", use_container_width=True):
            st.switch_page("pages/weekly_planning.py")
        if st.button("Pengaturan", use_container_width=True):
            st.switch_page("pages/settings.py")
        st.divider()
        if st.button("Reload data", use_container_width=True):
            reload_clinic_state()
            st.rerun()
        if st.button("Logout", use_container_width=True):
            from core.session_manager import logout
            logout()
