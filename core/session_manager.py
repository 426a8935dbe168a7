from datetime import date
from typing import Optional

import streamlit as st

SESSION_KEY = "dental_clinic_session"


def is_session_valid(stamp: Optional[str], today: Optional[date] = None) -> bool:
    """A login is only good for the calendar day it was made on."""
    return bool(stamp) and stamp == (today or date.today()).isoformat()


def init_session_state():
    """Ensure required session keys exist and drop a login from a previous day."""
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = None
    if not is_session_valid(st.session_state[SESSION_KEY]):
        st.session_state[SESSION_KEY] = None


def login():
    st.session_state[SESSION_KEY] = date.today().isoformat()


def is_logged_in() -> bool:
    init_session_state()
    return st.session_state[SESSION_KEY] is not None


def clear_session():
    """Clear session without redirect."""
    st.session_state.pop(SESSION_KEY, None)
    st.session_state.pop("clinic_store", None)
    st.session_state.pop("celebration_tracker", None)


def logout():
    """Clear session and redirect to the login page."""
    clear_session()
    st.query_params.clear()
    st.switch_page("app.py")


def require_login():
    """Send unauthenticated visitors back to app.py."""
    if not is_logged_in():
        st.warning("Silakan login terlebih dahulu.")
        st.switch_page("app.py")
