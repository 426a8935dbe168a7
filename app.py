import logging

import streamlit as st

from core.errors import ClinicError
from core.helpers import get_backend, hide_sidebar_completely
from core.session_manager import init_session_state, is_logged_in, login

logger = logging.getLogger(__name__)


def main():
    st.set_page_config(
        page_title="Klinik Gigi",
        page_icon="🦷",
        layout="wide",
        initial_sidebar_state="collapsed",
    )
    init_session_state()

    if is_logged_in():
        st.switch_page("pages/dashboard.py")

    hide_sidebar_completely()
    backend = get_backend()
    brand = backend.get_brand_settings()

    if brand.logo_path:
        st.image(brand.logo_path, width=96)
    st.title(brand.title)
    if brand.subtitle:
        st.caption(brand.subtitle)
    st.write("Masukkan password admin untuk melanjutkan.")

    with st.form("login_form"):
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Masuk")

    if submitted:
        try:
            ok = backend.verify_admin_password(password)
        except ClinicError as e:
            logger.error("Login check failed: %s", e)
            st.error("Gagal memeriksa password. Coba lagi.")
            return

        if ok:
            login()
            st.success("Login berhasil! Mengalihkan...")
            st.query_params.clear()
            st.switch_page("pages/dashboard.py")
        else:
            st.error("Password salah. Coba lagi.")


if __name__ == "__main__":
    main()
