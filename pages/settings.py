import logging

import streamlit as st

from core.entities import Brand
from core.errors import PersistenceError, ValidationError
from core.helpers import get_backend, render_sidebar
from core.session_manager import require_login

logger = logging.getLogger(__name__)


def render_brand_form(backend, brand: Brand):
    st.subheader("Tampilan")
    with st.form("brand_form"):
        title = st.text_input("Nama klinik", value=brand.title)
        subtitle = st.text_input("Subjudul", value=brand.subtitle)
        logo = st.file_uploader("Logo (maks 5 MB)", type=["png", "jpg", "jpeg", "webp"])
        submitted = st.form_submit_button("Simpan tampilan")

    if submitted:
        try:
            backend.save_brand_settings(
                Brand(title=title, subtitle=subtitle, logo_path=brand.logo_path),
                logo.getvalue() if logo is not None else None,
            )
            st.toast("Tampilan berhasil disimpan", icon="✅")
            st.rerun()
        except ValidationError as e:
            st.error(str(e))
        except PersistenceError:
            logger.exception("Saving brand settings failed")
            st.error("Gagal menyimpan tampilan")


def render_password_form(backend):
    st.subheader("Ganti password")
    with st.form("password_form", clear_on_submit=True):
        current = st.text_input("Password saat ini", type="password")
        new = st.text_input("Password baru", type="password")
        confirm = st.text_input("Konfirmasi password baru", type="password")
        submitted = st.form_submit_button("Ganti password")

    if submitted:
        try:
            backend.change_admin_password(current, new, confirm)
            st.success("Password berhasil diubah")
        except ValidationError as e:
            st.error(str(e))
        except PersistenceError:
            logger.exception("Changing admin password failed")
            st.error("Gagal mengubah password")


def main():
    require_login()
    backend = get_backend()
    brand = backend.get_brand_settings()
    render_sidebar(brand)

    st.title("Pengaturan")
    render_brand_form(backend, brand)
    st.divider()
    render_password_form(backend)


if __name__ == "__main__":
    main()
