import os
import logging

from dotenv import load_dotenv

# Load .env so DATABASE_URL etc. are available even when running via Streamlit
load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(DATA_DIR, 'clinic.db')}")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(DATA_DIR, "uploads"))

# Prefix for photo URLs; empty means the storage path itself is served
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "")

ADMIN_DEFAULT_PASSWORD = os.getenv("ADMIN_DEFAULT_PASSWORD", "admin123")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MAX_UPLOAD_MB = 5
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

CLINIC_TITLE = "Klinik Gigi"
CLINIC_SUBTITLE = "Manajemen Pasien"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the Streamlit process."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
