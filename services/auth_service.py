import logging
from typing import Optional

from sqlalchemy.orm import Session

from core import entities
from core.auth import hash_password, verify_password
from core.config import ADMIN_DEFAULT_PASSWORD, CLINIC_SUBTITLE, CLINIC_TITLE
from core.errors import ValidationError
from models.settings import AdminAuth, BrandSettings

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def verify_admin_password(db: Session, password: str) -> bool:
    """Compare a plaintext password against the single stored bcrypt hash."""
    row = db.query(AdminAuth).order_by(AdminAuth.id).first()
    if not row:
        return False
    return verify_password(password or "", row.password_hash)


def set_admin_password(db: Session, password: str) -> None:
    """Hash and store the admin password, creating the row on first use."""
    if not password:
        raise ValidationError("Password tidak boleh kosong")
    row = db.query(AdminAuth).order_by(AdminAuth.id).first()
    if row:
        row.password_hash = hash_password(password)
    else:
        db.add(AdminAuth(password_hash=hash_password(password)))
    db.commit()


def validate_password_change(current: str, new: str, confirm: str) -> None:
    if not current:
        raise ValidationError("Masukkan password saat ini")
    if len(new or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password baru minimal {MIN_PASSWORD_LENGTH} karakter")
    if new != confirm:
        raise ValidationError("Konfirmasi password tidak cocok")


def change_admin_password(db: Session, current: str, new: str, confirm: str) -> None:
    validate_password_change(current, new, confirm)
    if not verify_admin_password(db, current):
        raise ValidationError("Password saat ini salah")
    set_admin_password(db, new)


def ensure_admin_password(db: Session, default_password: str = ADMIN_DEFAULT_PASSWORD) -> bool:
    """Seed the admin row on a fresh database. Returns True when a row was created."""
    if db.query(AdminAuth).first():
        return False
    set_admin_password(db, default_password)
    logger.info("Default admin password created.")
    return True


# -----------------------------
# Brand settings (single row)
# -----------------------------
def get_brand_settings(db: Session) -> entities.Brand:
    row = db.query(BrandSettings).order_by(BrandSettings.id).first()
    if not row:
        return entities.Brand(title=CLINIC_TITLE, subtitle=CLINIC_SUBTITLE)
    return entities.Brand(title=row.title, subtitle=row.subtitle or "", logo_path=row.logo_path)


def save_brand_settings(db: Session, brand: entities.Brand) -> entities.Brand:
    title = (brand.title or "").strip()
    if not title:
        raise ValidationError("Nama klinik tidak boleh kosong")
    row: Optional[BrandSettings] = db.query(BrandSettings).order_by(BrandSettings.id).first()
    if row is None:
        row = BrandSettings()
        db.add(row)
    row.title = title
    row.subtitle = (brand.subtitle or "").strip()
    row.logo_path = brand.logo_path
    db.commit()
    return get_brand_settings(db)
