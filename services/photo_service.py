"""
Patient photo storage.

Blobs are written under ``<upload_dir>/patient-photos/<patient_id>/`` and a
row in ``patient_photos`` records the public URL and the storage path.
"""

import io
import logging
import os
from typing import Optional

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from core import entities
from core.config import MAX_UPLOAD_BYTES, PHOTO_BASE_URL
from core.entities import new_id
from core.errors import PersistenceError, PhotoTooLargeError, ValidationError
from models.patient import PatientPhoto

logger = logging.getLogger(__name__)

PHOTO_BUCKET = "patient-photos"

_FORMAT_EXTENSIONS = {"JPEG": "jpeg", "PNG": "png", "WEBP": "webp", "GIF": "gif"}


def photo_to_entity(row: PatientPhoto) -> entities.Photo:
    return entities.Photo(id=row.id, url=row.photo_url, storage_path=row.storage_path)


def check_upload_size(data: bytes, limit: int = MAX_UPLOAD_BYTES) -> None:
    """Raise PhotoTooLargeError before anything is read or stored."""
    if len(data) > limit:
        raise PhotoTooLargeError(len(data), limit)


def detect_image_extension(data: bytes) -> str:
    """Return a file extension for image bytes, or raise ValidationError."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("File yang dipilih bukan gambar") from e
    return _FORMAT_EXTENSIONS.get(fmt, "jpg")


def storage_path_for(patient_id: str, photo_id: str, ext: str) -> str:
    return f"{PHOTO_BUCKET}/{patient_id}/{photo_id}.{ext}"


def public_url_for(storage_path: str, upload_dir: str) -> str:
    if PHOTO_BASE_URL:
        return f"{PHOTO_BASE_URL.rstrip('/')}/{storage_path}"
    return os.path.join(upload_dir, storage_path)


def plan_photo(patient_id: str, data: bytes, upload_dir: str, photo_id: Optional[str] = None) -> entities.Photo:
    """Validate an upload and decide its id, path and URL without touching storage."""
    check_upload_size(data)
    ext = detect_image_extension(data)
    photo_id = photo_id or new_id("ph")
    path = storage_path_for(patient_id, photo_id, ext)
    return entities.Photo(id=photo_id, url=public_url_for(path, upload_dir), storage_path=path)


def write_blob(storage_path: str, data: bytes, upload_dir: str) -> str:
    full_path = os.path.join(upload_dir, storage_path)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    try:
        with open(full_path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise PersistenceError(f"Gagal menyimpan foto: {e}") from e
    return full_path


def remove_blob(storage_path: Optional[str], upload_dir: str) -> bool:
    """Best-effort blob removal; a missing file is not an error."""
    if not storage_path:
        return False
    full_path = os.path.join(upload_dir, storage_path)
    try:
        os.remove(full_path)
        return True
    except FileNotFoundError:
        return False
    except OSError:
        logger.warning("Could not remove photo blob %s", full_path, exc_info=True)
        return False


# ------------------------------------------
# Upload: size guard, blob, then row
# ------------------------------------------
def upload_photo(
    db: Session,
    patient_id: str,
    data: bytes,
    upload_dir: str,
    photo: Optional[entities.Photo] = None,
) -> entities.Photo:
    if photo is None:
        photo = plan_photo(patient_id, data, upload_dir)
    else:
        check_upload_size(data)

    write_blob(photo.storage_path, data, upload_dir)

    row = PatientPhoto(
        id=photo.id,
        patient_id=patient_id,
        storage_path=photo.storage_path,
        photo_url=photo.url,
    )
    db.add(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        remove_blob(photo.storage_path, upload_dir)
        raise
    return photo


def delete_photo(db: Session, photo: entities.Photo, upload_dir: str) -> None:
    remove_blob(photo.storage_path, upload_dir)
    db.query(PatientPhoto).filter(PatientPhoto.id == photo.id).delete()
    db.commit()
