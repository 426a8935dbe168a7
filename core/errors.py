class ClinicError(Exception):
    """Base class for errors raised by the clinic services."""


class ValidationError(ClinicError, ValueError):
    """A required field is missing or malformed; raised before any call is issued."""


class PhotoTooLargeError(ValidationError):
    """Upload payload exceeds the 5 MB limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Ukuran foto melebihi batas {limit // (1024 * 1024)} MB "
            f"({size / 1024 / 1024:.1f} MB). Harap pilih foto yang lebih kecil."
        )


class PersistenceError(ClinicError):
    """The database or blob storage rejected a write."""
