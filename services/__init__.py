from .persistence import PersistenceService
from .clinic_actions import ClinicActions, load_state

# Streamlit-facing helpers live in core.helpers; keep this package importable without it.

__all__ = ["PersistenceService", "ClinicActions", "load_state"]
