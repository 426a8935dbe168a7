from .database import get_db_context, engine, SessionLocal, Base

__all__ = [
    "get_db_context",
    "engine",
    "SessionLocal",
    "Base",
]
