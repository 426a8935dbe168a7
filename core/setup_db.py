# core/setup_db.py

import logging

import models  # noqa: F401  registers the tables on Base
from core.config import configure_logging
from core.database import Base, engine, get_db_context
from services.auth_service import ensure_admin_password

logger = logging.getLogger(__name__)


def init_db(bind=None, session_factory=None):
    """Create all tables and seed the admin password on a fresh database."""
    Base.metadata.create_all(bind=bind or engine)
    with get_db_context(session_factory) as db:
        ensure_admin_password(db)


def main():
    configure_logging()
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database initialized successfully.")


if __name__ == "__main__":
    main()
