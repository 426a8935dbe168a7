from sqlalchemy import Column, Integer, String

from core.database import Base


class AdminAuth(Base):
    """Single-row table holding the admin password hash."""

    __tablename__ = "admin_auth"

    id = Column(Integer, primary_key=True)
    password_hash = Column(String, nullable=False)


class BrandSettings(Base):
    __tablename__ = "brand_settings"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    subtitle = Column(String, nullable=False, default="")
    logo_path = Column(String, nullable=True)
