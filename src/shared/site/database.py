"""Site-wide settings stored as a single row."""

from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import Session

from src.shared.auth.database import Base, generate_id


class SiteSettings(Base):
    __tablename__ = "site_settings"

    id = Column(String, primary_key=True, default=generate_id)
    coming_soon_mode = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


def get_site_settings(db: Session) -> SiteSettings:
    """Return the settings row, creating the default one on first use."""
    settings = db.query(SiteSettings).first()
    if settings is None:
        settings = SiteSettings(coming_soon_mode=False)
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings


def set_coming_soon_mode(db: Session, enabled: bool) -> SiteSettings:
    settings = get_site_settings(db)
    settings.coming_soon_mode = enabled
    db.commit()
    db.refresh(settings)
    return settings
