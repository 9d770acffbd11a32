"""Waitlist tables and the repository the submission service inserts through."""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping

from sqlalchemy import Column, String, DateTime, Integer, CheckConstraint, func
from sqlalchemy.exc import IntegrityError, OperationalError, InterfaceError, DBAPIError
from sqlalchemy.orm import Session

# Import Base from auth database to use the same declarative base
from src.shared.auth.database import Base, generate_id
from src.shared.security.redaction import redact_email
from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.errors import (
    AuthError,
    DuplicateError,
    ErrorKind,
    NetworkError,
    UnknownError,
    ValidationError,
    WaitlistError,
)
from src.shared.waitlist.validation import sanitize_text


class EmployerWaitlistEntry(Base):
    """Employer sign-up; email is unique within the employer waitlist."""
    __tablename__ = "waitlist_employers"

    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    industry = Column(String, nullable=False)
    company_size = Column(String, nullable=False)
    early_career_hires_per_year = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(
            f"early_career_hires_per_year IS NULL OR "
            f"(early_career_hires_per_year >= 0 AND early_career_hires_per_year <= {c.HIRES_MAX_VALUE})",
            name="ck_waitlist_employers_hires_range",
        ),
    )


class CandidateWaitlistEntry(Base):
    """Candidate sign-up; email is unique within the candidate waitlist."""
    __tablename__ = "waitlist_candidates"

    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    current_state = Column(String, nullable=False)
    field_of_study = Column(String, nullable=False)
    field_description = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


MODELS = {
    WaitlistCategory.EMPLOYER: EmployerWaitlistEntry,
    WaitlistCategory.CANDIDATE: CandidateWaitlistEntry,
}

# Columns the back-office sees for recent entries
RECENT_COLUMNS = {
    WaitlistCategory.EMPLOYER: ("id", "name", "email", "industry", "company_size",
                                "early_career_hires_per_year", "created_at"),
    WaitlistCategory.CANDIDATE: ("id", "name", "email", "current_state", "field_of_study", "created_at"),
}

# Free text rendered by the back-office, escaped once on the way in
ESCAPED_COLUMNS = ("field_of_study", "field_description")

# sqlite extended result names, used when running against sqlite locally
_SQLITE_CODES = {
    "SQLITE_CONSTRAINT_UNIQUE": c.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": c.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_CHECK": c.CHECK_VIOLATION,
}


def database_error_code(exc: DBAPIError) -> str:
    """SQLSTATE of the driver error behind ``exc`` (psycopg2, psycopg 3 or sqlite)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname is None and orig is not None:
        # sqlite3 before Python 3.11 only reports the constraint in its message
        message = str(orig)
        if message.startswith("UNIQUE constraint failed"):
            errorname = "SQLITE_CONSTRAINT_UNIQUE"
        elif message.startswith("CHECK constraint failed"):
            errorname = "SQLITE_CONSTRAINT_CHECK"
    return _SQLITE_CODES.get(errorname, "")


def classify_database_error(exc: Exception) -> WaitlistError:
    """Translate a SQLAlchemy exception into the tagged error the service understands."""
    if isinstance(exc, (OperationalError, InterfaceError)) or getattr(exc, "connection_invalidated", False):
        return NetworkError("Database connection failed")

    if isinstance(exc, DBAPIError):
        code = database_error_code(exc)
        if code == c.UNIQUE_VIOLATION:
            return DuplicateError("Email already registered")
        if code == c.CHECK_VIOLATION:
            return ValidationError("Check constraint violated")
        if code == c.INSUFFICIENT_PRIVILEGE:
            return AuthError("Permission denied")
        if isinstance(exc, IntegrityError):
            return ValidationError("Integrity constraint violated")

    return UnknownError(type(exc).__name__)


def serialize_entry(entry: Any, columns) -> Dict[str, Any]:
    data = {}
    for column in columns:
        value = getattr(entry, column)
        data[column] = value.isoformat() if isinstance(value, datetime) else value
    return data


class WaitlistRepository:
    """Database access for both waitlist categories."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, category: WaitlistCategory, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a normalized entry and return it as a dict.

        Raises:
            DuplicateError: email already present in this category
            ValidationError: a CHECK or other integrity constraint failed
            AuthError: the database role may not write the table
            NetworkError: the connection dropped; safe to retry
            UnknownError: anything else the driver reported
        """
        category = WaitlistCategory(category)
        model = MODELS[category]
        values = dict(data)
        for column in ESCAPED_COLUMNS:
            if values.get(column):
                values[column] = sanitize_text(values[column])
        entry = model(**values)
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except DBAPIError as e:
            self.db.rollback()
            error = classify_database_error(e)
            if error.kind != ErrorKind.DUPLICATE:
                logging.error(
                    f"Waitlist insert failed for {category.value} "
                    f"({redact_email(data.get('email'))}): {error.kind.value}"
                )
            raise error from e

        logging.info(f"Waitlist entry {entry.id} created in {category.value} waitlist")
        return serialize_entry(entry, [col.name for col in model.__table__.columns])

    def recent(self, category: WaitlistCategory, limit: int) -> List[Dict[str, Any]]:
        category = WaitlistCategory(category)
        model = MODELS[category]
        rows = (
            self.db.query(model)
            .order_by(model.created_at.desc())
            .limit(limit)
            .all()
        )
        return [serialize_entry(row, RECENT_COLUMNS[category]) for row in rows]

    def count(self, category: WaitlistCategory, since: datetime = None) -> int:
        model = MODELS[WaitlistCategory(category)]
        query = self.db.query(func.count(model.id))
        if since is not None:
            query = query.filter(model.created_at >= since)
        return query.scalar() or 0

    def analytics(self, now: datetime = None) -> Dict[str, int]:
        """Totals and 30-day sign-up counts per category."""
        now = now or datetime.utcnow()
        month_ago = now - timedelta(days=30)
        return {
            "total_candidates": self.count(WaitlistCategory.CANDIDATE),
            "total_employers": self.count(WaitlistCategory.EMPLOYER),
            "new_candidates_last_30d": self.count(WaitlistCategory.CANDIDATE, since=month_ago),
            "new_employers_last_30d": self.count(WaitlistCategory.EMPLOYER, since=month_ago),
        }

    def delete(self, category: WaitlistCategory, entry_id: str) -> bool:
        """Delete one entry; returns False if it did not exist."""
        model = MODELS[WaitlistCategory(category)]
        deleted = self.db.query(model).filter(model.id == entry_id).delete()
        self.db.commit()
        if deleted:
            logging.info(f"Waitlist entry {entry_id} deleted from {WaitlistCategory(category).value} waitlist")
        return bool(deleted)
