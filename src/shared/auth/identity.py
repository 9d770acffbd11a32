"""Identity provider backed by the users table."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from src.shared.auth.auth import hash_password, verify_password
from src.shared.auth.database import AuthSession, User
from src.shared.security.redaction import redact_email


@dataclass(frozen=True)
class Identity:
    """A signed-in identity and the provider session it holds."""
    user_id: str
    email: str
    session_id: str


class DatabaseIdentityProvider:
    """Email/password identities with bcrypt hashes and revocable sessions."""

    def __init__(self, db: Session):
        self.db = db

    def sign_in(self, email: str, password: str):
        """
        Verify credentials and open a provider session.

        Returns:
            Identity, or None if the email is unknown or the password is wrong
        """
        email = (email or "").strip().lower()
        user = self.db.query(User).filter(User.email == email).first()
        if user is None or not verify_password(password or "", user.password_hash):
            logging.info(f"Identity sign-in failed for {redact_email(email)}")
            return None

        session = AuthSession(user_id=user.id)
        user.last_login = datetime.utcnow()
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return Identity(user_id=user.id, email=user.email, session_id=session.id)

    def sign_out(self, identity: Identity) -> None:
        """Revoke the provider session opened by sign_in."""
        session = self.db.query(AuthSession).filter(AuthSession.id == identity.session_id).first()
        if session is not None and session.revoked_at is None:
            session.revoked_at = datetime.utcnow()
            self.db.commit()

    def create_user(self, email: str, password: str) -> User:
        """Register an identity (used by the admin bootstrap migration and tests)."""
        user = User(email=email.strip().lower(), password_hash=hash_password(password))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
