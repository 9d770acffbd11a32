"""
Admin authentication gate.

Signing in with the identity provider is not enough for back-office access: the
identity must also be on the ``admin_users`` allow-list. Identities that pass the
first check but fail the second are signed straight back out so no half-
authenticated session is left behind.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from src.shared.auth.auth import create_admin_session_token
from src.shared.auth.database import AdminUser
from src.shared.auth.identity import DatabaseIdentityProvider
from src.shared.security.rate_limit import FixedWindowRateLimiter
from src.shared.security.redaction import redact_email
from src.shared.waitlist.errors import AuthError, RateLimitError

INVALID_CREDENTIALS = "Invalid credentials"
NOT_AN_ADMIN = "Admin user not found. Please contact your administrator."
TOO_MANY_ATTEMPTS = "Too many authentication attempts. Please try again later."


@dataclass(frozen=True)
class AdminLoginResult:
    success: bool
    session_token: str
    admin_id: str
    email: str
    is_super_admin: bool


def find_admin(db: Session, email: str) -> Optional[AdminUser]:
    """Allow-list lookup; the authoritative admin check."""
    if not email:
        return None
    return db.query(AdminUser).filter(AdminUser.email == email.strip().lower()).first()


class AdminAuthGate:
    def __init__(self, db: Session, limiter: FixedWindowRateLimiter,
                 identity_provider: Optional[DatabaseIdentityProvider] = None):
        self.db = db
        self.limiter = limiter
        self.identity_provider = identity_provider or DatabaseIdentityProvider(db)

    def authenticate(self, email: str, password: str, client_key: str) -> AdminLoginResult:
        """
        Authenticate an admin and issue a session token.

        Raises:
            RateLimitError: more than the allowed attempts for ``client_key`` in the window
            AuthError: bad credentials, or the identity is not an admin
        """
        if not self.limiter.allow(client_key):
            logging.warning(f"Auth rate limit exceeded for IP: {client_key}")
            raise RateLimitError(TOO_MANY_ATTEMPTS, retry_after=self.limiter.retry_after(client_key))

        identity = self.identity_provider.sign_in(email, password)
        if identity is None:
            logging.warning(f"Failed admin login attempt from IP: {client_key}, email: {redact_email(email)}")
            raise AuthError(INVALID_CREDENTIALS)

        admin = find_admin(self.db, identity.email)
        if admin is None:
            self.identity_provider.sign_out(identity)
            logging.warning(f"Admin access denied for {redact_email(identity.email)}; identity session revoked")
            raise AuthError(NOT_AN_ADMIN)

        token = create_admin_session_token(admin.id, admin.email, admin.is_super_admin)
        logging.info(f"Successful admin login from IP: {client_key}, email: {redact_email(admin.email)}")
        return AdminLoginResult(
            success=True,
            session_token=token,
            admin_id=admin.id,
            email=admin.email,
            is_super_admin=bool(admin.is_super_admin),
        )
