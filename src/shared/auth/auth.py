"""Authentication utilities: password hashing and admin session tokens."""

import bcrypt
from jose import JWTError, jwt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from src.shared import config

ALGORITHM = "HS256"
ADMIN_TOKEN_TYPE = "admin"


@dataclass(frozen=True)
class AdminSession:
    """Decoded admin session token."""
    admin_id: str
    email: str
    is_super_admin: bool
    expires_at: datetime


def _password_bytes(password: str) -> bytes:
    # Bcrypt has a 72-byte limit, so we truncate if necessary
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        # Drop a multi-byte character cut in half by the truncation
        password_bytes = password_bytes[:72].decode('utf-8', 'ignore').encode('utf-8')
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_admin_session_token(admin_id: str, email: str, is_super_admin: bool,
                               expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed admin session token (24 hours unless configured otherwise)."""
    if not config.ADMIN_JWT_SECRET:
        raise ValueError(
            "ADMIN_JWT_SECRET environment variable is required for token creation. "
            "Please set it to a secure random string."
        )
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=config.ADMIN_SESSION_HOURS))
    payload = {
        "sub": admin_id,
        "email": email,
        "isSuperAdmin": bool(is_super_admin),
        "type": ADMIN_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, config.ADMIN_JWT_SECRET, algorithm=ALGORITHM)


def verify_admin_session_token(token: str) -> Optional[AdminSession]:
    """
    Verify and decode an admin session token.

    Returns:
        AdminSession, or None if the token is malformed, expired, or not an admin token
    """
    if not config.ADMIN_JWT_SECRET:
        logging.error("ADMIN_JWT_SECRET is not set. Cannot verify token.")
        return None
    try:
        payload = jwt.decode(token, config.ADMIN_JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != ADMIN_TOKEN_TYPE or not payload.get("sub") or not payload.get("email"):
        return None

    return AdminSession(
        admin_id=payload["sub"],
        email=payload["email"],
        is_super_admin=bool(payload.get("isSuperAdmin")),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
