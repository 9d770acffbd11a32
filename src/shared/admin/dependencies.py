"""Admin authentication dependencies."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from src.shared.admin.auth import find_admin
from src.shared.auth.auth import AdminSession, verify_admin_session_token
from src.shared.auth.database import get_db
from src.shared.security.rate_limit import RateLimiters, enforce_rate_limit, get_client_ip, get_rate_limiters

# Use auto_error=False so a missing header reaches our own 401 instead of HTTPBearer's 403
security = HTTPBearer(auto_error=False)


def check_admin_data_rate_limit(request: Request, limiters: RateLimiters = Depends(get_rate_limiters)) -> None:
    """Per-IP limit on back-office reads and writes."""
    enforce_rate_limit(limiters.admin_data, get_client_ip(request), "Admin")


def require_admin_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> AdminSession:
    """
    Verify the bearer admin session token on every protected request.

    The token's signature, type and expiry are checked, then the allow-list is
    consulted again so removing an admin takes effect before the token expires.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = verify_admin_session_token(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired admin session",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if find_admin(db, session.email) is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required. Your account does not have admin privileges."
        )

    return session
