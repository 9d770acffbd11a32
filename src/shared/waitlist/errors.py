"""Tagged error types shared by the submission pipeline, its transports and the admin gate.

Every failure that crosses a layer boundary is one of the subclasses below, so callers
dispatch on ``error.kind`` (or ``isinstance``) instead of inspecting messages.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    UNKNOWN = "unknown"


class WaitlistError(Exception):
    """Base class; ``kind`` is fixed per subclass."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(WaitlistError):
    """Input rejected by field rules or by a backend CHECK constraint."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "", errors: Optional[Dict[str, str]] = None,
                 status_code: Optional[int] = None, user_message: Optional[str] = None):
        super().__init__(message, status_code)
        self.errors = dict(errors or {})
        # Set only when ``message`` came from the API and is safe to display
        self.user_message = user_message


class DuplicateError(WaitlistError):
    kind = ErrorKind.DUPLICATE


class NetworkError(WaitlistError):
    """Transport failure or 5xx-class server error."""

    kind = ErrorKind.NETWORK


class RateLimitError(WaitlistError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str = "", retry_after: int = 0, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.retry_after = retry_after


class AuthError(WaitlistError):
    """Invalid credentials, missing admin rights or a backend permission error."""

    kind = ErrorKind.AUTH


class UnknownError(WaitlistError):
    kind = ErrorKind.UNKNOWN
