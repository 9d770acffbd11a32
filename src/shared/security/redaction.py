"""Redaction helpers so log lines never carry raw emails, passwords or tokens."""

import re
from typing import Any, Mapping

REDACTED = "[REDACTED]"

# Keys whose values are dropped entirely
SENSITIVE_KEYS = re.compile(r"password|token|jwt|secret|key|auth|session", re.IGNORECASE)
# Keys whose values are personal data we keep a hint of
PII_KEYS = {"email", "name"}


def redact_email(email: Any) -> str:
    """Keep the first character and the domain: ``jane@x.com`` -> ``j***@x.com``."""
    if not isinstance(email, str) or "@" not in email:
        return REDACTED
    local, _, domain = email.strip().partition("@")
    if not local:
        return f"***@{domain}"
    return f"{local[0]}***@{domain}"


def redact_payload(payload: Mapping[str, Any]) -> dict:
    """Copy of ``payload`` safe to log."""
    redacted = {}
    for key, value in (payload or {}).items():
        if SENSITIVE_KEYS.search(key):
            redacted[key] = REDACTED
        elif key == "email":
            redacted[key] = redact_email(value)
        elif key in PII_KEYS:
            redacted[key] = REDACTED
        elif isinstance(value, Mapping):
            redacted[key] = redact_payload(value)
        else:
            redacted[key] = value
    return redacted
