"""
Field and form validation for waitlist sign-ups.

Every rule is a pure function returning ``(normalized_value, error)``; ``error`` is
None when the value is acceptable. The same rules back the debounced client form,
the submission service and the request schemas, so there is one definition of
what a valid entry looks like.
"""

import html
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory

_WHITESPACE_RUN = re.compile(r"\s+")
_NAME_PATTERN = re.compile(r"^[A-Za-z \-'.]+$")
_EMAIL_PATTERN = re.compile(
    r"^[a-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
    r"(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)*"
    r"\.[a-z]{2,}$"
)
_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_PATTERN = re.compile(r"^[+-]?[0-9]*\.[0-9]+$")
_HIRES_MAX_DIGITS = len(str(c.HIRES_MAX_VALUE))

RuleResult = Tuple[Any, Optional[str]]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a whole form; never mutated after creation."""
    valid: bool
    data: Optional[Mapping[str, Any]] = None
    errors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


def collapse_whitespace(text: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def sanitize_text(text: str) -> str:
    """
    Sanitize free text to prevent XSS when it is rendered in the back-office.

    Returns:
        Trimmed, whitespace-collapsed and HTML-escaped text
    """
    if not text:
        return ""

    return html.escape(collapse_whitespace(text))


def validate_name(value: Any) -> RuleResult:
    if not isinstance(value, str) or not value.strip():
        return None, c.NAME_REQUIRED

    name = collapse_whitespace(value)

    if len(name) < c.NAME_MIN_LENGTH:
        return None, c.NAME_TOO_SHORT
    if len(name) > c.NAME_MAX_LENGTH:
        return None, c.NAME_TOO_LONG
    if not _NAME_PATTERN.match(name):
        return None, c.NAME_INVALID_CHARS

    return name, None


def validate_email(value: Any) -> RuleResult:
    """Normalize (trim, lowercase) and check an email address."""
    if not isinstance(value, str) or not value.strip():
        return None, c.EMAIL_REQUIRED

    email = value.strip().lower()

    if len(email) > c.EMAIL_MAX_LENGTH:
        return None, c.EMAIL_TOO_LONG

    # Shapes the pattern below would tolerate but mail servers reject
    if ".." in email or email.startswith(".") or email.endswith("."):
        return None, c.EMAIL_INVALID

    if not _EMAIL_PATTERN.match(email):
        return None, c.EMAIL_INVALID

    return email, None


def _choice(options: Tuple[str, ...], message: str) -> Callable[[Any], RuleResult]:
    def rule(value: Any) -> RuleResult:
        if isinstance(value, str) and value in options:
            return value, None
        return None, message
    return rule


validate_industry = _choice(c.INDUSTRY_OPTIONS, c.INDUSTRY_REQUIRED)
validate_company_size = _choice(c.COMPANY_SIZE_OPTIONS, c.COMPANY_SIZE_REQUIRED)
validate_current_state = _choice(c.CURRENT_STATE_OPTIONS, c.CURRENT_STATE_REQUIRED)


def validate_hires_per_year(value: Any) -> RuleResult:
    """
    Optional non-negative whole number up to HIRES_MAX_VALUE.

    Accepts ints, integral floats and numeric strings. Anything else is an error
    rather than a silent coercion.
    """
    if value is None:
        return None, None

    if isinstance(value, bool):
        return None, c.HIRES_INVALID_NUMBER

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None, c.HIRES_NOT_WHOLE
        number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None, None
        if _DECIMAL_PATTERN.match(text):
            return None, c.HIRES_NOT_WHOLE
        if not _INTEGER_PATTERN.match(text):
            return None, c.HIRES_INVALID_NUMBER
        if len(text.lstrip("+-").lstrip("0")) > _HIRES_MAX_DIGITS:
            return None, c.HIRES_NEGATIVE if text.startswith("-") else c.HIRES_TOO_LARGE
        number = int(text)
    else:
        return None, c.HIRES_INVALID_NUMBER

    if number < 0:
        return None, c.HIRES_NEGATIVE
    if number > c.HIRES_MAX_VALUE:
        return None, c.HIRES_TOO_LARGE

    return number, None


def validate_field_of_study(value: Any) -> RuleResult:
    if not isinstance(value, str) or not value.strip():
        return None, c.FIELD_OF_STUDY_REQUIRED

    text = collapse_whitespace(value)
    if len(text) < c.FIELD_OF_STUDY_MIN_LENGTH:
        return None, c.FIELD_OF_STUDY_TOO_SHORT
    if len(text) > c.FIELD_OF_STUDY_MAX_LENGTH:
        return None, c.FIELD_OF_STUDY_TOO_LONG

    return text, None


def validate_field_description(value: Any) -> RuleResult:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, None
    if not isinstance(value, str):
        return None, c.FIELD_DESCRIPTION_TOO_LONG

    text = collapse_whitespace(value)
    if len(text) > c.FIELD_DESCRIPTION_MAX_LENGTH:
        return None, c.FIELD_DESCRIPTION_TOO_LONG

    return text, None


FIELD_RULES: Dict[str, Callable[[Any], RuleResult]] = {
    "name": validate_name,
    "email": validate_email,
    "industry": validate_industry,
    "company_size": validate_company_size,
    "early_career_hires_per_year": validate_hires_per_year,
    "current_state": validate_current_state,
    "field_of_study": validate_field_of_study,
    "field_description": validate_field_description,
}

CATEGORY_FIELDS = {
    WaitlistCategory.EMPLOYER: c.EMPLOYER_FIELDS,
    WaitlistCategory.CANDIDATE: c.CANDIDATE_FIELDS,
}


def validate_field(field_name: str, raw_value: Any) -> Optional[str]:
    """Return the error message for a single field, or None if it is valid."""
    rule = FIELD_RULES.get(field_name)
    if rule is None:
        return c.UNKNOWN_FIELD
    _, error = rule(raw_value)
    return error


def validate_form(raw_record: Mapping[str, Any],
                  category: WaitlistCategory = WaitlistCategory.EMPLOYER) -> ValidationResult:
    """
    Validate every field of a category against a snapshot of ``raw_record``.

    Collects one error per invalid field instead of stopping at the first one.
    On success ``data`` holds the normalized record ready for insertion.
    """
    category = WaitlistCategory(category)
    snapshot = dict(raw_record or {})
    data: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    for field_name in CATEGORY_FIELDS[category]:
        value, error = FIELD_RULES[field_name](snapshot.get(field_name))
        if error:
            errors[field_name] = error
        else:
            data[field_name] = value

    if errors:
        return ValidationResult(valid=False, errors=MappingProxyType(errors))
    return ValidationResult(valid=True, data=MappingProxyType(data))
