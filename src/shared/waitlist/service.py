"""
Waitlist submission service.

The single place that decides between retrying and surfacing a failure. It
re-validates whatever it is given, hands the normalized entry to an ``insert``
transport through the retry orchestrator, and turns tagged errors into
user-facing messages. The server wires ``insert`` to the database repository;
the client SDK wires it to the HTTP API.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from src.shared.security.redaction import redact_email, redact_payload
from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.errors import ErrorKind, RateLimitError, ValidationError, WaitlistError
from src.shared.waitlist.retry import with_retry
from src.shared.waitlist.validation import validate_form

Insert = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

USER_MESSAGES = {
    ErrorKind.VALIDATION: c.INVALID_DATA,
    ErrorKind.DUPLICATE: c.EMAIL_EXISTS,
    ErrorKind.AUTH: c.PERMISSION_DENIED,
    ErrorKind.RATE_LIMIT: c.RATE_LIMITED,
    ErrorKind.NETWORK: c.SUBMISSION_FAILED,
    ErrorKind.UNKNOWN: c.SUBMISSION_FAILED,
}


@dataclass
class SubmissionResult:
    """Structured outcome of one submission; ``error`` is safe to show to users."""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    errors: Dict[str, str] = field(default_factory=dict)
    retry_after: int = 0


class WaitlistSubmissionService:
    def __init__(
        self,
        insert: Insert,
        category: WaitlistCategory = WaitlistCategory.EMPLOYER,
        max_attempts: int = c.MAX_RETRY_ATTEMPTS,
        base_delay: float = c.RETRY_DELAY_BASE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.insert = insert
        self.category = WaitlistCategory(category)
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep

    async def submit(self, entry: Mapping[str, Any]) -> SubmissionResult:
        # Callers validate too, but nothing crosses this boundary unchecked
        validation = validate_form(entry, self.category)
        if not validation.valid:
            logging.info(
                f"Rejected {self.category.value} waitlist submission, invalid fields: "
                f"{', '.join(sorted(validation.errors))}"
            )
            logging.debug(f"Rejected entry: {redact_payload(entry)}")
            return SubmissionResult(
                success=False,
                error=c.VALIDATION_ERROR,
                kind=ErrorKind.VALIDATION,
                errors=dict(validation.errors),
            )

        data = dict(validation.data)
        logging.info(f"Submitting {self.category.value} waitlist entry for {redact_email(data['email'])}")

        try:
            result = await with_retry(
                lambda: self.insert(data),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                sleep=self.sleep,
            )
        except WaitlistError as e:
            return self._failure(e)
        except Exception as e:
            # Driver messages can echo the submitted row, so only the type is logged
            logging.error(f"Unexpected {self.category.value} waitlist submission error: {type(e).__name__}")
            return SubmissionResult(success=False, error=c.UNEXPECTED_ERROR, kind=ErrorKind.UNKNOWN)

        logging.info(f"{self.category.value.capitalize()} waitlist submission successful")
        return SubmissionResult(success=True, data=result)

    def _failure(self, error: WaitlistError) -> SubmissionResult:
        if error.kind == ErrorKind.DUPLICATE:
            logging.info(f"Duplicate {self.category.value} waitlist submission")
        else:
            logging.warning(f"{self.category.value.capitalize()} waitlist submission failed: {error.kind.value}")

        result = SubmissionResult(success=False, error=USER_MESSAGES[error.kind], kind=error.kind)
        if isinstance(error, ValidationError):
            result.errors = dict(error.errors)
            if error.user_message and not error.errors:
                result.error = error.user_message
        elif isinstance(error, RateLimitError):
            result.retry_after = error.retry_after
        return result
