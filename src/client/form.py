"""
Client-side waitlist form: field state, debounced validation and the submit path.

Each field owns at most one pending validation task. A new edit cancels it and
schedules a fresh one, so a burst of keystrokes costs a single validation of the
final value.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Optional

from src.client.api_client import WaitlistApiClient
from src.shared import config
from src.shared.security.rate_limit import FixedWindowRateLimiter
from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.errors import ErrorKind
from src.shared.waitlist.service import SubmissionResult, WaitlistSubmissionService
from src.shared.waitlist.validation import CATEGORY_FIELDS, validate_field, validate_form


class FormStage(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FormState:
    """Raw field values plus per-field errors; a missing key means no error."""
    values: Dict[str, Any]
    stage: FormStage = FormStage.IDLE
    errors: Dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None


def empty_values(category: WaitlistCategory) -> Dict[str, Any]:
    return {name: "" for name in CATEGORY_FIELDS[WaitlistCategory(category)]}


class WaitlistForm:
    def __init__(
        self,
        service: WaitlistSubmissionService,
        debounce_delay: float = c.DEBOUNCE_DELAY_SECONDS,
        validator: Callable[[str, Any], Optional[str]] = validate_field,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
    ):
        self.service = service
        self.category = service.category
        self.debounce_delay = debounce_delay
        self.validator = validator
        self.rate_limiter = rate_limiter
        self.state = FormState(values=empty_values(self.category))
        self._pending: Dict[str, asyncio.Task] = {}

    @property
    def rate_limit_key(self) -> str:
        return f"waitlist-submit:{self.category.value}"

    def update_field(self, field_name: str, value: Any) -> None:
        """
        Store ``value`` immediately and schedule its validation.

        Must be called from inside a running event loop. Blank values are stored
        and their error cleared, but are not validated until submit.
        """
        self.state.values[field_name] = value
        self.state.errors.pop(field_name, None)
        self._cancel(field_name)

        if value is None or (isinstance(value, str) and not value.strip()):
            return

        loop = asyncio.get_running_loop()
        self._pending[field_name] = loop.create_task(self._validate_later(field_name, value))

    async def _validate_later(self, field_name: str, value: Any) -> None:
        await asyncio.sleep(self.debounce_delay)
        self._pending.pop(field_name, None)
        error = self.validator(field_name, value)
        if error:
            self.state.errors[field_name] = error

    def _cancel(self, field_name: str) -> None:
        task = self._pending.pop(field_name, None)
        if task is not None and not task.done():
            task.cancel()

    def _cancel_all(self) -> None:
        for field_name in list(self._pending):
            self._cancel(field_name)

    @property
    def pending_fields(self):
        return sorted(self._pending)

    async def submit(self) -> Optional[SubmissionResult]:
        """
        Validate and submit the current values.

        Returns None when a submission is already in flight or the form has
        already succeeded. Failures leave the form idle with errors set.
        """
        if self.state.stage in (FormStage.LOADING, FormStage.SUCCESS):
            return None

        self._cancel_all()

        validation = validate_form(self.state.values, self.category)
        if not validation.valid:
            self.state.errors = dict(validation.errors)
            self.state.submit_error = c.VALIDATION_ERROR
            self.state.stage = FormStage.IDLE
            return SubmissionResult(
                success=False,
                error=c.VALIDATION_ERROR,
                kind=ErrorKind.VALIDATION,
                errors=dict(validation.errors),
            )

        if self.rate_limiter is not None and not self.rate_limiter.allow(self.rate_limit_key):
            retry_after = self.rate_limiter.retry_after(self.rate_limit_key)
            logging.info(f"Client-side rate limit hit for {self.category.value} waitlist form")
            self.state.submit_error = c.RATE_LIMITED
            return SubmissionResult(
                success=False,
                error=c.RATE_LIMITED,
                kind=ErrorKind.RATE_LIMIT,
                retry_after=retry_after,
            )

        state = self.state
        state.stage = FormStage.LOADING
        state.submit_error = None

        try:
            result = await self.service.submit(dict(state.values))
        finally:
            if state.stage == FormStage.LOADING:
                state.stage = FormStage.IDLE

        # A reset while in flight replaced the state; the result belongs to the old one
        if self.state is not state:
            return result

        if result.success:
            state.stage = FormStage.SUCCESS
            state.errors = {}
        else:
            state.stage = FormStage.IDLE
            state.errors = dict(result.errors)
            state.submit_error = result.error
        return result

    def reset(self) -> None:
        self._cancel_all()
        self.state = FormState(values=empty_values(self.category))

    def close(self) -> None:
        """Drop pending validations, e.g. when the form goes away."""
        self._cancel_all()


def create_form(
    client: WaitlistApiClient,
    category: WaitlistCategory = WaitlistCategory.EMPLOYER,
    **form_options,
) -> WaitlistForm:
    """Wire a form to the HTTP API through the shared submission service."""
    category = WaitlistCategory(category)
    service = WaitlistSubmissionService(partial(client.insert, category), category=category)
    form_options.setdefault(
        "rate_limiter",
        FixedWindowRateLimiter(config.WAITLIST_RATE_LIMIT_MAX, config.WAITLIST_RATE_LIMIT_WINDOW),
    )
    return WaitlistForm(service, **form_options)
