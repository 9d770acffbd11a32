import asyncio

from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.errors import (
    AuthError,
    DuplicateError,
    ErrorKind,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from src.shared.waitlist.service import WaitlistSubmissionService


async def no_sleep(delay):
    return None


class FakeInsert:
    """Insert transport that fails with the queued errors, then stores the entry."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = []
        self.stored = {}

    async def __call__(self, data):
        self.calls.append(dict(data))
        if self.errors:
            raise self.errors.pop(0)
        if data["email"] in self.stored:
            raise DuplicateError("Email already registered")
        row = dict(data, id=f"id-{len(self.stored) + 1}")
        self.stored[data["email"]] = row
        return row


def make_service(insert, category=WaitlistCategory.EMPLOYER):
    return WaitlistSubmissionService(insert, category=category, sleep=no_sleep)


def test_invalid_entry_never_reaches_insert(employer_payload):
    insert = FakeInsert()
    result = asyncio.run(make_service(insert).submit(employer_payload(email="not-an-email")))

    assert not result.success
    assert result.kind == ErrorKind.VALIDATION
    assert result.error == c.VALIDATION_ERROR
    assert result.errors == {"email": c.EMAIL_INVALID}
    assert insert.calls == []


def test_inserts_normalized_entry(employer_payload):
    insert = FakeInsert()
    result = asyncio.run(make_service(insert).submit(
        employer_payload(name="  Jane   Doe ", email="JANE@Example.com", early_career_hires_per_year="3")
    ))

    assert result.success
    assert result.data["id"] == "id-1"
    assert insert.calls == [{
        "name": "Jane Doe",
        "email": "jane@example.com",
        "industry": "Technology",
        "company_size": "11-50",
        "early_career_hires_per_year": 3,
    }]


def test_second_submission_with_same_email_is_a_duplicate(employer_payload):
    service = make_service(FakeInsert())

    first = asyncio.run(service.submit(employer_payload()))
    second = asyncio.run(service.submit(employer_payload(email="Jane@Example.com")))

    assert first.success
    assert not second.success
    assert second.kind == ErrorKind.DUPLICATE
    assert second.error == c.EMAIL_EXISTS


def test_network_errors_are_retried_then_succeed(employer_payload):
    insert = FakeInsert(NetworkError("reset"), NetworkError("reset"))
    result = asyncio.run(make_service(insert).submit(employer_payload()))

    assert result.success
    assert len(insert.calls) == 3


def test_network_errors_exhaust_retries(employer_payload):
    insert = FakeInsert(NetworkError("a"), NetworkError("b"), NetworkError("c"))
    result = asyncio.run(make_service(insert).submit(employer_payload()))

    assert not result.success
    assert result.kind == ErrorKind.NETWORK
    assert result.error == c.SUBMISSION_FAILED
    assert len(insert.calls) == 3


def test_duplicate_is_not_retried(employer_payload):
    insert = FakeInsert(DuplicateError("dup"))
    result = asyncio.run(make_service(insert).submit(employer_payload()))

    assert result.kind == ErrorKind.DUPLICATE
    assert len(insert.calls) == 1


def test_error_kinds_map_to_user_messages(employer_payload):
    cases = [
        (ValidationError("check", errors={"early_career_hires_per_year": "bad"}), c.INVALID_DATA),
        (AuthError("denied"), c.PERMISSION_DENIED),
        (RateLimitError("slow down", retry_after=42), c.RATE_LIMITED),
    ]
    for error, message in cases:
        result = asyncio.run(make_service(FakeInsert(error)).submit(employer_payload()))
        assert result.error == message
        assert result.kind == error.kind

    result = asyncio.run(make_service(FakeInsert(RateLimitError("slow", retry_after=42))).submit(employer_payload()))
    assert result.retry_after == 42

    result = asyncio.run(make_service(FakeInsert(ValidationError("check", errors={"name": "x"}))).submit(
        employer_payload()
    ))
    assert result.errors == {"name": "x"}


def test_displayable_validation_message_replaces_generic_one(employer_payload):
    error = ValidationError("Name is required", user_message="Name is required")
    result = asyncio.run(make_service(FakeInsert(error)).submit(employer_payload()))

    assert result.error == "Name is required"

    result = asyncio.run(make_service(FakeInsert(ValidationError("Check constraint violated"))).submit(
        employer_payload()
    ))
    assert result.error == c.INVALID_DATA


def test_unexpected_exception_is_contained(employer_payload):
    insert = FakeInsert(RuntimeError("driver exploded with jane@example.com"))
    result = asyncio.run(make_service(insert).submit(employer_payload()))

    assert not result.success
    assert result.kind == ErrorKind.UNKNOWN
    assert result.error == c.UNEXPECTED_ERROR
    assert len(insert.calls) == 1


def test_candidate_category_uses_candidate_rules(candidate_payload):
    insert = FakeInsert()
    service = make_service(insert, WaitlistCategory.CANDIDATE)

    result = asyncio.run(service.submit(candidate_payload(current_state="unknown")))

    assert result.errors == {"current_state": c.CURRENT_STATE_REQUIRED}
    assert insert.calls == []
