"""Waitlist routes: public employer and candidate sign-up endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from src.shared.auth.database import get_db
from src.shared.cors import add_preflight_route
from src.shared.security.rate_limit import RateLimiters, enforce_rate_limit, get_client_ip, get_rate_limiters
from src.shared.waitlist import constants as c
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.database import WaitlistRepository
from src.shared.waitlist.errors import ErrorKind
from src.shared.waitlist.schemas import CandidateWaitlistRequest, EmployerWaitlistRequest, WaitlistResponse
from src.shared.waitlist.service import SubmissionResult, WaitlistSubmissionService

router = APIRouter(prefix="/api/waitlist", tags=["waitlist"])

add_preflight_route(router, "/employers", "POST")
add_preflight_route(router, "/candidates", "POST")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.RATE_LIMIT: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.AUTH: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.NETWORK: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def check_waitlist_rate_limit(request: Request, limiters: RateLimiters = Depends(get_rate_limiters)) -> None:
    """Dependency enforcing the per-IP waitlist submission limit."""
    enforce_rate_limit(limiters.waitlist, get_client_ip(request), "Waitlist")


def build_submission_service(category: WaitlistCategory, db: Session) -> WaitlistSubmissionService:
    """Submission service whose transport is a direct database insert."""
    repository = WaitlistRepository(db)

    async def insert(data):
        return repository.insert(category, data)

    return WaitlistSubmissionService(insert, category)


def raise_for_failure(result: SubmissionResult) -> None:
    """Turn a failed submission into the matching HTTP error."""
    message = result.error
    if result.kind == ErrorKind.VALIDATION and result.errors:
        # Report the first offending field, in form order
        message = next(iter(result.errors.values()))
    if result.kind == ErrorKind.RATE_LIMIT:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": message, "retryAfter": result.retry_after},
        )
    raise HTTPException(status_code=STATUS_BY_KIND[result.kind], detail=message)


async def _submit(category: WaitlistCategory, payload: BaseModel, db: Session) -> WaitlistResponse:
    service = build_submission_service(category, db)
    result = await service.submit(payload.model_dump())
    if not result.success:
        raise_for_failure(result)
    logging.info(f"Waitlist submission accepted for {category.value} waitlist")
    return WaitlistResponse(success=True, message=c.SUBMISSION_SUCCESS, data=result.data)


@router.post(
    "/employers",
    response_model=WaitlistResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(check_waitlist_rate_limit)],
)
async def join_employer_waitlist(payload: EmployerWaitlistRequest, db: Session = Depends(get_db)):
    """
    Add an employer to the waitlist.

    - 400 for missing or malformed fields
    - 409 when the email is already on the employer waitlist
    - 429 with retryAfter when the per-IP limit is exceeded
    """
    return await _submit(WaitlistCategory.EMPLOYER, payload, db)


@router.post(
    "/candidates",
    response_model=WaitlistResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(check_waitlist_rate_limit)],
)
async def join_candidate_waitlist(payload: CandidateWaitlistRequest, db: Session = Depends(get_db)):
    """Add a candidate to the waitlist; same error contract as the employer endpoint."""
    return await _submit(WaitlistCategory.CANDIDATE, payload, db)
