"""Admin routes: login, waitlist analytics, entry management and site settings."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from src.shared import config
from src.shared.admin.auth import AdminAuthGate
from src.shared.admin.dependencies import check_admin_data_rate_limit, require_admin_session
from src.shared.admin.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminProfile,
    AdminWaitlistDataResponse,
    SiteSettingsPayload,
)
from src.shared.auth.auth import AdminSession
from src.shared.auth.database import get_db
from src.shared.cors import add_preflight_route
from src.shared.security.rate_limit import RateLimiters, get_client_ip, get_rate_limiters
from src.shared.site.database import get_site_settings, set_coming_soon_mode
from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.database import WaitlistRepository
from src.shared.waitlist.errors import AuthError, RateLimitError

router = APIRouter(prefix="/api/admin", tags=["admin"])

add_preflight_route(router, "/auth", "POST")
add_preflight_route(router, "/waitlist-data", "GET")
add_preflight_route(router, "/waitlist/{category}/{entry_id}", "DELETE")
add_preflight_route(router, "/site-settings", "PUT")


@router.post("/auth", response_model=AdminLoginResponse, status_code=status.HTTP_200_OK)
async def admin_login(
    request: Request,
    login_data: AdminLoginRequest,
    db: Session = Depends(get_db),
    limiters: RateLimiters = Depends(get_rate_limiters)
):
    """
    Exchange admin credentials for a 24h session token.

    Limited to 5 attempts per 15 minutes per IP address.
    """
    client_ip = get_client_ip(request)
    gate = AdminAuthGate(db, limiters.admin_login)

    try:
        result = gate.authenticate(login_data.email, login_data.password, client_ip)
    except RateLimitError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": e.message, "retryAfter": e.retry_after},
            headers={"Retry-After": str(e.retry_after)},
        )
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

    return AdminLoginResponse(
        success=True,
        message="Authentication successful",
        token=result.session_token,
        admin=AdminProfile(id=result.admin_id, email=result.email, isSuperAdmin=result.is_super_admin),
    )


@router.get(
    "/waitlist-data",
    response_model=AdminWaitlistDataResponse,
    dependencies=[Depends(check_admin_data_rate_limit)],
)
async def get_waitlist_data(
    request: Request,
    limit: int = Query(config.ADMIN_RECENT_ENTRIES_LIMIT, ge=1, le=200),
    admin: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db)
):
    """Aggregated counts plus the most recent entries of each waitlist."""
    repository = WaitlistRepository(db)
    settings = get_site_settings(db)

    logging.info(f"Admin data access successful from IP: {get_client_ip(request)}, admin: {admin.admin_id}")

    return {
        "success": True,
        "data": {
            "analytics": repository.analytics(),
            "siteSettings": {"coming_soon_mode": settings.coming_soon_mode},
            "recentEntries": {
                "candidates": repository.recent(WaitlistCategory.CANDIDATE, limit),
                "employers": repository.recent(WaitlistCategory.EMPLOYER, limit),
            },
        },
    }


@router.delete(
    "/waitlist/{category}/{entry_id}",
    dependencies=[Depends(check_admin_data_rate_limit)],
)
async def delete_waitlist_entry(
    category: WaitlistCategory,
    entry_id: str,
    admin: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db)
):
    """Remove a single waitlist entry."""
    if not WaitlistRepository(db).delete(category, entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {category.value} waitlist entry with id '{entry_id}'"
        )
    logging.info(f"Admin {admin.admin_id} deleted {category.value} waitlist entry {entry_id}")
    return {"success": True, "id": entry_id}


@router.put(
    "/site-settings",
    response_model=SiteSettingsPayload,
    dependencies=[Depends(check_admin_data_rate_limit)],
)
async def update_site_settings(
    payload: SiteSettingsPayload,
    admin: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db)
):
    """Toggle the landing page's coming-soon mode."""
    settings = set_coming_soon_mode(db, payload.coming_soon_mode)
    logging.info(f"Admin {admin.admin_id} set coming_soon_mode={settings.coming_soon_mode}")
    return SiteSettingsPayload(coming_soon_mode=settings.coming_soon_mode)
