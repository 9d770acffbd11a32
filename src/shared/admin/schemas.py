"""Pydantic schemas for admin API requests and responses."""

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, List


class AdminLoginRequest(BaseModel):
    """Admin login request schema."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class AdminProfile(BaseModel):
    id: str
    email: str
    isSuperAdmin: bool


class AdminLoginResponse(BaseModel):
    """Admin login response schema."""
    success: bool
    message: str
    token: str
    admin: AdminProfile


class WaitlistAnalytics(BaseModel):
    total_candidates: int
    total_employers: int
    new_candidates_last_30d: int
    new_employers_last_30d: int


class SiteSettingsPayload(BaseModel):
    coming_soon_mode: bool


class RecentEntries(BaseModel):
    candidates: List[Dict[str, Any]]
    employers: List[Dict[str, Any]]


class AdminWaitlistData(BaseModel):
    analytics: WaitlistAnalytics
    siteSettings: SiteSettingsPayload
    recentEntries: RecentEntries


class AdminWaitlistDataResponse(BaseModel):
    success: bool
    data: AdminWaitlistData
