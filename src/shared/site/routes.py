"""Public site settings read by the landing page."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.shared.admin.schemas import SiteSettingsPayload
from src.shared.auth.database import get_db
from src.shared.cors import add_preflight_route
from src.shared.site.database import get_site_settings

router = APIRouter(prefix="/api/site-settings", tags=["site"])

add_preflight_route(router, "", "GET")


@router.get("", response_model=SiteSettingsPayload)
async def read_site_settings(db: Session = Depends(get_db)):
    """Whether the landing page should show the coming-soon screen."""
    settings = get_site_settings(db)
    return SiteSettingsPayload(coming_soon_mode=settings.coming_soon_mode)
