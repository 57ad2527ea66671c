"""
Site Settings API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from groupbuy.api.deps import get_site_settings_repository
from groupbuy.core.auth import TokenUser, require_admin
from groupbuy.core.config import settings
from groupbuy.domain.site_settings import SiteSettings, SiteSettingsUpdate
from groupbuy.repositories.site_settings_repository import SiteSettingsRepository

router = APIRouter()


@router.get("/")
async def get_site_settings(repo: SiteSettingsRepository = Depends(get_site_settings_repository)):
    """Storefront branding; defaults when nothing was saved yet"""
    try:
        site_settings = repo.get()
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading site settings: {str(e)}")

    if site_settings is None:
        site_settings = SiteSettings(site_name=settings.DEFAULT_SITE_NAME)

    return {"status": "success", "data": site_settings.model_dump(mode="json")}


@router.put("/")
async def update_site_settings(
    payload: SiteSettingsUpdate,
    admin: TokenUser = Depends(require_admin),
    repo: SiteSettingsRepository = Depends(get_site_settings_repository)
):
    try:
        site_settings = repo.save(payload, updated_by=admin.id)
        return {"status": "success", "data": site_settings.model_dump(mode="json")}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error saving site settings: {str(e)}")
