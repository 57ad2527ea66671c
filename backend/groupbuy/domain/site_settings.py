"""
Site Settings Domain Model

Single row ("main") holding storefront branding.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SITE_SETTINGS_ID = "main"


class SiteSettings(BaseModel):
    id: str = Field(SITE_SETTINGS_ID, description="Settings row ID")
    site_name: str = Field(..., description="Storefront name")
    logo_url: Optional[str] = Field(None, description="Logo image URL")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    updated_by: Optional[str] = Field(None, description="Admin user ID")

    model_config = ConfigDict(from_attributes=True)


class SiteSettingsUpdate(BaseModel):
    site_name: str = Field(..., min_length=1)
    logo_url: Optional[str] = None
