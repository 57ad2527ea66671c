"""
Catalog support tables: product info templates and site settings
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from groupbuy.core.database import Base


class ProductInfoTemplate(Base):
    __tablename__ = "product_info_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    fields = Column(JSONB, nullable=False, server_default="[]")  # [{label, type, order}]

    created_by = Column(String(128))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SiteSettings(Base):
    """Single row with id 'main'"""
    __tablename__ = "site_settings"

    id = Column(String(50), primary_key=True)
    site_name = Column(String(255), nullable=False)
    logo_url = Column(Text)

    updated_by = Column(String(128))
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
