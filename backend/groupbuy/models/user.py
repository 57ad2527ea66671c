"""
User table
"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from groupbuy.core.database import Base


class User(Base):
    """
    Storefront users; id is the identity provider's subject
    """
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=False, server_default="")
    provider = Column(String(20), nullable=False, server_default="email")
    role = Column(String(20), nullable=False, server_default="user")

    # Blocking
    status = Column(String(20), nullable=False, server_default="active")
    blocked_until = Column(DateTime(timezone=True))
    blocked_reason = Column(Text)
    blocked_by = Column(String(128))

    phone_number = Column(String(50))
    shipping_address = Column(JSONB)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
