"""
Product table
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from groupbuy.core.database import Base


class Product(Base):
    """
    Group purchase products

    discount_tiers is a JSONB array of {"min", "max", "discount"} objects.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("base_price > 0", name="ck_products_base_price_positive"),
        CheckConstraint("current_quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("current_participants >= 0", name="ck_products_participants_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    base_price = Column(Integer, nullable=False)
    discount_tiers = Column(JSONB, nullable=False, server_default="[]")

    # Aggregates
    current_quantity = Column(Integer, nullable=False, server_default="0")
    current_participants = Column(Integer, nullable=False, server_default="0")

    status = Column(String(20), nullable=False, server_default="active", index=True)
    image_urls = Column(JSONB, nullable=False, server_default="[]")

    # Purchase period
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))

    # Product info table
    product_info_template_id = Column(Integer, ForeignKey("product_info_templates.id", ondelete="SET NULL"))
    product_info_data = Column(JSONB, nullable=False, server_default="{}")

    # Metadata
    created_by = Column(String(128))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    orders = relationship("Order", back_populates="product")
