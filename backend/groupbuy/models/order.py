"""
Order table
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from groupbuy.core.database import Base


class Order(Base):
    """
    One buyer's participation in a product's group purchase
    """
    __tablename__ = "orders"
    __table_args__ = (
        # Recalculation reads pending orders of one product
        Index("ix_orders_product_status", "product_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(128), nullable=False, index=True)  # no FK: orders outlive deleted users

    quantity = Column(Integer, nullable=False, server_default="1")
    participant_count = Column(Integer, nullable=False, server_default="0")

    # Prices (whole currency units)
    final_price = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, server_default="pending")

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship("Product", back_populates="orders")
