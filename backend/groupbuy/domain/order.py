"""
Order Domain Models

An order is one buyer's participation in a group purchase. While it is
pending its price follows the product's aggregate quantity; confirming or
cancelling it freezes the price.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Order(BaseModel):
    """
    Order domain model

    Fields:
        id: Order ID (primary key)
        product_id: Product joined
        user_id: Buyer
        quantity: Units bought
        participant_count: Participant number at join time
        final_price: Unit price at the last calculation
        total_price: final_price * quantity
        status: pending, confirmed or cancelled
        created_at / updated_at: Timestamps

        # From product (optional, from JOIN)
        product_name: Product name
        product_status: Product status
    """

    id: int = Field(..., description="Order ID")
    product_id: int = Field(..., description="Product ID")
    user_id: str = Field(..., description="Buyer user ID")
    quantity: int = Field(1, description="Units ordered", ge=1)
    participant_count: int = Field(0, description="Participant number at join time", ge=0)
    final_price: int = Field(..., description="Unit price after discount", ge=0)
    total_price: int = Field(..., description="final_price * quantity", ge=0)
    status: OrderStatus = Field(OrderStatus.PENDING, description="Order status")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    # From product (optional, from JOIN)
    product_name: Optional[str] = Field(None, description="Product name (from JOIN)")
    product_status: Optional[str] = Field(None, description="Product status (from JOIN)")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_pending(self) -> bool:
        """Price still follows the product's aggregate quantity"""
        return self.status == OrderStatus.PENDING

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['is_pending'] = self.is_pending
        return data


class PriceUpdate(BaseModel):
    """New price of one pending order, staged by the recalculation"""
    order_id: int
    final_price: int
    total_price: int


class OrderCreate(BaseModel):
    """Schema for creating a new order"""
    product_id: int
    user_id: str
    quantity: int = 1
    participant_count: int
    final_price: int
    total_price: int
    status: OrderStatus = OrderStatus.PENDING
