"""
Product Domain Model

A product is one group purchase: a base price, its discount tiers, the live
aggregate counters moved by joins and cancellations, and an optional
purchase period.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from groupbuy.domain.discount import (
    DiscountTier,
    calculate_discount_rate,
    calculate_final_price,
    get_max_discount_rate,
    get_participants_until_next_tier,
)


class ProductStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PeriodStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with aware ones"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_remaining(start: datetime, end: datetime) -> str:
    """
    Human readable time between two instants

    "2d 3h" when at least a day remains, "3h 5m" when at least an hour,
    otherwise "5m".
    """
    total_seconds = int((end - start).total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class Product(BaseModel):
    """
    Product domain model - one group purchase in the catalog

    Fields:
        id: Product ID (primary key)
        name: Product name
        description: Product description
        base_price: Price before any tier discount
        discount_tiers: Quantity tiers and their discount

        # Aggregates (moved by order joins / cancellations)
        current_quantity: Units across non-cancelled orders
        current_participants: Number of non-cancelled orders

        # Catalog state
        status: active, completed or cancelled
        image_urls: Product images, first one is the cover
        start_date / end_date: Purchase period (both optional)
        product_info_template_id: Template used for the product info table
        product_info_data: Template field label -> value

        created_at / created_by / updated_at: Metadata
    """

    id: int = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Product description")
    base_price: int = Field(..., description="Base unit price", gt=0)
    discount_tiers: List[DiscountTier] = Field(default_factory=list, description="Discount tiers")

    current_quantity: int = Field(0, description="Aggregate units joined", ge=0)
    current_participants: int = Field(0, description="Aggregate participants", ge=0)

    status: ProductStatus = Field(ProductStatus.ACTIVE, description="Product status")
    image_urls: List[str] = Field(default_factory=list, description="Image URLs")
    start_date: Optional[datetime] = Field(None, description="Purchase period start")
    end_date: Optional[datetime] = Field(None, description="Purchase period end")

    product_info_template_id: Optional[int] = Field(None, description="Product info template ID")
    product_info_data: Dict[str, str] = Field(default_factory=dict, description="Product info values by label")

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    created_by: Optional[str] = Field(None, description="Creator user ID")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    # Pricing (live view over the aggregate quantity)
    @property
    def discount_rate(self) -> float:
        return calculate_discount_rate(self.current_quantity, self.discount_tiers)

    @property
    def final_price(self) -> int:
        return calculate_final_price(self.base_price, self.current_quantity, self.discount_tiers)

    @property
    def units_until_next_tier(self) -> Optional[int]:
        return get_participants_until_next_tier(self.current_quantity, self.discount_tiers)

    @property
    def max_discount_rate(self) -> float:
        return get_max_discount_rate(self.discount_tiers)

    @property
    def cover_image_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None

    # Purchase period
    def is_before_start(self, now: Optional[datetime] = None) -> bool:
        if not self.start_date:
            return False
        now = as_utc(now) or datetime.now(timezone.utc)
        return now < as_utc(self.start_date)

    def is_after_end(self, now: Optional[datetime] = None) -> bool:
        if not self.end_date:
            return False
        now = as_utc(now) or datetime.now(timezone.utc)
        return now > as_utc(self.end_date)

    def is_within_period(self, now: Optional[datetime] = None) -> bool:
        """Products without a period are always open"""
        return not self.is_before_start(now) and not self.is_after_end(now)

    def get_period_status(self, now: Optional[datetime] = None) -> PeriodStatus:
        if self.is_before_start(now):
            return PeriodStatus.UPCOMING
        if self.is_after_end(now):
            return PeriodStatus.ENDED
        return PeriodStatus.ACTIVE

    def get_time_until_start(self, now: Optional[datetime] = None) -> Optional[str]:
        if not self.start_date:
            return None
        now = as_utc(now) or datetime.now(timezone.utc)
        start = as_utc(self.start_date)
        if now >= start:
            return None
        return format_remaining(now, start)

    def get_time_until_end(self, now: Optional[datetime] = None) -> Optional[str]:
        if not self.end_date:
            return None
        now = as_utc(now) or datetime.now(timezone.utc)
        end = as_utc(self.end_date)
        if now >= end:
            return None
        return format_remaining(now, end)

    @property
    def is_open(self) -> bool:
        """Active in the catalog and inside the purchase period right now"""
        return self.status == ProductStatus.ACTIVE and self.is_within_period()

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        """
        Convert to dictionary with the live pricing summary

        Returns dict with all fields plus computed pricing and period values
        """
        data = self.model_dump(mode="json")

        data['discount_rate'] = self.discount_rate
        data['final_price'] = self.final_price
        data['units_until_next_tier'] = self.units_until_next_tier
        data['max_discount_rate'] = self.max_discount_rate
        data['cover_image_url'] = self.cover_image_url
        data['period_status'] = self.get_period_status(now).value
        data['time_until_start'] = self.get_time_until_start(now)
        data['time_until_end'] = self.get_time_until_end(now)

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str
    description: str
    base_price: int
    discount_tiers: List[DiscountTier]
    image_urls: List[str] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    product_info_template_id: Optional[int] = None
    product_info_data: Dict[str, str] = Field(default_factory=dict)


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[int] = None
    discount_tiers: Optional[List[DiscountTier]] = None
    image_urls: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    product_info_template_id: Optional[int] = None
    product_info_data: Optional[Dict[str, str]] = None
