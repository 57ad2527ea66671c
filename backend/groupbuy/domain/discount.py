"""
Discount Domain - tiered group-buying prices

A product's unit price depends on how many units have joined the group
purchase. Each DiscountTier maps an inclusive quantity range to a fractional
discount (0.05 = 5%).

The pricing functions are pure: same inputs, same outputs, no I/O.
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from groupbuy.core.exceptions import InvalidDiscountTiersError


class DiscountTier(BaseModel):
    """
    Quantity range with its discount rate

    Fields:
        min: First quantity of the tier (inclusive)
        max: Last quantity of the tier (inclusive)
        discount: Fraction taken off the base price (0.05 = 5%)
    """

    # Bounds are checked by validate_discount_tiers on writes only, so rows
    # stored by older clients still load
    min: int = Field(..., description="Lower bound (inclusive)")
    max: int = Field(..., description="Upper bound (inclusive)")
    discount: float = Field(..., description="Discount rate (0.05 = 5%)")

    model_config = ConfigDict(from_attributes=True)

    def contains(self, quantity: int) -> bool:
        return self.min <= quantity <= self.max


def _sorted_tiers(discount_tiers: Sequence[DiscountTier]) -> List[DiscountTier]:
    # Stable sort keeps the input order for tiers sharing a min
    return sorted(discount_tiers, key=lambda tier: tier.min)


def calculate_discount_rate(total_quantity: int, discount_tiers: Sequence[DiscountTier]) -> float:
    """
    Discount rate for the current aggregate quantity

    Args:
        total_quantity: Units joined so far across the product's orders
        discount_tiers: Tiers of the product, any order

    Returns:
        Discount of the first tier (by ascending min) containing the quantity,
        or 0 when no tier contains it
    """
    for tier in _sorted_tiers(discount_tiers):
        if tier.contains(total_quantity):
            return tier.discount

    return 0


def calculate_final_price(base_price, total_quantity: int, discount_tiers: Sequence[DiscountTier]) -> int:
    """
    Unit price after the tier discount, truncated to a whole currency unit

    floor(base_price - base_price * rate), computed in float so the result
    matches prices already stored by existing clients.
    """
    discount_rate = calculate_discount_rate(total_quantity, discount_tiers)
    discount_amount = base_price * discount_rate
    return math.floor(base_price - discount_amount)


def get_participants_until_next_tier(total_quantity: int, discount_tiers: Sequence[DiscountTier]) -> Optional[int]:
    """
    Units still needed to reach the next tier

    Returns:
        next_tier.min - total_quantity, or None when the quantity is in the top
        tier or in no tier at all
    """
    sorted_tiers = _sorted_tiers(discount_tiers)

    for index, tier in enumerate(sorted_tiers):
        if tier.contains(total_quantity):
            if index < len(sorted_tiers) - 1:
                return sorted_tiers[index + 1].min - total_quantity
            return None

    return None


def get_max_discount_rate(discount_tiers: Sequence[DiscountTier]) -> float:
    """Discount of the tier reaching the highest quantity (0 without tiers)"""
    if not discount_tiers:
        return 0
    top_tier = sorted(discount_tiers, key=lambda tier: tier.max, reverse=True)[0]
    return top_tier.discount


def format_discount_rate(discount_rate: float) -> str:
    """0.05 -> '5%'; halves round up (0.125 -> '13%')"""
    percent = Decimal(discount_rate * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def validate_discount_tiers(discount_tiers: Sequence[DiscountTier]) -> List[DiscountTier]:
    """
    Write-time validation of a product's tiers

    The pricing functions tolerate gaps (a quantity in a gap gets no
    discount), so catalog writes reject them instead.

    Returns:
        The tiers sorted by min

    Raises:
        InvalidDiscountTiersError: no tiers, bad bounds, overlap or gap
    """
    if not discount_tiers:
        raise InvalidDiscountTiersError("At least one discount tier is required")

    for tier in discount_tiers:
        if tier.min < 1:
            raise InvalidDiscountTiersError(f"Tier min must be >= 1, got {tier.min}")
        if tier.max < tier.min:
            raise InvalidDiscountTiersError(f"Tier max ({tier.max}) must be >= min ({tier.min})")
        if not 0 <= tier.discount <= 1:
            raise InvalidDiscountTiersError(f"Tier discount must be between 0 and 1, got {tier.discount}")

    sorted_tiers = _sorted_tiers(discount_tiers)

    for previous, current in zip(sorted_tiers, sorted_tiers[1:]):
        if current.min <= previous.max:
            raise InvalidDiscountTiersError(
                f"Tiers {previous.min}-{previous.max} and {current.min}-{current.max} overlap"
            )
        if current.min != previous.max + 1:
            raise InvalidDiscountTiersError(
                f"Gap between tiers: no tier covers {previous.max + 1}-{current.min - 1}"
            )

    return sorted_tiers
