"""
Order Recalculation Service
Keeps pending order prices in line with the product's aggregate quantity

A buyer's discount depends on the final participation of the group purchase,
not on the moment they joined. Whenever a product's aggregate quantity moves
(join, cancellation, pricing edit) every pending order of the product is
repriced with the same unit price.
"""
import logging
from typing import List, Optional, Sequence

from groupbuy.core.exceptions import RecalculationError
from groupbuy.domain.discount import DiscountTier, calculate_final_price
from groupbuy.domain.order import Order, PriceUpdate
from groupbuy.domain.product import Product
from groupbuy.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


def stage_price_updates(pending_orders: Sequence[Order], new_final_price: int) -> List[PriceUpdate]:
    """
    Price updates for the orders whose stored prices differ from the new ones

    Args:
        pending_orders: Pending orders of one product
        new_final_price: Unit price shared by all of them
    """
    updates = []
    for order in pending_orders:
        new_total_price = new_final_price * order.quantity
        if order.final_price != new_final_price or order.total_price != new_total_price:
            updates.append(PriceUpdate(
                order_id=order.id,
                final_price=new_final_price,
                total_price=new_total_price,
            ))
    return updates


class OrderRecalculationService:
    """
    Service for repricing pending orders

    Handles:
    - Reading the product's pending orders
    - Computing the shared unit price once
    - Writing every changed order in a single transaction
    """

    def __init__(self, order_repository: Optional[OrderRepository] = None):
        self.order_repository = order_repository or OrderRepository()

    def recalculate(
        self,
        product_id: int,
        current_quantity: int,
        base_price: int,
        discount_tiers: Sequence[DiscountTier]
    ) -> int:
        """
        Reprice every pending order of a product

        Args:
            product_id: Product whose aggregate quantity changed
            current_quantity: New aggregate quantity
            base_price: Product base price
            discount_tiers: Product discount tiers

        Returns:
            Number of orders updated (0 when nothing changed, no write issued)

        Raises:
            RecalculationError: reading or writing orders failed; nothing was
                written in that case
        """
        try:
            pending_orders = self.order_repository.find_pending_by_product(product_id)
        except Exception as e:
            raise RecalculationError(product_id, e) from e

        if not pending_orders:
            return 0

        new_final_price = calculate_final_price(base_price, current_quantity, discount_tiers)
        updates = stage_price_updates(pending_orders, new_final_price)

        if not updates:
            return 0

        try:
            self.order_repository.apply_price_updates(updates)
        except Exception as e:
            raise RecalculationError(product_id, e) from e

        logger.info(
            f"Repriced {len(updates)} pending orders of product {product_id} "
            f"to {new_final_price} (aggregate quantity {current_quantity})"
        )
        return len(updates)

    def recalculate_product(self, product: Product) -> int:
        """Reprice using the product's own aggregate quantity and pricing"""
        return self.recalculate(
            product.id,
            product.current_quantity,
            product.base_price,
            product.discount_tiers,
        )
