"""
Group Purchase Service
Join and cancel flows of a group purchase

Each flow is a short read-modify-write sequence without application locks:
the order write and the aggregate counter update are separate statements, and
repricing the remaining pending orders is best effort. A failed repricing is
logged and never undoes the join or cancellation that triggered it.
"""
import logging
from datetime import datetime
from typing import Optional

from groupbuy.core.exceptions import (
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    RecalculationError,
)
from groupbuy.domain.discount import calculate_final_price
from groupbuy.domain.order import Order, OrderCreate, OrderStatus
from groupbuy.domain.product import PeriodStatus, Product, ProductStatus
from groupbuy.domain.user import is_user_blocked
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.product_repository import ProductRepository
from groupbuy.repositories.user_repository import UserRepository
from groupbuy.services.order_recalculation_service import OrderRecalculationService

logger = logging.getLogger(__name__)


class GroupPurchaseService:
    """
    Service for buyer participation

    Handles:
    - Joining a product (eligibility checks, order creation, counters)
    - Cancelling and confirming orders
    - Triggering the pending-order repricing
    """

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        order_repository: Optional[OrderRepository] = None,
        user_repository: Optional[UserRepository] = None,
        recalculation_service: Optional[OrderRecalculationService] = None
    ):
        self.product_repository = product_repository or ProductRepository()
        self.order_repository = order_repository or OrderRepository()
        self.user_repository = user_repository or UserRepository()
        self.recalculation_service = recalculation_service or OrderRecalculationService(self.order_repository)

    def _get_product(self, product_id: int) -> Product:
        product = self.product_repository.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def _get_order(self, order_id: int) -> Order:
        order = self.order_repository.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def check_can_join(self, product: Product, now: Optional[datetime] = None) -> None:
        """
        Raise InvalidStateError when the product does not accept participants

        Closed products and products outside their purchase period are
        rejected; the message says which.
        """
        if product.status != ProductStatus.ACTIVE:
            raise InvalidStateError("This product is no longer open for participation")

        period_status = product.get_period_status(now)
        if period_status == PeriodStatus.UPCOMING:
            time_until = product.get_time_until_start(now)
            if time_until:
                raise InvalidStateError(f"The group purchase has not started yet (starts in {time_until})")
            raise InvalidStateError("The group purchase has not started yet")
        if period_status == PeriodStatus.ENDED:
            raise InvalidStateError("The group purchase has ended")

    def _reprice_best_effort(self, product: Product) -> None:
        try:
            self.recalculation_service.recalculate_product(product)
        except RecalculationError as e:
            logger.error(f"Pending order repricing failed for product {product.id}: {e}")

    def join(
        self,
        product_id: int,
        user_id: str,
        quantity: int = 1,
        now: Optional[datetime] = None
    ) -> Order:
        """
        Join a product's group purchase

        Steps:
        1. Check the product is open and the buyer may join
        2. Create a pending order priced at the aggregate including this order
        3. Move the product counters (atomic increment)
        4. Reprice every pending order with the returned aggregate

        Returns:
            The new order as stored after repricing
        """
        if quantity < 1:
            raise InvalidRequestError("Quantity must be at least 1")

        product = self._get_product(product_id)
        self.check_can_join(product, now)

        user = self.user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        if is_user_blocked(user, now):
            raise PermissionDeniedError("Blocked users cannot join group purchases")

        if self.order_repository.find_pending_for_user_and_product(user_id, product_id):
            raise InvalidStateError("You have already joined this group purchase")

        final_price = calculate_final_price(
            product.base_price,
            product.current_quantity + quantity,
            product.discount_tiers,
        )

        order = self.order_repository.create(OrderCreate(
            product_id=product_id,
            user_id=user_id,
            quantity=quantity,
            participant_count=product.current_participants + 1,
            final_price=final_price,
            total_price=final_price * quantity,
            status=OrderStatus.PENDING,
        ))

        try:
            updated_product = self.product_repository.adjust_aggregates(product_id, quantity, 1)
        except Exception as e:
            logger.error(f"Order {order.id} stored but product {product_id} counters were not incremented: {e}")
            raise

        logger.info(f"User {user_id} joined product {product_id} with {quantity} units (order {order.id})")

        if updated_product is not None:
            self._reprice_best_effort(updated_product)

        return self.order_repository.find_by_id(order.id) or order

    def cancel(self, order_id: int, user_id: str, is_admin: bool = False) -> Order:
        """
        Cancel a pending order

        The buyer may cancel their own orders; admins may cancel any. The
        product counters move down and the remaining pending orders are
        repriced best effort.
        """
        order = self._get_order(order_id)

        if order.user_id != user_id and not is_admin:
            raise PermissionDeniedError("You can only cancel your own orders")

        if not order.is_pending:
            raise InvalidStateError(f"Only pending orders can be cancelled (order is {order.status.value})")

        cancelled = self.order_repository.update_status(
            order_id,
            OrderStatus.CANCELLED,
            expected_status=OrderStatus.PENDING,
        )
        if cancelled is None:
            raise InvalidStateError("The order is no longer pending")

        try:
            updated_product = self.product_repository.adjust_aggregates(order.product_id, -order.quantity, -1)
        except Exception as e:
            logger.error(f"Order {order_id} cancelled but product {order.product_id} counters were not decremented: {e}")
            raise

        logger.info(f"Order {order_id} cancelled by {user_id}")

        if updated_product is not None:
            self._reprice_best_effort(updated_product)

        return cancelled

    def confirm(self, order_id: int) -> Order:
        """Confirm a pending order; its price stops following the aggregate"""
        order = self._get_order(order_id)

        if not order.is_pending:
            raise InvalidStateError(f"Only pending orders can be confirmed (order is {order.status.value})")

        confirmed = self.order_repository.update_status(
            order_id,
            OrderStatus.CONFIRMED,
            expected_status=OrderStatus.PENDING,
        )
        if confirmed is None:
            raise InvalidStateError("The order is no longer pending")

        logger.info(f"Order {order_id} confirmed at {confirmed.final_price} per unit")
        return confirmed
