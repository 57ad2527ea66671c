"""
Dashboard Service
Counters and recent activity for the admin overview
"""
import logging
from datetime import datetime
from typing import Optional

from groupbuy.domain.product import ProductStatus
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.product_repository import ProductRepository
from groupbuy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


class DashboardService:
    """
    Service for the admin dashboard

    Totals come from the repositories' COUNT queries; recent lists are the
    newest rows of each table.
    """

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        user_repository: Optional[UserRepository] = None,
        order_repository: Optional[OrderRepository] = None
    ):
        self.product_repository = product_repository or ProductRepository()
        self.user_repository = user_repository or UserRepository()
        self.order_repository = order_repository or OrderRepository()

    def get_stats(self, recent_limit: int = RECENT_LIMIT, now: Optional[datetime] = None) -> dict:
        recent_products, total_products = self.product_repository.find_all(limit=recent_limit)
        _, active_products = self.product_repository.find_all(status=ProductStatus.ACTIVE, limit=1)
        recent_users, total_users = self.user_repository.find_all(limit=recent_limit)
        recent_orders, total_orders = self.order_repository.find_all(limit=recent_limit)

        logger.debug(
            f"Dashboard: {total_products} products ({active_products} active), "
            f"{total_users} users, {total_orders} orders"
        )

        return {
            "total_users": total_users,
            "total_products": total_products,
            "active_products": active_products,
            "total_orders": total_orders,
            "recent_products": [product.to_dict(now) for product in recent_products],
            "recent_users": [user.to_dict(now) for user in recent_users],
            "recent_orders": [order.to_dict() for order in recent_orders],
        }
