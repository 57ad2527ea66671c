"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from groupbuy.core.database import get_db_connection_dict
from groupbuy.domain.order import Order, OrderCreate, OrderStatus, PriceUpdate

logger = logging.getLogger(__name__)

ORDER_COLUMNS = """
    o.id, o.product_id, o.user_id, o.quantity, o.participant_count,
    o.final_price, o.total_price, o.status, o.created_at, o.updated_at,
    p.name as product_name,
    p.status as product_status
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    """

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with its product name

        Returns:
            Order or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE o.id = %s
            """, (order_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return Order(**row)

        finally:
            cursor.close()
            conn.close()

    def find_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        limit: Optional[int] = None
    ) -> List[Order]:
        """
        Orders of one buyer, newest first

        Args:
            user_id: Buyer
            status: Optional status filter
            limit: Maximum results to return (all when None)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = ["o.user_id = %s"]
            params = [user_id]

            if status:
                conditions.append("o.status = %s")
                params.append(status.value)

            where_clause = " AND ".join(conditions)

            limit_clause = ""
            if limit is not None:
                limit_clause = "LIMIT %s"
                params.append(limit)

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE {where_clause}
                ORDER BY o.created_at DESC
                {limit_clause}
            """, params)

            return [Order(**row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Orders across all buyers, newest first

        Returns:
            Tuple of (list of orders, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if status:
                conditions.append("o.status = %s")
                params.append(status.value)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders o
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE {where_clause}
                ORDER BY o.created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [Order(**row) for row in cursor.fetchall()], total

        finally:
            cursor.close()
            conn.close()

    def find_pending_by_product(self, product_id: int) -> List[Order]:
        """
        Every pending order of a product (input of the price recalculation)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE o.product_id = %s AND o.status = %s
                ORDER BY o.id
            """, (product_id, OrderStatus.PENDING.value))

            return [Order(**row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_pending_for_user_and_product(self, user_id: str, product_id: int) -> Optional[Order]:
        """The buyer's current participation in a product, if any"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN products p ON o.product_id = p.id
                WHERE o.user_id = %s AND o.product_id = %s AND o.status = %s
                ORDER BY o.created_at DESC
                LIMIT 1
            """, (user_id, product_id, OrderStatus.PENDING.value))

            row = cursor.fetchone()
            return Order(**row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, order: OrderCreate) -> Order:
        """
        Insert a new order

        Returns:
            The stored order
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO orders (
                    product_id, user_id, quantity, participant_count,
                    final_price, total_price, status
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s
                )
                RETURNING id, product_id, user_id, quantity, participant_count,
                          final_price, total_price, status, created_at, updated_at
            """, (
                order.product_id,
                order.user_id,
                order.quantity,
                order.participant_count,
                order.final_price,
                order.total_price,
                order.status.value,
            ))

            row = cursor.fetchone()
            conn.commit()
            return Order(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        expected_status: Optional[OrderStatus] = None
    ) -> Optional[Order]:
        """
        Change an order's status

        Args:
            order_id: Order to update
            status: New status
            expected_status: Only update when the order currently has this status

        Returns:
            Updated order, or None when no row matched
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = ["id = %s"]
            params = [status.value, order_id]

            if expected_status:
                conditions.append("status = %s")
                params.append(expected_status.value)

            where_clause = " AND ".join(conditions)

            cursor.execute(f"""
                UPDATE orders
                SET status = %s,
                    updated_at = NOW()
                WHERE {where_clause}
                RETURNING id, product_id, user_id, quantity, participant_count,
                          final_price, total_price, status, created_at, updated_at
            """, params)

            row = cursor.fetchone()
            conn.commit()
            return Order(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def apply_price_updates(self, updates: Sequence[PriceUpdate]) -> int:
        """
        Write new prices for several orders in ONE transaction

        Either every update is committed or none is. Orders that left the
        pending state in the meantime are not touched.

        Returns:
            Number of updates staged
        """
        if not updates:
            return 0

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            for update in updates:
                cursor.execute("""
                    UPDATE orders
                    SET final_price = %s,
                        total_price = %s,
                        updated_at = NOW()
                    WHERE id = %s AND status = %s
                """, (
                    update.final_price,
                    update.total_price,
                    update.order_id,
                    OrderStatus.PENDING.value,
                ))

            conn.commit()
            return len(updates)

        except Exception as e:
            conn.rollback()
            logger.error(f"Price batch of {len(updates)} orders rolled back: {e}")
            raise

        finally:
            cursor.close()
            conn.close()
