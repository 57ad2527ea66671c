"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
"""
from typing import List, Optional, Tuple

from psycopg2.extras import Json

from groupbuy.core.database import get_db_connection_dict
from groupbuy.domain.product import Product, ProductCreate, ProductStatus, ProductUpdate

PRODUCT_COLUMNS = """
    id, name, description, base_price, discount_tiers,
    current_quantity, current_participants,
    status, image_urls, start_date, end_date,
    product_info_template_id, product_info_data,
    created_by, created_at, updated_at
"""

# Columns written as JSONB
JSON_FIELDS = {'discount_tiers', 'image_urls', 'product_info_data'}


def _to_db_value(field: str, value):
    if field == 'discount_tiers':
        return Json([tier.model_dump() for tier in value])
    if field in JSON_FIELDS:
        return Json(value)
    return value


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    """

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return Product(**row)

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            status: Filter by product status
            search: Search by name or description
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if status:
                conditions.append("status = %s")
                params.append(status.value)

            if search:
                conditions.append("(name ILIKE %s OR description ILIKE %s)")
                search_param = f"%{search}%"
                params.extend([search_param, search_param])

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [Product(**row) for row in cursor.fetchall()]

            return products, total

        finally:
            cursor.close()
            conn.close()

    def create(self, product: ProductCreate, created_by: str) -> Product:
        """
        Insert a new product with zeroed aggregates

        Returns:
            The stored product
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products (
                    name, description, base_price, discount_tiers,
                    current_quantity, current_participants, status,
                    image_urls, start_date, end_date,
                    product_info_template_id, product_info_data, created_by
                ) VALUES (
                    %s, %s, %s, %s, 0, 0, %s, %s, %s, %s, %s, %s, %s
                )
                RETURNING {PRODUCT_COLUMNS}
            """, (
                product.name,
                product.description,
                product.base_price,
                _to_db_value('discount_tiers', product.discount_tiers),
                ProductStatus.ACTIVE.value,
                Json(product.image_urls),
                product.start_date,
                product.end_date,
                product.product_info_template_id,
                Json(product.product_info_data),
                created_by,
            ))

            row = cursor.fetchone()
            conn.commit()
            return Product(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, update: ProductUpdate) -> Optional[Product]:
        """
        Update the fields set on the update schema

        Returns:
            Updated product, or None if not found
        """
        changes = update.model_dump(exclude_unset=True)
        if not changes:
            return self.find_by_id(product_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            assignments = [f"{field} = %s" for field in changes]
            params = [
                _to_db_value(field, getattr(update, field))
                for field in changes
            ]

            cursor.execute(f"""
                UPDATE products
                SET {", ".join(assignments)},
                    updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, params + [product_id])

            row = cursor.fetchone()
            conn.commit()
            return Product(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_status(self, product_id: int, status: ProductStatus) -> Optional[Product]:
        """Change the catalog status (active / completed / cancelled)"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET status = %s,
                    updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, (status.value, product_id))

            row = cursor.fetchone()
            conn.commit()
            return Product(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def adjust_aggregates(
        self,
        product_id: int,
        quantity_delta: int,
        participants_delta: int
    ) -> Optional[Product]:
        """
        Atomically move the aggregate counters

        A single UPDATE ... SET x = x + delta statement, so concurrent joins and
        cancellations never lose increments. Counters are clamped at zero.

        Returns:
            Product with the counters as written by this statement, or None if
            the product does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET current_quantity = GREATEST(current_quantity + %s, 0),
                    current_participants = GREATEST(current_participants + %s, 0),
                    updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, (quantity_delta, participants_delta, product_id))

            row = cursor.fetchone()
            conn.commit()
            return Product(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()


    def delete(self, product_id: int) -> bool:
        """
        Delete a product; its orders go with it (ON DELETE CASCADE)

        Returns:
            True if a row was deleted
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s", (product_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
