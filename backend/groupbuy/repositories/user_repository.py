"""
User Repository - Data Access Layer for Users
"""
from datetime import datetime
from typing import List, Optional, Tuple

from psycopg2.extras import Json

from groupbuy.core.database import get_db_connection_dict
from groupbuy.domain.user import ShippingAddress, User, UserRole, UserStatus

USER_COLUMNS = """
    id, email, display_name, provider, role,
    status, blocked_until, blocked_reason, blocked_by,
    phone_number, shipping_address, created_at, updated_at
"""


class UserRepository:
    """
    Repository for User data access
    """

    def find_by_id(self, user_id: str) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE id = %s
            """, (user_id,))

            row = cursor.fetchone()
            return User(**row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE LOWER(email) = LOWER(%s)
            """, (email,))

            row = cursor.fetchone()
            return User(**row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Find users with filters

        Args:
            status: Filter by account status
            search: Search by email or display name
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of users, total count)
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
                conditions.append("(email ILIKE %s OR display_name ILIKE %s)")
                search_param = f"%{search}%"
                params.extend([search_param, search_param])

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM users
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [User(**row) for row in cursor.fetchall()], total

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        user_id: str,
        email: str,
        display_name: str = "",
        provider: str = "email",
        role: UserRole = UserRole.USER,
        phone_number: Optional[str] = None
    ) -> User:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO users (
                    id, email, display_name, provider, role, status, phone_number
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s
                )
                RETURNING {USER_COLUMNS}
            """, (
                user_id,
                email.lower(),
                display_name,
                provider,
                role.value,
                UserStatus.ACTIVE.value,
                phone_number,
            ))

            row = cursor.fetchone()
            conn.commit()
            return User(**row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def _update(self, user_id: str, assignments: List[str], params: list) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE users
                SET {", ".join(assignments)},
                    updated_at = NOW()
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, params + [user_id])

            row = cursor.fetchone()
            conn.commit()
            return User(**row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def block(
        self,
        user_id: str,
        blocked_by: str,
        blocked_until: Optional[datetime] = None,
        reason: Optional[str] = None
    ) -> Optional[User]:
        """Block a user; blocked_until None means permanently"""
        return self._update(
            user_id,
            ["status = %s", "blocked_until = %s", "blocked_reason = %s", "blocked_by = %s"],
            [UserStatus.BLOCKED.value, blocked_until, reason, blocked_by],
        )

    def unblock(self, user_id: str) -> Optional[User]:
        return self._update(
            user_id,
            ["status = %s", "blocked_until = NULL", "blocked_reason = NULL", "blocked_by = NULL"],
            [UserStatus.ACTIVE.value],
        )

    def update_role(self, user_id: str, role: UserRole) -> Optional[User]:
        return self._update(user_id, ["role = %s"], [role.value])

    def update_shipping_address(self, user_id: str, address: ShippingAddress) -> Optional[User]:
        return self._update(user_id, ["shipping_address = %s"], [Json(address.model_dump())])

    def delete(self, user_id: str) -> bool:
        """Delete the user row; their orders are kept"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM users WHERE id = %s", (user_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
