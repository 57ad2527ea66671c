"""
User Administration Service
Blocking, roles and deletion of storefront users
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from groupbuy.core.exceptions import InvalidRequestError, NotFoundError, PermissionDeniedError
from groupbuy.domain.user import User, UserRole
from groupbuy.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserAdminService:

    def __init__(self, user_repository: Optional[UserRepository] = None):
        self.user_repository = user_repository or UserRepository()

    def get_user(self, user_id: str) -> User:
        user = self.user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def create_user(
        self,
        user_id: str,
        email: str,
        display_name: str = "",
        role: UserRole = UserRole.USER,
        phone_number: Optional[str] = None
    ) -> User:
        """Register a user record for an identity created elsewhere"""
        if self.user_repository.find_by_email(email) is not None:
            raise InvalidRequestError(f"A user with email {email} already exists")

        user = self.user_repository.create(
            user_id=user_id,
            email=email,
            display_name=display_name,
            role=role,
            phone_number=phone_number,
        )
        logger.info(f"User {user.id} created with role {role.value}")
        return user

    def block_user(
        self,
        user_id: str,
        admin_id: str,
        blocked_until: Optional[datetime] = None,
        reason: Optional[str] = None
    ) -> User:
        """
        Block a user permanently, or until blocked_until

        Raises:
            PermissionDeniedError: an admin tried to block themselves
            InvalidRequestError: blocked_until is already in the past
        """
        if user_id == admin_id:
            raise PermissionDeniedError("Administrators cannot block themselves")

        if blocked_until is not None:
            until = blocked_until if blocked_until.tzinfo else blocked_until.replace(tzinfo=timezone.utc)
            if until <= datetime.now(timezone.utc):
                raise InvalidRequestError("Block end must be in the future")

        user = self.user_repository.block(user_id, admin_id, blocked_until, reason)
        if user is None:
            raise NotFoundError("User", user_id)

        logger.info(f"User {user_id} blocked by {admin_id} until {blocked_until or 'further notice'}")
        return user

    def unblock_user(self, user_id: str) -> User:
        user = self.user_repository.unblock(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        logger.info(f"User {user_id} unblocked")
        return user

    def set_role(self, user_id: str, role: UserRole, admin_id: str) -> User:
        """Grant or revoke the admin role; admins cannot demote themselves"""
        if user_id == admin_id and role != UserRole.ADMIN:
            raise PermissionDeniedError("Administrators cannot remove their own admin role")

        user = self.user_repository.update_role(user_id, role)
        if user is None:
            raise NotFoundError("User", user_id)
        logger.info(f"User {user_id} role set to {role.value} by {admin_id}")
        return user

    def delete_user(self, user_id: str, admin_id: str) -> None:
        """
        Delete the user record

        Removing the identity at the identity provider is outside this
        backend; orders placed by the user are kept.
        """
        if user_id == admin_id:
            raise PermissionDeniedError("Administrators cannot delete themselves")

        if not self.user_repository.delete(user_id):
            raise NotFoundError("User", user_id)

        logger.info(f"User {user_id} deleted by {admin_id}")
