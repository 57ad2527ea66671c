"""
User Domain Models

Users are buyers and administrators. Administration rights are the ADMIN
role on the user record (mirrored in the token's role claim).
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class ShippingAddress(BaseModel):
    """Delivery address kept on the user profile"""
    recipient_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    detail_address: str = ""
    delivery_memo: Optional[str] = None


class User(BaseModel):
    """
    User domain model

    Fields:
        id: User ID (identity provider subject)
        email: Login email
        display_name: Name shown in the storefront
        provider: Identity provider (google, kakao, email)
        role: admin or user
        status: active or blocked
        blocked_until: End of a temporary block, None means permanent
        blocked_reason / blocked_by: Why and by which admin
        phone_number: Contact phone
        shipping_address: Default delivery address
        created_at / updated_at: Timestamps
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email")
    display_name: str = Field("", description="Display name")
    provider: str = Field("email", description="Identity provider")
    role: UserRole = Field(UserRole.USER, description="Role")
    status: UserStatus = Field(UserStatus.ACTIVE, description="Account status")
    blocked_until: Optional[datetime] = Field(None, description="Temporary block end")
    blocked_reason: Optional[str] = Field(None, description="Block reason")
    blocked_by: Optional[str] = Field(None, description="Admin who blocked the user")
    phone_number: Optional[str] = Field(None, description="Phone number")
    shipping_address: Optional[ShippingAddress] = Field(None, description="Default shipping address")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        data = self.model_dump(mode="json")
        data['is_blocked'] = is_user_blocked(self, now)
        data['block_status'] = get_block_status(self, now)
        return data


def is_user_blocked(user: User, now: Optional[datetime] = None) -> bool:
    """
    Whether the user is currently blocked

    A temporary block whose blocked_until has passed no longer counts.
    """
    if user.status != UserStatus.BLOCKED:
        return False

    if user.blocked_until:
        now = now or datetime.now(timezone.utc)
        blocked_until = user.blocked_until
        if blocked_until.tzinfo is None:
            blocked_until = blocked_until.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now <= blocked_until

    return True


def get_block_status(user: User, now: Optional[datetime] = None) -> str:
    """Short label for admin screens"""
    if not is_user_blocked(user, now):
        return "active"

    if user.blocked_until:
        return f"blocked until {user.blocked_until.isoformat()}"

    return "permanently blocked"
