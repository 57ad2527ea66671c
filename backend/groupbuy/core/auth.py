"""
Authentication dependencies
Validates bearer JWTs issued by the identity provider and exposes the caller

Admin capability comes from the token's role claim. There is no email
allowlist anywhere in the backend.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from groupbuy.core.config import settings
from groupbuy.domain.user import UserRole


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT.

    Expected payload:
    {
        "sub": "user_id",
        "id": "user_id",
        "email": "buyer@example.com",
        "name": "Buyer",
        "role": "admin",
        "exp": 1234567890
    }
    """
    if not settings.AUTH_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="AUTH_SECRET is not configured"
        )

    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False}
        )
    except JWTError as e:
        error_msg = str(e).lower()
        if "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def _user_from_payload(payload: dict) -> Optional[TokenUser]:
    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        return None

    role = payload.get("role", UserRole.USER.value)
    if role not in {r.value for r in UserRole}:
        role = UserRole.USER.value

    return TokenUser(id=str(user_id), email=email, name=payload.get("name"), role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user = _user_from_payload(decode_token(credentials.credentials))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id or email",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenUser]:
    """Optional authentication - returns None if no valid token provided."""
    if not credentials:
        return None

    try:
        return _user_from_payload(decode_token(credentials.credentials))
    except HTTPException:
        return None


def require_role(required_role: UserRole):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/users/{user_id}")
        async def delete_user(
            user_id: str,
            user: TokenUser = Depends(require_role(UserRole.ADMIN))
        ):
            pass
    """
    # Role hierarchy: admin > user
    role_hierarchy = {
        UserRole.ADMIN: 2,
        UserRole.USER: 1,
    }

    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        user_level = role_hierarchy.get(user.role, 0)
        required_level = role_hierarchy.get(required_role, 0)

        if user_level < required_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {required_role.value}, your role: {user.role.value}"
            )

        return user

    return role_checker


require_admin = require_role(UserRole.ADMIN)
