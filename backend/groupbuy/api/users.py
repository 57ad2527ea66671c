"""
Users API Endpoints
Profile of the caller and user administration
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from groupbuy.api.deps import domain_http_error, get_order_repository, get_user_admin_service, get_user_repository
from groupbuy.core.auth import TokenUser, get_current_user, require_admin
from groupbuy.core.exceptions import GroupBuyError
from groupbuy.domain.user import ShippingAddress, UserRole, UserStatus
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.user_repository import UserRepository
from groupbuy.services.user_admin_service import UserAdminService

router = APIRouter()


# Request models
class UserCreateRequest(BaseModel):
    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    display_name: str = ""
    role: UserRole = UserRole.USER
    phone_number: Optional[str] = None


class BlockRequest(BaseModel):
    blocked_until: Optional[datetime] = None
    reason: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole


@router.get("/me")
async def get_me(
    user: TokenUser = Depends(get_current_user),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Profile of the caller"""
    try:
        return {"status": "success", "data": service.get_user(user.id).to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching profile: {str(e)}")


@router.put("/me/shipping-address")
async def update_my_shipping_address(
    payload: ShippingAddress,
    user: TokenUser = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository)
):
    """Save the caller's default shipping address"""
    try:
        updated = repo.update_shipping_address(user.id, payload)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error saving shipping address: {str(e)}")

    if updated is None:
        raise HTTPException(status_code=404, detail=f"User {user.id} not found")

    return {"status": "success", "data": updated.to_dict()}


@router.get("/")
async def get_users(
    status: Optional[UserStatus] = Query(None, description="Filter by account status"),
    search: Optional[str] = Query(None, description="Search by email or name"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: TokenUser = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository)
):
    """List users (admin)"""
    try:
        users, total = repo.find_all(status=status, search=search, limit=limit, offset=offset)
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(users),
            "data": [user.to_dict() for user in users]
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.post("/", status_code=201)
async def create_user(
    payload: UserCreateRequest,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Register a user record (admin)"""
    try:
        user = service.create_user(
            user_id=payload.id,
            email=payload.email,
            display_name=payload.display_name,
            role=payload.role,
            phone_number=payload.phone_number,
        )
        return {"status": "success", "data": user.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating user: {str(e)}")


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """One user (admin)"""
    try:
        return {"status": "success", "data": service.get_user(user_id).to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")


@router.get("/{user_id}/orders")
async def get_user_orders(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service),
    repo: OrderRepository = Depends(get_order_repository)
):
    """A user's most recent orders (admin)"""
    try:
        service.get_user(user_id)
        orders = repo.find_by_user(user_id, limit=limit)
        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user orders: {str(e)}")


@router.post("/{user_id}/block")
async def block_user(
    user_id: str,
    payload: BlockRequest,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Block a user permanently or until blocked_until (admin)"""
    try:
        user = service.block_user(user_id, admin.id, payload.blocked_until, payload.reason)
        return {"status": "success", "data": user.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error blocking user: {str(e)}")


@router.post("/{user_id}/unblock")
async def unblock_user(
    user_id: str,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Lift a block (admin)"""
    try:
        user = service.unblock_user(user_id)
        return {"status": "success", "data": user.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error unblocking user: {str(e)}")


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Grant or revoke the admin role (admin)"""
    try:
        user = service.set_role(user_id, payload.role, admin.id)
        return {"status": "success", "data": user.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating role: {str(e)}")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    admin: TokenUser = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Delete a user record (admin)"""
    try:
        service.delete_user(user_id, admin.id)
        return {"status": "success", "message": f"User {user_id} deleted"}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting user: {str(e)}")
