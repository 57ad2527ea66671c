"""
Orders API Endpoints
Buyer order history, cancellation and admin confirmation
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from groupbuy.api.deps import domain_http_error, get_group_purchase_service, get_order_repository
from groupbuy.core.auth import TokenUser, get_current_user, require_admin
from groupbuy.core.exceptions import GroupBuyError
from groupbuy.domain.order import OrderStatus
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.services.group_purchase_service import GroupPurchaseService

router = APIRouter()


@router.get("/me")
async def get_my_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    user: TokenUser = Depends(get_current_user),
    repo: OrderRepository = Depends(get_order_repository)
):
    """Orders of the caller, newest first"""
    try:
        orders = repo.find_by_user(user.id, status=status)
        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    user: TokenUser = Depends(get_current_user),
    repo: OrderRepository = Depends(get_order_repository)
):
    """One order; buyers only see their own"""
    try:
        order = repo.find_by_id(order_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")

    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    if order.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="You can only view your own orders")

    return {"status": "success", "data": order.to_dict()}


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    user: TokenUser = Depends(get_current_user),
    service: GroupPurchaseService = Depends(get_group_purchase_service)
):
    """Cancel a pending order (own order, or any order for admins)"""
    try:
        order = service.cancel(order_id, user.id, is_admin=user.is_admin)
        return {"status": "success", "data": order.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.post("/{order_id}/confirm")
async def confirm_order(
    order_id: int,
    user: TokenUser = Depends(require_admin),
    service: GroupPurchaseService = Depends(get_group_purchase_service)
):
    """Confirm a pending order (admin); its price is fixed from now on"""
    try:
        order = service.confirm(order_id)
        return {"status": "success", "data": order.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error confirming order: {str(e)}")
