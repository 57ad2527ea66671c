"""
Products API Endpoints
Catalog browsing, product administration and joining a group purchase
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from groupbuy.api.deps import (
    domain_http_error,
    get_group_purchase_service,
    get_order_repository,
    get_product_service,
)
from groupbuy.core.auth import TokenUser, get_current_user, get_current_user_optional, require_admin
from groupbuy.core.exceptions import GroupBuyError
from groupbuy.domain.product import ProductCreate, ProductStatus, ProductUpdate
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.services.group_purchase_service import GroupPurchaseService
from groupbuy.services.product_service import ProductService

router = APIRouter()


# Request models
class StatusUpdate(BaseModel):
    status: ProductStatus


class JoinRequest(BaseModel):
    quantity: int = Field(1, ge=1)


@router.get("/")
async def get_products(
    status: Optional[ProductStatus] = Query(None, description="Filter by product status"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ProductService = Depends(get_product_service)
):
    """
    Get products with their live pricing summary
    """
    try:
        products, total = service.product_repository.find_all(
            status=status,
            search=search,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    user: Optional[TokenUser] = Depends(get_current_user_optional),
    service: ProductService = Depends(get_product_service),
    repo: OrderRepository = Depends(get_order_repository)
):
    """
    Product page: pricing summary (rate, unit price, units to next tier,
    max rate), purchase period and product info rows

    Signed-in callers also get their pending order as my_order; anonymous
    visitors get null.
    """
    try:
        data = service.get_product_page(product_id)

        my_order = None
        if user is not None:
            my_order = repo.find_pending_for_user_and_product(user.id, product_id)
        data["my_order"] = my_order.to_dict() if my_order else None

        return {
            "status": "success",
            "data": data
        }
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.get("/{product_id}/my-order")
async def get_my_order_for_product(
    product_id: int,
    user: TokenUser = Depends(get_current_user),
    repo: OrderRepository = Depends(get_order_repository)
):
    """The caller's pending order on this product (data is null if none)"""
    try:
        order = repo.find_pending_for_user_and_product(user.id, product_id)
        return {
            "status": "success",
            "data": order.to_dict() if order else None
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.post("/", status_code=201)
async def create_product(
    payload: ProductCreate,
    user: TokenUser = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Create a product (admin)"""
    try:
        product = service.create_product(payload, created_by=user.id)
        return {"status": "success", "data": product.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: TokenUser = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Update a product (admin); pricing changes reprice pending orders"""
    try:
        product = service.update_product(product_id, payload)
        return {"status": "success", "data": product.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.put("/{product_id}/status")
async def update_product_status(
    product_id: int,
    payload: StatusUpdate,
    user: TokenUser = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Change the product status (admin)"""
    try:
        product = service.change_status(product_id, payload.status)
        return {"status": "success", "data": product.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating status: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    user: TokenUser = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """
    Delete a product (admin)

    Refused with 409 while the product has pending orders
    """
    try:
        service.delete_product(product_id)
        return {"status": "success", "message": f"Product {product_id} deleted"}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")

@router.post("/{product_id}/join", status_code=201)
async def join_product(
    product_id: int,
    payload: JoinRequest = JoinRequest(),
    user: TokenUser = Depends(get_current_user),
    service: GroupPurchaseService = Depends(get_group_purchase_service)
):
    """
    Join the group purchase

    Returns the new pending order
    """
    try:
        order = service.join(product_id, user.id, quantity=payload.quantity)
        return {"status": "success", "data": order.to_dict()}
    except GroupBuyError as e:
        raise domain_http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error joining group purchase: {str(e)}")
