"""
Shared router dependencies

Service/repository providers (overridable in tests through
app.dependency_overrides) and the domain-error to HTTP translation.
"""
from fastapi import HTTPException, status

from groupbuy.core.exceptions import (
    GroupBuyError,
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.site_settings_repository import SiteSettingsRepository
from groupbuy.repositories.template_repository import TemplateRepository
from groupbuy.repositories.user_repository import UserRepository
from groupbuy.services.dashboard_service import DashboardService
from groupbuy.services.group_purchase_service import GroupPurchaseService
from groupbuy.services.product_service import ProductService
from groupbuy.services.user_admin_service import UserAdminService


def get_product_service() -> ProductService:
    return ProductService()


def get_group_purchase_service() -> GroupPurchaseService:
    return GroupPurchaseService()


def get_user_admin_service() -> UserAdminService:
    return UserAdminService()


def get_dashboard_service() -> DashboardService:
    return DashboardService()


def get_order_repository() -> OrderRepository:
    return OrderRepository()


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_template_repository() -> TemplateRepository:
    return TemplateRepository()


def get_site_settings_repository() -> SiteSettingsRepository:
    return SiteSettingsRepository()


def domain_http_error(error: GroupBuyError) -> HTTPException:
    """Map a domain error to the HTTPException a router should raise"""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    if isinstance(error, InvalidStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=422, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
