"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities and the
pure pricing functions of the group purchase.
"""
from groupbuy.domain.discount import DiscountTier
from groupbuy.domain.product import Product, ProductStatus, PeriodStatus
from groupbuy.domain.order import Order, OrderStatus
from groupbuy.domain.user import User, UserRole, UserStatus, ShippingAddress
from groupbuy.domain.template import ProductInfoTemplate, ProductInfoField
from groupbuy.domain.site_settings import SiteSettings

__all__ = [
    'DiscountTier',
    'Product',
    'ProductStatus',
    'PeriodStatus',
    'Order',
    'OrderStatus',
    'User',
    'UserRole',
    'UserStatus',
    'ShippingAddress',
    'ProductInfoTemplate',
    'ProductInfoField',
    'SiteSettings',
]
