"""
Database table models (schema only; queries live in groupbuy.repositories)
"""
from .product import Product
from .order import Order
from .user import User
from .catalog import ProductInfoTemplate, SiteSettings

__all__ = [
    "Product",
    "Order",
    "User",
    "ProductInfoTemplate",
    "SiteSettings",
]
