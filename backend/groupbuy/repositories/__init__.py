"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from groupbuy.repositories.product_repository import ProductRepository
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.user_repository import UserRepository
from groupbuy.repositories.template_repository import TemplateRepository
from groupbuy.repositories.site_settings_repository import SiteSettingsRepository

__all__ = [
    'ProductRepository',
    'OrderRepository',
    'UserRepository',
    'TemplateRepository',
    'SiteSettingsRepository',
]
