"""
Pytest fixtures and configuration for Group Buying backend tests

This file provides shared fixtures that can be used across all test modules.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from groupbuy.domain.discount import DiscountTier
from groupbuy.domain.order import Order, OrderStatus
from groupbuy.domain.product import Product, ProductStatus
from groupbuy.domain.user import User


@pytest.fixture
def discount_tiers():
    """
    Two contiguous tiers: 1-5 units at 5%, 6-10 units at 10%
    """
    return [
        DiscountTier(min=1, max=5, discount=0.05),
        DiscountTier(min=6, max=10, discount=0.10),
    ]


@pytest.fixture
def now():
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_product(discount_tiers):
    """
    Factory for Product domain models (base price 10000 with the two tiers)
    """
    def _make(**overrides):
        data = {
            'id': 1,
            'name': 'Organic Honey 500g',
            'description': 'Raw wildflower honey',
            'base_price': 10000,
            'discount_tiers': discount_tiers,
            'current_quantity': 0,
            'current_participants': 0,
            'status': ProductStatus.ACTIVE,
        }
        data.update(overrides)
        return Product(**data)
    return _make


@pytest.fixture
def make_order():
    """
    Factory for pending Order domain models
    """
    def _make(**overrides):
        data = {
            'id': 100,
            'product_id': 1,
            'user_id': 'user-1',
            'quantity': 1,
            'participant_count': 1,
            'final_price': 9500,
            'total_price': 9500,
            'status': OrderStatus.PENDING,
        }
        data.update(overrides)
        if 'total_price' not in overrides:
            data['total_price'] = data['final_price'] * data['quantity']
        return Order(**data)
    return _make


@pytest.fixture
def make_user():
    def _make(**overrides):
        data = {
            'id': 'user-1',
            'email': 'buyer@example.com',
            'display_name': 'Buyer',
        }
        data.update(overrides)
        return User(**data)
    return _make


@pytest.fixture
def mock_db():
    """
    Mocked psycopg2 connection and cursor

    Returns (conn, cursor); patch get_db_connection_dict to return conn.
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor
