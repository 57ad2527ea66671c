"""
Unit tests for GroupPurchaseService (join / cancel / confirm)
"""
import logging
from datetime import timedelta
from unittest.mock import MagicMock

import psycopg2
import pytest

from groupbuy.core.exceptions import (
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    RecalculationError,
)
from groupbuy.domain.order import OrderCreate, OrderStatus
from groupbuy.domain.product import ProductStatus
from groupbuy.domain.user import UserStatus
from groupbuy.services.group_purchase_service import GroupPurchaseService


@pytest.fixture
def repos():
    product_repository = MagicMock()
    order_repository = MagicMock()
    user_repository = MagicMock()
    recalculation_service = MagicMock()
    return product_repository, order_repository, user_repository, recalculation_service


@pytest.fixture
def service(repos):
    product_repository, order_repository, user_repository, recalculation_service = repos
    return GroupPurchaseService(
        product_repository=product_repository,
        order_repository=order_repository,
        user_repository=user_repository,
        recalculation_service=recalculation_service,
    )


class TestJoin:
    """Test joining a group purchase"""

    def test_join_prices_order_with_its_own_quantity(self, service, repos, make_product, make_order, make_user, now):
        # Arrange
        product_repository, order_repository, user_repository, recalculation_service = repos
        product_repository.find_by_id.return_value = make_product(current_quantity=4, current_participants=2)
        user_repository.find_by_id.return_value = make_user()
        order_repository.find_pending_for_user_and_product.return_value = None
        order_repository.create.return_value = make_order(id=7, quantity=3, final_price=9000)
        updated_product = make_product(current_quantity=7, current_participants=3)
        product_repository.adjust_aggregates.return_value = updated_product
        order_repository.find_by_id.return_value = make_order(id=7, quantity=3, final_price=9000)

        # Act
        order = service.join(1, 'user-1', quantity=3, now=now)

        # Assert
        created = order_repository.create.call_args[0][0]
        assert created == OrderCreate(
            product_id=1,
            user_id='user-1',
            quantity=3,
            participant_count=3,
            final_price=9000,
            total_price=27000,
            status=OrderStatus.PENDING,
        )
        product_repository.adjust_aggregates.assert_called_once_with(1, 3, 1)
        recalculation_service.recalculate_product.assert_called_once_with(updated_product)
        assert order.id == 7

    def test_join_survives_recalculation_failure(self, service, repos, make_product, make_order, make_user, now):
        product_repository, order_repository, user_repository, recalculation_service = repos
        product_repository.find_by_id.return_value = make_product()
        user_repository.find_by_id.return_value = make_user()
        order_repository.find_pending_for_user_and_product.return_value = None
        order_repository.create.return_value = make_order(id=7)
        product_repository.adjust_aggregates.return_value = make_product(current_quantity=1)
        order_repository.find_by_id.return_value = None
        recalculation_service.recalculate_product.side_effect = RecalculationError(1, RuntimeError("down"))

        order = service.join(1, 'user-1', now=now)

        assert order.id == 7

    def test_rejects_non_positive_quantity(self, service):
        with pytest.raises(InvalidRequestError):
            service.join(1, 'user-1', quantity=0)

    def test_unknown_product(self, service, repos):
        product_repository = repos[0]
        product_repository.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            service.join(99, 'user-1')

    def test_closed_product(self, service, repos, make_product, now):
        repos[0].find_by_id.return_value = make_product(status=ProductStatus.COMPLETED)

        with pytest.raises(InvalidStateError, match="no longer open"):
            service.join(1, 'user-1', now=now)

    def test_not_started_yet(self, service, repos, make_product, now):
        repos[0].find_by_id.return_value = make_product(start_date=now + timedelta(hours=3, minutes=5))

        with pytest.raises(InvalidStateError, match=r"starts in 3h 5m"):
            service.join(1, 'user-1', now=now)

    def test_already_ended(self, service, repos, make_product, now):
        repos[0].find_by_id.return_value = make_product(end_date=now - timedelta(days=1))

        with pytest.raises(InvalidStateError, match="has ended"):
            service.join(1, 'user-1', now=now)

    def test_blocked_user(self, service, repos, make_product, make_user, now):
        product_repository, order_repository, user_repository, _ = repos
        product_repository.find_by_id.return_value = make_product()
        user_repository.find_by_id.return_value = make_user(status=UserStatus.BLOCKED)

        with pytest.raises(PermissionDeniedError):
            service.join(1, 'user-1', now=now)

        order_repository.create.assert_not_called()

    def test_already_joined(self, service, repos, make_product, make_order, make_user, now):
        product_repository, order_repository, user_repository, _ = repos
        product_repository.find_by_id.return_value = make_product()
        user_repository.find_by_id.return_value = make_user()
        order_repository.find_pending_for_user_and_product.return_value = make_order()

        with pytest.raises(InvalidStateError, match="already joined"):
            service.join(1, 'user-1', now=now)

        product_repository.adjust_aggregates.assert_not_called()

    def test_counter_failure_is_logged_with_order_id(self, service, repos, make_product, make_order, make_user, now, caplog):
        # Arrange
        product_repository, order_repository, user_repository, recalculation_service = repos
        product_repository.find_by_id.return_value = make_product()
        user_repository.find_by_id.return_value = make_user()
        order_repository.find_pending_for_user_and_product.return_value = None
        order_repository.create.return_value = make_order(id=42)
        product_repository.adjust_aggregates.side_effect = psycopg2.OperationalError("server closed the connection")

        # Act
        with caplog.at_level(logging.ERROR, logger='groupbuy.services.group_purchase_service'):
            with pytest.raises(psycopg2.OperationalError):
                service.join(1, 'user-1', now=now)

        # Assert
        assert "Order 42" in caplog.text
        assert "server closed the connection" in caplog.text
        recalculation_service.recalculate_product.assert_not_called()


class TestCancel:
    """Test cancelling an order"""

    def test_cancel_moves_counters_down_and_reprices(self, service, repos, make_order, make_product):
        # Arrange
        product_repository, order_repository, _, recalculation_service = repos
        order_repository.find_by_id.return_value = make_order(id=5, quantity=2)
        cancelled = make_order(id=5, quantity=2, status=OrderStatus.CANCELLED)
        order_repository.update_status.return_value = cancelled
        updated_product = make_product(current_quantity=3)
        product_repository.adjust_aggregates.return_value = updated_product

        # Act
        result = service.cancel(5, 'user-1')

        # Assert
        assert result.status == OrderStatus.CANCELLED
        order_repository.update_status.assert_called_once_with(
            5, OrderStatus.CANCELLED, expected_status=OrderStatus.PENDING
        )
        product_repository.adjust_aggregates.assert_called_once_with(1, -2, -1)
        recalculation_service.recalculate_product.assert_called_once_with(updated_product)

    def test_other_users_order(self, service, repos, make_order):
        repos[1].find_by_id.return_value = make_order(user_id='someone-else')

        with pytest.raises(PermissionDeniedError):
            service.cancel(100, 'user-1')

    def test_admin_may_cancel_any_order(self, service, repos, make_order, make_product):
        product_repository, order_repository, _, _ = repos
        order_repository.find_by_id.return_value = make_order(user_id='someone-else')
        order_repository.update_status.return_value = make_order(status=OrderStatus.CANCELLED)
        product_repository.adjust_aggregates.return_value = make_product()

        result = service.cancel(100, 'admin-1', is_admin=True)

        assert result.status == OrderStatus.CANCELLED

    def test_only_pending_orders(self, service, repos, make_order):
        repos[1].find_by_id.return_value = make_order(status=OrderStatus.CONFIRMED)

        with pytest.raises(InvalidStateError):
            service.cancel(100, 'user-1')

    def test_lost_race_with_another_status_change(self, service, repos, make_order):
        product_repository, order_repository, _, _ = repos
        order_repository.find_by_id.return_value = make_order()
        order_repository.update_status.return_value = None

        with pytest.raises(InvalidStateError, match="no longer pending"):
            service.cancel(100, 'user-1')

        product_repository.adjust_aggregates.assert_not_called()

    def test_counter_failure_is_logged_with_order_id(self, service, repos, make_order, caplog):
        product_repository, order_repository, _, recalculation_service = repos
        order_repository.find_by_id.return_value = make_order(id=5)
        order_repository.update_status.return_value = make_order(id=5, status=OrderStatus.CANCELLED)
        product_repository.adjust_aggregates.side_effect = psycopg2.OperationalError("deadlock detected")

        with caplog.at_level(logging.ERROR, logger='groupbuy.services.group_purchase_service'):
            with pytest.raises(psycopg2.OperationalError):
                service.cancel(5, 'user-1')

        assert "Order 5" in caplog.text
        recalculation_service.recalculate_product.assert_not_called()


class TestConfirm:

    def test_confirm_pending_order(self, service, repos, make_order):
        order_repository = repos[1]
        order_repository.find_by_id.return_value = make_order()
        order_repository.update_status.return_value = make_order(status=OrderStatus.CONFIRMED)

        result = service.confirm(100)

        assert result.status == OrderStatus.CONFIRMED
        repos[3].recalculate_product.assert_not_called()

    def test_unknown_order(self, service, repos):
        repos[1].find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            service.confirm(404)
