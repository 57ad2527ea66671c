"""
API tests for /api/v1/orders, /api/v1/users and /health
"""
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from groupbuy.api.deps import (
    get_group_purchase_service,
    get_order_repository,
    get_user_admin_service,
)
from groupbuy.core.auth import TokenUser, get_current_user
from groupbuy.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from groupbuy.domain.order import OrderStatus
from groupbuy.domain.user import UserRole, UserStatus
from groupbuy.main import app

BUYER = TokenUser(id='user-1', email='buyer@example.com', role=UserRole.USER)
ADMIN = TokenUser(id='admin-1', email='admin@example.com', role=UserRole.ADMIN)


@pytest.fixture
def group_purchase_service():
    return MagicMock()


@pytest.fixture
def order_repository():
    return MagicMock()


@pytest.fixture
def user_admin_service():
    return MagicMock()


@pytest.fixture
def client(group_purchase_service, order_repository, user_admin_service):
    app.dependency_overrides[get_group_purchase_service] = lambda: group_purchase_service
    app.dependency_overrides[get_order_repository] = lambda: order_repository
    app.dependency_overrides[get_user_admin_service] = lambda: user_admin_service
    app.dependency_overrides[get_current_user] = lambda: BUYER
    yield TestClient(app)
    app.dependency_overrides.clear()


def _as(user):
    app.dependency_overrides[get_current_user] = lambda: user


class TestOrdersApi:

    def test_my_orders(self, client, order_repository, make_order):
        order_repository.find_by_user.return_value = [make_order(id=1), make_order(id=2)]

        response = client.get("/api/v1/orders/me?status=pending")

        assert response.status_code == 200
        assert response.json()['count'] == 2
        order_repository.find_by_user.assert_called_once_with('user-1', status=OrderStatus.PENDING)

    def test_cannot_view_other_users_order(self, client, order_repository, make_order):
        order_repository.find_by_id.return_value = make_order(user_id='someone-else')

        response = client.get("/api/v1/orders/100")

        assert response.status_code == 403

    def test_admin_views_any_order(self, client, order_repository, make_order):
        _as(ADMIN)
        order_repository.find_by_id.return_value = make_order(user_id='someone-else')

        response = client.get("/api/v1/orders/100")

        assert response.status_code == 200

    def test_missing_order_is_404(self, client, order_repository):
        order_repository.find_by_id.return_value = None

        assert client.get("/api/v1/orders/5").status_code == 404

    def test_cancel_own_order(self, client, group_purchase_service, make_order):
        group_purchase_service.cancel.return_value = make_order(status=OrderStatus.CANCELLED)

        response = client.post("/api/v1/orders/100/cancel")

        assert response.status_code == 200
        assert response.json()['data']['status'] == 'cancelled'
        group_purchase_service.cancel.assert_called_once_with(100, 'user-1', is_admin=False)

    def test_cancel_maps_domain_errors(self, client, group_purchase_service):
        group_purchase_service.cancel.side_effect = PermissionDeniedError("You can only cancel your own orders")
        assert client.post("/api/v1/orders/100/cancel").status_code == 403

        group_purchase_service.cancel.side_effect = InvalidStateError("The order is no longer pending")
        assert client.post("/api/v1/orders/100/cancel").status_code == 409

    def test_confirm_requires_admin(self, client, group_purchase_service, make_order):
        assert client.post("/api/v1/orders/100/confirm").status_code == 403

        _as(ADMIN)
        group_purchase_service.confirm.return_value = make_order(status=OrderStatus.CONFIRMED)

        response = client.post("/api/v1/orders/100/confirm")

        assert response.status_code == 200
        group_purchase_service.confirm.assert_called_once_with(100)


class TestUsersApi:

    def test_block_user(self, client, user_admin_service, make_user):
        _as(ADMIN)
        user_admin_service.block_user.return_value = make_user(status=UserStatus.BLOCKED)

        response = client.post("/api/v1/users/user-1/block", json={'reason': 'spam'})

        assert response.status_code == 200
        assert response.json()['data']['block_status'] == 'permanently blocked'
        user_admin_service.block_user.assert_called_once_with('user-1', 'admin-1', None, 'spam')

    def test_buyer_cannot_delete_users(self, client, user_admin_service):
        assert client.delete("/api/v1/users/user-2").status_code == 403
        user_admin_service.delete_user.assert_not_called()

    def test_admin_deletes_user(self, client, user_admin_service):
        _as(ADMIN)

        response = client.delete("/api/v1/users/user-2")

        assert response.status_code == 200
        user_admin_service.delete_user.assert_called_once_with('user-2', 'admin-1')

    def test_admin_views_user_orders(self, client, user_admin_service, order_repository, make_user, make_order):
        # Arrange
        _as(ADMIN)
        user_admin_service.get_user.return_value = make_user(id='user-2')
        order_repository.find_by_user.return_value = [make_order(id=9, user_id='user-2'), make_order(id=4, user_id='user-2')]

        # Act
        response = client.get("/api/v1/users/user-2/orders")

        # Assert
        assert response.status_code == 200
        assert response.json()['count'] == 2
        assert [order['id'] for order in response.json()['data']] == [9, 4]
        order_repository.find_by_user.assert_called_once_with('user-2', limit=10)

    def test_user_orders_unknown_user_is_404(self, client, user_admin_service, order_repository):
        _as(ADMIN)
        user_admin_service.get_user.side_effect = NotFoundError("User", "ghost")

        response = client.get("/api/v1/users/ghost/orders?limit=5")

        assert response.status_code == 404
        order_repository.find_by_user.assert_not_called()

    def test_buyer_cannot_view_user_orders(self, client, order_repository):
        assert client.get("/api/v1/users/user-2/orders").status_code == 403
        order_repository.find_by_user.assert_not_called()


class TestHealth:

    @patch('groupbuy.main.get_db_connection_with_retry')
    def test_degraded_without_database(self, mock_connect, client):
        mock_connect.side_effect = Exception("could not connect")

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()['status'] == 'degraded'
        assert response.json()['database']['error'] == 'could not connect'
