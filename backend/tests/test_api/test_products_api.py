"""
API tests for /api/v1/products

Services are replaced through app.dependency_overrides, so no database is
needed.
"""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from groupbuy.api.deps import get_group_purchase_service, get_order_repository, get_product_service
from groupbuy.core.auth import TokenUser, get_current_user, get_current_user_optional
from groupbuy.core.exceptions import InvalidDiscountTiersError, InvalidStateError, NotFoundError
from groupbuy.services.product_service import ProductService
from groupbuy.domain.user import UserRole
from groupbuy.main import app

BUYER = TokenUser(id='user-1', email='buyer@example.com', role=UserRole.USER)
ADMIN = TokenUser(id='admin-1', email='admin@example.com', role=UserRole.ADMIN)


@pytest.fixture
def product_service():
    return MagicMock()


@pytest.fixture
def group_purchase_service():
    return MagicMock()


@pytest.fixture
def order_repository():
    return MagicMock()


@pytest.fixture
def client(product_service, group_purchase_service, order_repository):
    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_group_purchase_service] = lambda: group_purchase_service
    app.dependency_overrides[get_order_repository] = lambda: order_repository
    app.dependency_overrides[get_current_user] = lambda: BUYER
    yield TestClient(app)
    app.dependency_overrides.clear()


def _as(user):
    app.dependency_overrides[get_current_user] = lambda: user


TIERS = [
    {'min': 1, 'max': 5, 'discount': 0.05},
    {'min': 6, 'max': 10, 'discount': 0.10},
]


class TestProductReads:

    def test_list_products(self, client, product_service, make_product):
        product_service.product_repository.find_all.return_value = ([make_product(current_quantity=7)], 1)

        response = client.get("/api/v1/products/?status=active&limit=10")

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'success'
        assert body['total'] == 1
        assert body['data'][0]['final_price'] == 9000
        kwargs = product_service.product_repository.find_all.call_args.kwargs
        assert kwargs['limit'] == 10
        assert kwargs['status'].value == 'active'

    def test_product_page(self, client, product_service):
        product_service.get_product_page.return_value = {'id': 1, 'final_price': 9500, 'product_info': []}

        response = client.get("/api/v1/products/1")

        assert response.status_code == 200
        assert response.json()['data']['final_price'] == 9500

    def test_anonymous_product_page_has_no_order(self, client, product_service, order_repository):
        product_service.get_product_page.return_value = {'id': 1, 'final_price': 9500, 'product_info': []}

        response = client.get("/api/v1/products/1")

        assert response.status_code == 200
        assert response.json()['data']['my_order'] is None
        order_repository.find_pending_for_user_and_product.assert_not_called()

    def test_signed_in_product_page_includes_pending_order(self, client, product_service, order_repository, make_order):
        # Arrange
        app.dependency_overrides[get_current_user_optional] = lambda: BUYER
        product_service.get_product_page.return_value = {'id': 1, 'final_price': 9500, 'product_info': []}
        order_repository.find_pending_for_user_and_product.return_value = make_order(quantity=2)

        # Act
        response = client.get("/api/v1/products/1")

        # Assert
        assert response.status_code == 200
        assert response.json()['data']['my_order']['quantity'] == 2
        order_repository.find_pending_for_user_and_product.assert_called_once_with('user-1', 1)

    def test_unknown_product_is_404(self, client, product_service):
        product_service.get_product_page.side_effect = NotFoundError("Product", 99)

        response = client.get("/api/v1/products/99")

        assert response.status_code == 404
        assert response.json()['detail'] == "Product 99 not found"

    def test_unexpected_error_is_500(self, client, product_service):
        product_service.get_product_page.side_effect = RuntimeError("boom")

        response = client.get("/api/v1/products/1")

        assert response.status_code == 500
        assert "boom" in response.json()['detail']

    def test_my_order_for_product_when_none(self, client, order_repository):
        order_repository.find_pending_for_user_and_product.return_value = None

        response = client.get("/api/v1/products/1/my-order")

        assert response.status_code == 200
        assert response.json()['data'] is None
        order_repository.find_pending_for_user_and_product.assert_called_once_with('user-1', 1)


class TestProductAdmin:

    def test_buyer_cannot_create(self, client, product_service):
        response = client.post("/api/v1/products/", json={
            'name': 'Honey', 'description': 'Raw', 'base_price': 10000, 'discount_tiers': TIERS,
        })

        assert response.status_code == 403
        product_service.create_product.assert_not_called()

    def test_admin_creates_product(self, client, product_service, make_product):
        _as(ADMIN)
        product_service.create_product.return_value = make_product()

        response = client.post("/api/v1/products/", json={
            'name': 'Honey', 'description': 'Raw', 'base_price': 10000, 'discount_tiers': TIERS,
        })

        assert response.status_code == 201
        payload, = product_service.create_product.call_args.args
        assert payload.base_price == 10000
        assert product_service.create_product.call_args.kwargs['created_by'] == 'admin-1'

    def test_invalid_tiers_are_422(self, client, product_service):
        _as(ADMIN)
        product_service.create_product.side_effect = InvalidDiscountTiersError("Gap between tiers")

        response = client.post("/api/v1/products/", json={
            'name': 'Honey', 'description': 'Raw', 'base_price': 10000, 'discount_tiers': TIERS,
        })

        assert response.status_code == 422
        assert response.json()['detail'] == "Gap between tiers"

    def test_admin_changes_status(self, client, product_service, make_product):
        _as(ADMIN)
        product_service.change_status.return_value = make_product()

        response = client.put("/api/v1/products/1/status", json={'status': 'completed'})

        assert response.status_code == 200
        product_id, status = product_service.change_status.call_args.args
        assert product_id == 1
        assert status.value == 'completed'

    def test_explicit_null_tiers_are_422(self, client, make_product):
        # Arrange
        _as(ADMIN)
        product_repository = MagicMock()
        product_repository.find_by_id.return_value = make_product()
        service = ProductService(product_repository, MagicMock(), MagicMock(), MagicMock())
        app.dependency_overrides[get_product_service] = lambda: service

        # Act
        response = client.put("/api/v1/products/1", json={'discount_tiers': None})

        # Assert
        assert response.status_code == 422
        assert response.json()['detail'] == "discount_tiers cannot be null"
        product_repository.update.assert_not_called()

    def test_explicit_null_name_and_price_are_422(self, client, make_product):
        _as(ADMIN)
        product_repository = MagicMock()
        product_repository.find_by_id.return_value = make_product()
        service = ProductService(product_repository, MagicMock(), MagicMock(), MagicMock())
        app.dependency_overrides[get_product_service] = lambda: service

        response = client.put("/api/v1/products/1", json={'name': None, 'base_price': None})

        assert response.status_code == 422
        product_repository.update.assert_not_called()

    def test_buyer_cannot_delete(self, client, product_service):
        response = client.delete("/api/v1/products/1")

        assert response.status_code == 403
        product_service.delete_product.assert_not_called()

    def test_admin_deletes_product(self, client, product_service):
        _as(ADMIN)

        response = client.delete("/api/v1/products/1")

        assert response.status_code == 200
        assert response.json()['message'] == "Product 1 deleted"
        product_service.delete_product.assert_called_once_with(1)

    def test_delete_with_pending_orders_is_409(self, client, product_service):
        _as(ADMIN)
        product_service.delete_product.side_effect = InvalidStateError("Product 1 has 2 pending orders")

        assert client.delete("/api/v1/products/1").status_code == 409

    def test_delete_unknown_product_is_404(self, client, product_service):
        _as(ADMIN)
        product_service.delete_product.side_effect = NotFoundError("Product", 99)

        assert client.delete("/api/v1/products/99").status_code == 404


class TestJoin:

    def test_join_defaults_to_one_unit(self, client, group_purchase_service, make_order):
        group_purchase_service.join.return_value = make_order()

        response = client.post("/api/v1/products/1/join")

        assert response.status_code == 201
        group_purchase_service.join.assert_called_once_with(1, 'user-1', quantity=1)
        assert response.json()['data']['is_pending'] is True

    def test_join_with_quantity(self, client, group_purchase_service, make_order):
        group_purchase_service.join.return_value = make_order(quantity=3)

        response = client.post("/api/v1/products/1/join", json={'quantity': 3})

        assert response.status_code == 201
        group_purchase_service.join.assert_called_once_with(1, 'user-1', quantity=3)

    def test_join_closed_product_is_409(self, client, group_purchase_service):
        group_purchase_service.join.side_effect = InvalidStateError("The group purchase has ended")

        response = client.post("/api/v1/products/1/join", json={'quantity': 1})

        assert response.status_code == 409

    def test_zero_quantity_fails_validation(self, client, group_purchase_service):
        response = client.post("/api/v1/products/1/join", json={'quantity': 0})

        assert response.status_code == 422
        group_purchase_service.join.assert_not_called()
