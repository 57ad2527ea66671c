"""
Product Service
Catalog writes with validation, and the product page view
"""
import logging
from datetime import datetime
from typing import Optional

from groupbuy.core.exceptions import InvalidRequestError, InvalidStateError, NotFoundError, RecalculationError
from groupbuy.domain.discount import validate_discount_tiers
from groupbuy.domain.product import Product, ProductCreate, ProductStatus, ProductUpdate, as_utc
from groupbuy.repositories.order_repository import OrderRepository
from groupbuy.repositories.product_repository import ProductRepository
from groupbuy.repositories.template_repository import TemplateRepository
from groupbuy.services.order_recalculation_service import OrderRecalculationService

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through a partial update
NON_NULLABLE_FIELDS = ('name', 'description', 'base_price', 'discount_tiers', 'image_urls', 'product_info_data')


def _check_period(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
    if start_date and end_date and as_utc(start_date) >= as_utc(end_date):
        raise InvalidRequestError("The end date must be later than the start date")


class ProductService:
    """
    Service for the product catalog

    Handles:
    - Validating product input (name, price, tiers, period, template)
    - Repricing pending orders when base price or tiers change
    - Deleting products that have no pending orders
    - Building the product page payload
    """

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        template_repository: Optional[TemplateRepository] = None,
        recalculation_service: Optional[OrderRecalculationService] = None,
        order_repository: Optional[OrderRepository] = None
    ):
        self.product_repository = product_repository or ProductRepository()
        self.template_repository = template_repository or TemplateRepository()
        self.recalculation_service = recalculation_service or OrderRecalculationService()
        self.order_repository = order_repository or self.recalculation_service.order_repository

    def _check_template(self, template_id: Optional[int]) -> None:
        if template_id is not None and self.template_repository.find_by_id(template_id) is None:
            raise NotFoundError("Template", template_id)

    def create_product(self, data: ProductCreate, created_by: str) -> Product:
        """
        Validate and store a new product

        Raises:
            InvalidRequestError: empty name/description, non-positive price,
                bad period
            InvalidDiscountTiersError: tiers missing, overlapping or with gaps
            NotFoundError: unknown product info template
        """
        if not data.name.strip():
            raise InvalidRequestError("Product name is required")
        if not data.description.strip():
            raise InvalidRequestError("Product description is required")
        if data.base_price <= 0:
            raise InvalidRequestError("Base price must be positive")

        data.discount_tiers = validate_discount_tiers(data.discount_tiers)
        _check_period(data.start_date, data.end_date)
        self._check_template(data.product_info_template_id)

        product = self.product_repository.create(data, created_by)
        logger.info(f"Product {product.id} created by {created_by}")
        return product

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """
        Validate and apply a partial update

        Changing base price or tiers reprices the product's pending orders
        (best effort, like joins and cancellations).
        """
        current = self.product_repository.find_by_id(product_id)
        if current is None:
            raise NotFoundError("Product", product_id)

        for field in NON_NULLABLE_FIELDS:
            if field in data.model_fields_set and getattr(data, field) is None:
                raise InvalidRequestError(f"{field} cannot be null")

        if data.name is not None and not data.name.strip():
            raise InvalidRequestError("Product name is required")
        if data.description is not None and not data.description.strip():
            raise InvalidRequestError("Product description is required")
        if data.base_price is not None and data.base_price <= 0:
            raise InvalidRequestError("Base price must be positive")
        if data.discount_tiers is not None:
            data.discount_tiers = validate_discount_tiers(data.discount_tiers)

        start_date = data.start_date if "start_date" in data.model_fields_set else current.start_date
        end_date = data.end_date if "end_date" in data.model_fields_set else current.end_date
        _check_period(start_date, end_date)

        if "product_info_template_id" in data.model_fields_set:
            self._check_template(data.product_info_template_id)

        updated = self.product_repository.update(product_id, data)
        if updated is None:
            raise NotFoundError("Product", product_id)

        pricing_changed = (
            updated.base_price != current.base_price
            or updated.discount_tiers != current.discount_tiers
        )
        if pricing_changed:
            try:
                self.recalculation_service.recalculate_product(updated)
            except RecalculationError as e:
                logger.error(f"Pending order repricing failed after editing product {product_id}: {e}")

        return updated

    def change_status(self, product_id: int, status: ProductStatus) -> Product:
        product = self.product_repository.update_status(product_id, status)
        if product is None:
            raise NotFoundError("Product", product_id)
        logger.info(f"Product {product_id} status changed to {status.value}")
        return product

    def delete_product(self, product_id: int) -> None:
        """
        Delete a product together with its confirmed and cancelled orders

        Raises:
            NotFoundError: unknown product
            InvalidStateError: the product still has pending orders
        """
        if self.product_repository.find_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)

        pending = self.order_repository.find_pending_by_product(product_id)
        if pending:
            raise InvalidStateError(
                f"Product {product_id} has {len(pending)} pending orders; "
                "cancel or confirm them first"
            )

        if not self.product_repository.delete(product_id):
            raise NotFoundError("Product", product_id)
        logger.info(f"Product {product_id} deleted")

    def get_product_page(self, product_id: int, now: Optional[datetime] = None) -> dict:
        """
        Product with its live pricing summary and product info rows

        Rows follow the template's field order; a missing template just
        yields no rows.
        """
        product = self.product_repository.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        data = product.to_dict(now)
        data['product_info'] = []

        if product.product_info_template_id is not None:
            template = self.template_repository.find_by_id(product.product_info_template_id)
            if template is not None:
                data['product_info'] = template.render_rows(product.product_info_data)

        return data
