"""
Domain exceptions

Services raise these; routers translate them into HTTP responses.
"""


class GroupBuyError(Exception):
    """Base class for all domain errors"""


class NotFoundError(GroupBuyError):
    """Requested entity does not exist"""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PermissionDeniedError(GroupBuyError):
    """Caller is not allowed to perform the operation"""


class InvalidStateError(GroupBuyError):
    """Operation is not valid for the entity's current state"""


class InvalidRequestError(GroupBuyError, ValueError):
    """Input is well-typed but not acceptable (empty name, bad dates, ...)"""


class InvalidDiscountTiersError(InvalidRequestError):
    """Discount tiers are malformed (gap, overlap, inverted range)"""


class RecalculationError(GroupBuyError):
    """Pending-order price recalculation could not be persisted"""

    def __init__(self, product_id, cause: Exception):
        self.product_id = product_id
        self.cause = cause
        super().__init__(f"Failed to recalculate pending orders for product {product_id}: {cause}")
