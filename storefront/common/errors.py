"""Business errors raised by the storefront services.

Every error carries the HTTP status the route layer answers with. They derive
from ``ValueError`` so callers that only care about "bad input" can keep
catching that.
"""


class StoreError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class NotFound(StoreError):
    status_code = 404


class ProductMissing(StoreError):
    status_code = 400

    def __init__(self, message: str = "Product not found"):
        super().__init__(message)


class InsufficientStock(StoreError):
    status_code = 400

    def __init__(self, product_name: str = ""):
        message = f"Insufficient stock for {product_name}" if product_name else "Insufficient stock"
        super().__init__(message)
        self.product_name = product_name


class EmptyCart(StoreError):
    status_code = 400

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class InvalidState(StoreError):
    status_code = 400


class Unauthorized(StoreError):
    status_code = 401


class Forbidden(StoreError):
    status_code = 403
