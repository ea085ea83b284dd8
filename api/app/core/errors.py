"""
Typed domain errors.

Every error carries a machine-readable ``code`` and the HTTP status it maps
to, plus any structured fields a caller may want (product name, available
and requested quantities, ...). Services raise these; ``app.main`` renders
them as ``{"detail": ..., "code": ..., **fields}``.

    DomainError
    +-- ValidationError
    |   +-- InsufficientStockError
    +-- NotFoundError
    |   +-- ProductNotFoundError
    |   +-- SaleNotFoundError
    |   +-- UserNotFoundError
    +-- ConflictError
    |   +-- DuplicateSkuError
    |   +-- ProductHasSalesError
    |   +-- DuplicateEmailError
    +-- AuthenticationError
    +-- InternalError
"""

from typing import Any


class DomainError(Exception):
    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Structured fields rendered alongside ``detail`` and ``code``."""
        return {}


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InsufficientStockError(ValidationError):
    code = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_name: str | None = None,
        available: int | None = None,
        requested: int | None = None,
    ):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        if product_name is None:
            message = "Insufficient stock"
        else:
            message = (
                f"Insufficient stock for {product_name}. "
                f"Available: {available}, Requested: {requested}"
            )
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        if self.product_name is None:
            return {}
        return {
            "product": self.product_name,
            "available": self.available,
            "requested": self.requested,
        }


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class ProductNotFoundError(NotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str | None = None, sku: str | None = None):
        self.product_id = product_id
        self.sku = sku
        if product_id is not None:
            message = f"Product not found: {product_id}"
        elif sku is not None:
            message = f"Product not found: {sku}"
        else:
            message = "Product not found"
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"productId": self.product_id} if self.product_id else {}


class SaleNotFoundError(NotFoundError):
    code = "SALE_NOT_FOUND"

    def __init__(self, sale_id: str):
        self.sale_id = sale_id
        super().__init__("Sale not found")


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("User not found")


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code = 409


class DuplicateSkuError(ConflictError):
    code = "DUPLICATE_SKU"

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__("Product with this SKU already exists")

    def details(self) -> dict[str, Any]:
        return {"sku": self.sku}


class ProductHasSalesError(ConflictError):
    code = "PRODUCT_HAS_SALES"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Cannot delete product with existing sales")


class DuplicateEmailError(ConflictError):
    code = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        self.email = email
        super().__init__("User with this email already exists")


class AuthenticationError(DomainError):
    code = "AUTHENTICATION_FAILED"
    status_code = 401


class InternalError(DomainError):
    code = "INTERNAL_ERROR"
    status_code = 500
