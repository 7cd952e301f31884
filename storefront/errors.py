"""Typed failures raised by the order engine and catalog services.

Each error carries the HTTP status it maps to and an optional ``extra`` dict
that is merged into the JSON error body by the handlers in ``storefront.main``.
"""
from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    """Base exception for all storefront business-rule failures."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def extra(self) -> Dict[str, Any]:
        return {}


class ValidationError(StorefrontError):
    """Malformed request: empty cart, bad quantity, missing address field..."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, str]]] = None):
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": message}])

    @property
    def extra(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class ProductNotFoundError(StorefrontError):
    """Raised when an order references a product id that doesn't exist."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")

    @property
    def extra(self) -> Dict[str, Any]:
        return {"product_id": self.product_id}


class ProductUnavailableError(StorefrontError):
    """Raised when an order references a deactivated product."""

    def __init__(self, product_id: int, name: str):
        self.product_id = product_id
        self.name = name
        super().__init__(f"Product {name} is not available")

    @property
    def extra(self) -> Dict[str, Any]:
        return {"product_id": self.product_id}


class InsufficientStockError(StorefrontError):
    status_code = 409

    def __init__(self, product_id: int, name: str, requested: int, available: int):
        self.product_id = product_id
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {name}. Available: {available}")

    @property
    def extra(self) -> Dict[str, Any]:
        return {"product_id": self.product_id, "requested": self.requested, "available": self.available}


class AuthorizationError(StorefrontError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Order missing, or not visible to the caller."""

    status_code = 404

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class InvalidStatusTransitionError(StorefrontError):
    status_code = 409

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot change order status from {current} to {requested}")

    @property
    def extra(self) -> Dict[str, Any]:
        return {"current": self.current, "requested": self.requested}
