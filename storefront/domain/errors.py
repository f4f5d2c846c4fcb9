# storefront/domain/errors.py
"""
Bledy domenowe - kazdy ma staly status HTTP.
Handlery w storefront.api.errors mapuja je na JSON {"message", "errors"}.
"""
from typing import Any, Dict, List


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: List[Dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(StorefrontError):
    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(StorefrontError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(StorefrontError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = "Not found"


class ProductNotFoundError(NotFoundError):
    default_message = "Product not found"


class InvalidStateError(StorefrontError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class EmptyCartError(InvalidStateError):
    default_message = "Cannot checkout an empty cart"


class OutOfStockError(StorefrontError):
    status_code = 409
    default_message = "Insufficient stock"


class InternalError(StorefrontError):
    status_code = 500
    default_message = "Internal server error"
