"""Typed domain errors.

Every failure raised by the domain carries an ``ErrorKind``. The HTTP layer maps
kinds to status codes, so no caller ever has to match on message text.

``DomainError`` extends Protean's ``ValidationError`` so that ``exc.messages``
keeps the familiar ``{field: [message]}`` shape everywhere.
"""

from enum import Enum

from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    BUSINESS_RULE = "business_rule"
    RATE_LIMITED = "rate_limited"
    GATEWAY = "gateway"
    INTERNAL = "internal"


class DomainError(ValidationError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str = "_entity"):
        super().__init__({field: [message]})
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return self.message


class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND


class ProductNotFound(NotFound):
    def __init__(self, product_id: str, variant_id: str | None = None):
        if variant_id:
            message = f"Variant {variant_id} of product {product_id} not found"
        else:
            message = f"Product {product_id} not found"
        super().__init__(message, field="product_id")


class Unauthorized(DomainError):
    kind = ErrorKind.UNAUTHORIZED


class Forbidden(DomainError):
    kind = ErrorKind.FORBIDDEN


class Conflict(DomainError):
    kind = ErrorKind.CONFLICT


class RateLimited(DomainError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, retry_after: int = 0):
        super().__init__(message, field="rate_limit")
        self.retry_after = retry_after


class PaymentGatewayError(DomainError):
    kind = ErrorKind.GATEWAY


class BusinessRuleViolation(DomainError):
    kind = ErrorKind.BUSINESS_RULE


class InsufficientStock(BusinessRuleViolation):
    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Insufficient stock: {available} available, {requested} requested",
            field="quantity",
        )
        self.available = available
        self.requested = requested


class InsufficientPoints(BusinessRuleViolation):
    def __init__(self, balance: int, requested: int):
        super().__init__(
            f"Insufficient points: balance {balance}, requested {requested}",
            field="points",
        )
        self.balance = balance
        self.requested = requested


class InvalidCoupon(BusinessRuleViolation):
    def __init__(self, reason: str):
        super().__init__(reason, field="coupon_code")


class InvalidTransition(BusinessRuleViolation):
    def __init__(self, message: str):
        super().__init__(message, field="status")


class ProductUnavailable(BusinessRuleViolation):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} is not available for sale", field="product_id")


def error_kind(exc: Exception) -> ErrorKind:
    """Classify any exception raised through the domain."""
    if isinstance(exc, DomainError):
        return exc.kind
    if isinstance(exc, ObjectNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, ExpectedVersionError):
        return ErrorKind.CONFLICT
    if isinstance(exc, (ValidationError, InvalidOperationError, InvalidStateError)):
        return ErrorKind.VALIDATION
    return ErrorKind.INTERNAL
