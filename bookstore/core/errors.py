# bookstore/core/errors.py
"""
Domain error taxonomy.

Services raise these instead of HTTPException so that the unit of work can
tell business-rule failures (re-raised as-is after rollback) apart from
unexpected ones (wrapped in InfrastructureError). The handlers registered in
`bookstore.main` turn them into the `{success, message, ...}` envelope.
"""
from typing import Any

from fastapi import status


class BookstoreError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self, include_detail: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        payload.update(self.extra)
        return payload


# ---- 400: bad input ----


class ValidationError(BookstoreError):
    code = "validation_error"


class EmptyCartError(ValidationError):
    code = "empty_cart"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class InvalidPaymentMethodError(ValidationError):
    code = "invalid_payment_method"

    def __init__(self, method: str):
        super().__init__(
            f"Invalid payment method '{method}'. Only COD or Banking are accepted.",
        )


class InvalidStatusError(ValidationError):
    code = "invalid_status"


class InsufficientStockError(BookstoreError):
    """
    Requested quantity exceeds on-hand stock.

    Carries the book title and the available quantity so the storefront
    can tell the customer which line to fix.
    """

    code = "insufficient_stock"

    def __init__(self, title: str, available: int | None = None):
        if available is None:
            message = f"Not enough stock for '{title}'"
        else:
            message = f"Not enough stock for '{title}'. Available: {available}"
        super().__init__(message, title=title, available=available)
        self.title = title
        self.available = available


# ---- 401 ----


class AuthenticationError(BookstoreError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_required"

    def __init__(self, message: str = "User authentication required"):
        super().__init__(message)


# ---- 404 ----


class NotFoundError(BookstoreError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


# ---- 409 / state conflicts ----


class ConflictError(BookstoreError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class CartChangedError(ConflictError):
    code = "cart_changed"

    def __init__(self, message: str = "Cart was modified during checkout, please retry"):
        super().__init__(message)


class AlreadyConfirmedError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "already_confirmed"

    def __init__(self, payment_id: int):
        super().__init__(f"Payment {payment_id} has already been confirmed")


class PaymentNotPendingError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "payment_not_pending"

    def __init__(self, payment_id: int, current: str):
        super().__init__(f"Payment {payment_id} is {current} and cannot be confirmed")


class NotCancellableError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "not_cancellable"

    def __init__(self, order_id: int, current: str):
        super().__init__(
            f"Order {order_id} is {current} and can no longer be cancelled",
        )


class InvalidTransitionError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_transition"

    def __init__(self, current: str, new: str):
        super().__init__(f"Invalid status transition: {current} -> {new}")


# ---- 500 ----


class InfrastructureError(BookstoreError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail

    def to_payload(self, include_detail: bool = True) -> dict[str, Any]:
        payload = super().to_payload(include_detail)
        if include_detail and self.detail:
            payload["error"] = self.detail
        return payload


class InconsistentStatusError(InfrastructureError):
    """
    An order and one of its payments ended up in a pair the status model
    does not allow. The transaction is rolled back.
    """

    code = "inconsistent_status"

    def __init__(self, order_id: int, order_status: str, payment_status: str):
        super().__init__(
            "Order and payment statuses are out of step",
            detail=f"order {order_id} is {order_status} but a payment is {payment_status}",
        )
