# bookstore/models/status.py
"""
Closed status domains for orders and payments.

Rows store the enum *values* (plain strings) so the columns stay readable
from SQL; services convert with `OrderStatus(order.status)` and compare
against members, never against raw strings.
"""
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    SHIPPING = "shipping"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus | None":
        """Case-insensitive lookup; None for anything outside the enum."""
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "PaymentStatus | None":
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


class PaymentMethod(str, Enum):
    COD = "COD"
    BANKING = "Banking"

    @classmethod
    def parse(cls, value: str) -> "PaymentMethod | None":
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


# Customers may cancel only before stock is committed.
CUSTOMER_CANCELLABLE: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT}
)

# Orders in these states hold stock taken from the catalog.
STOCK_COMMITTED: frozenset[OrderStatus] = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.SHIPPING, OrderStatus.DELIVERED}
)

# Admin-driven transitions (PUT /orders/{id}/status).
# awaiting_payment -> confirmed happens only through payment confirmation,
# which takes the stock.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.AWAITING_PAYMENT: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPING, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPING: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

# Payment statuses that may accompany each order status after commit.
CONSISTENT_PAYMENT_STATUSES: dict[OrderStatus, frozenset[PaymentStatus]] = {
    OrderStatus.PENDING: frozenset({PaymentStatus.PENDING}),
    OrderStatus.AWAITING_PAYMENT: frozenset({PaymentStatus.PENDING}),
    OrderStatus.CONFIRMED: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED}),
    OrderStatus.SHIPPING: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED}),
    OrderStatus.DELIVERED: frozenset({PaymentStatus.COMPLETED}),
    OrderStatus.CANCELLED: frozenset({PaymentStatus.FAILED, PaymentStatus.CANCELLED}),
    OrderStatus.REFUNDED: frozenset({PaymentStatus.COMPLETED}),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ORDER_TRANSITIONS[current]


def is_consistent(order_status: OrderStatus, payment_status: PaymentStatus) -> bool:
    return payment_status in CONSISTENT_PAYMENT_STATUSES[order_status]
