# bookstore/services/status_guard.py
from collections.abc import Iterable

from bookstore.core.errors import InconsistentStatusError
from bookstore.models.order import Order, Payment
from bookstore.models.status import OrderStatus, PaymentStatus, is_consistent


def ensure_consistent(order: Order, payments: Iterable[Payment]) -> None:
    """
    Check every payment against its order's status before commit.

    Raises:
        InconsistentStatusError: for the first payment whose status may not
        accompany the order's status.
    """
    order_status = OrderStatus(order.status)
    for payment in payments:
        if not is_consistent(order_status, PaymentStatus(payment.payment_status)):
            raise InconsistentStatusError(order.id, order_status.value, payment.payment_status)
