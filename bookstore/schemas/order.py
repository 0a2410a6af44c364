# bookstore/schemas/order.py
from datetime import datetime

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from bookstore.schemas.common import CamelModel


class CheckoutRequest(CamelModel):
    """
    Payload for converting the current cart into an order.

    paymentMethod is validated by the checkout service (case-insensitive
    COD | Banking) so an invalid value is reported after the stock check,
    the same way as the other checkout failures.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    user_id: int
    payment_method: str


class CheckoutResult(CamelModel):
    order_id: int
    payment_id: int
    total_price: float
    status: str
    payment_method: str
    payment_status: str
    qr_code_url: str | None = None
    created_at: datetime


class ConfirmPaymentRequest(CamelModel):
    """
    Payload for confirming a pending payment (admin or bank webhook).
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    payment_id: int
    is_success: bool
    transaction_id: str | None = None


class ConfirmPaymentResult(CamelModel):
    order_id: int
    payment_id: int
    payment_status: str
    order_status: str


class OrderStatusUpdate(CamelModel):
    """
    Admin payload to change order status. Checked against the allow-list
    and the transition table by the order service.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    status: str


class OrderStatusResult(CamelModel):
    order_id: int
    status: str


class OrderDetailRead(CamelModel):
    """
    Representation of a single order line.
    """

    order_detail_id: int
    book_id: int
    title: str | None = None
    quantity: int
    price: float
    subtotal: float


class PaymentRead(CamelModel):
    payment_id: int
    amount: float
    payment_method: str
    payment_status: str
    transaction_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class OrderRead(CamelModel):
    """
    Full order view including details and payments.
    """

    order_id: int
    user_id: int
    total_price: float
    status: str
    created_at: datetime
    order_details: list[OrderDetailRead]
    payments: list[PaymentRead]


class PaymentSummary(CamelModel):
    payment_method: str
    payment_status: str


class OrderSummary(CamelModel):
    """
    Lightweight representation of an order for listings.
    """

    order_id: int
    user_id: int
    total_price: float
    status: str
    created_at: datetime
    item_count: int
    total_items: int
    payment: PaymentSummary | None = None


# -------- Admin views --------


class CustomerInfo(CamelModel):
    user_id: int
    full_name: str | None = None
    email: str
    phone: str | None = None


class AdminOrderRead(OrderRead):
    """
    Admin order view: the full order plus who placed it.
    """

    customer: CustomerInfo | None = None


class PaymentOrderInfo(CamelModel):
    """
    Order context of a payment. order_details is filled on the
    single-payment view only.
    """

    order_id: int
    total_price: float
    status: str
    created_at: datetime
    order_details: list[OrderDetailRead] | None = None


class AdminPaymentRead(CamelModel):
    """
    Payment row for the admin back office, used to find the payment id
    of a Banking order before confirming it.
    """

    payment_id: int
    order_id: int
    user_id: int
    amount: float
    payment_method: str
    payment_status: str
    transaction_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    order: PaymentOrderInfo | None = None
    customer: CustomerInfo | None = None
