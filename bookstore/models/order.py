# bookstore/models/order.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field

from bookstore.models.status import OrderStatus, PaymentStatus


class Order(SQLModel, table=True):
    """
    Customer order created by checkout.

    user_id and total_price are fixed at creation; only `status` moves
    afterwards (see bookstore.models.status for the allowed values).
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    total_price: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="Sum of detail quantity * price at order time",
    )

    status: str = Field(
        default=OrderStatus.PENDING.value,
        max_length=30,
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderDetail(SQLModel, table=True):
    """
    Immutable line item of an order.

    `price` is the catalog price frozen at checkout.
    """

    __tablename__ = "order_details"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
        index=True,
    )

    book_id: int = Field(
        foreign_key="books.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order",
    )


class Payment(SQLModel, table=True):
    """
    Payment record for an order (one per checkout).
    """

    __tablename__ = "payments"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
        index=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    amount: Decimal = Field(
        max_digits=12,
        decimal_places=2,
    )

    # COD | Banking
    payment_method: str = Field(max_length=50)

    transaction_id: str | None = Field(default=None, max_length=100)

    payment_status: str = Field(
        default=PaymentStatus.PENDING.value,
        max_length=30,
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime | None = None
