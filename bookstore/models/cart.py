# bookstore/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    One active cart per user, created lazily on the first add.
    Survives checkout; only its items are removed.
    """

    __tablename__ = "carts"

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    Shopping cart line.
    One cart cannot have 2 rows for the same book; quantity accumulates.
    """

    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "book_id"),)

    id: int | None = Field(default=None, primary_key=True)

    cart_id: int = Field(
        foreign_key="carts.id",
        index=True,
    )

    book_id: int = Field(
        foreign_key="books.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Must be >= 1",
    )
