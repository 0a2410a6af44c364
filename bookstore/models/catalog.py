# bookstore/models/catalog.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Author(SQLModel, table=True):
    __tablename__ = "authors"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    bio: str | None = None


class Publisher(SQLModel, table=True):
    __tablename__ = "publishers"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, index=True)
    address: str | None = Field(default=None, max_length=255)


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, unique=True, index=True)


class Book(SQLModel, table=True):
    """
    Catalog entry.

    `quantity` is on-hand stock. It is mutated only by the order
    workflows (checkout, payment confirmation, cancellation), always
    under a row lock and never below zero.
    """

    __tablename__ = "books"

    id: int | None = Field(default=None, primary_key=True)

    title: str = Field(
        max_length=255,
        index=True,
        description="Display title",
    )

    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Current catalog unit price",
    )

    quantity: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    author_id: int | None = Field(default=None, foreign_key="authors.id", index=True)
    publisher_id: int | None = Field(default=None, foreign_key="publishers.id", index=True)
    category_id: int | None = Field(default=None, foreign_key="categories.id", index=True)

    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
