# bookstore/models/promotion.py
from datetime import datetime
from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Promotion(SQLModel, table=True):
    """
    Time-windowed discount rule.

    promotion_type:
      - "percentage": discount_value is a percent of the catalog price
      - "fixed": discount_value is subtracted from the catalog price
    """

    __tablename__ = "promotions"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=150)

    promotion_type: str = Field(max_length=50)

    discount_value: Decimal = Field(
        ge=0,
        max_digits=10,
        decimal_places=2,
    )

    start_date: datetime
    end_date: datetime

    is_active: bool = Field(default=True, index=True)


class PromotionItem(SQLModel, table=True):
    """
    Scopes a promotion to a book, optionally overriding its discount value.
    A book appears at most once per promotion.
    """

    __tablename__ = "promotion_items"
    __table_args__ = (UniqueConstraint("promotion_id", "book_id"),)

    id: int | None = Field(default=None, primary_key=True)

    promotion_id: int = Field(foreign_key="promotions.id", index=True)

    book_id: int = Field(foreign_key="books.id", index=True)

    specific_discount: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
    )
