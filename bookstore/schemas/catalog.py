# bookstore/schemas/catalog.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookstore.schemas.common import CamelModel


class BookRead(CamelModel):
    """
    Storefront projection of a book.

    discounted_price is for display only; checkout charges `price`.
    """

    book_id: int
    title: str
    price: float
    discounted_price: float
    quantity: int
    description: str | None = None
    image_url: str | None = None
    author: str | None = None
    publisher: str | None = None
    category: str | None = None


class PromotionRead(CamelModel):
    promotion_id: int
    name: str
    promotion_type: str
    discount_value: float
    start_date: datetime
    end_date: datetime
    book_ids: list[int]


class PromotionItemCreate(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    promotion_id: int
    book_id: int
    specific_discount: Decimal | None = Field(default=None, ge=0)


class PromotionItemRead(CamelModel):
    promo_item_id: int
    promotion_id: int
    book_id: int
    specific_discount: float | None = None
