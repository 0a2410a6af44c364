# bookstore/schemas/cart.py
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookstore.schemas.common import CamelModel


class AddToCartRequest(CamelModel):
    """
    Payload for adding a book to the cart.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    user_id: int
    book_id: int
    quantity: int = Field(gt=0)


class UpdateCartItemRequest(CamelModel):
    """
    Payload for setting the quantity of a cart line.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    user_id: int
    cart_item_id: int
    quantity: int = Field(gt=0)


class CartItemRead(CamelModel):
    """
    Read model for a single cart line, priced at the current catalog price.
    """

    cart_item_id: int
    book_id: int
    title: str
    price: float
    quantity: int
    line_total: float
    image_url: str | None = None


class CartRead(CamelModel):
    """
    Full cart response model with totals.
    """

    cart_id: int | None = None
    user_id: int
    items: list[CartItemRead]
    total_quantity: int
    total_price: float
