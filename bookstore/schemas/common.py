# bookstore/schemas/common.py
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """
    Base for request/response schemas.

    Python attributes stay snake_case; JSON uses camelCase
    (`order_id` <-> `orderId`), which is what the storefront and the
    admin dashboard send and expect. Both spellings are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[DataT]):
    """
    Envelope shared by every endpoint: {success, message, data}.
    """

    success: bool = True
    message: str = ""
    data: DataT | None = None
