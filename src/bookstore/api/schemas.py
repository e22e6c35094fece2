"""Pydantic request/response schemas for the bookstore API.

These are external contracts — separate from internal Protean commands. Field
names go over the wire in camelCase; Python code uses snake_case.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    book_id: str
    quantity: int = Field(default=1, ge=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"bookId": "6f1c3e1e-5a5b-4d8e-9a51-0c9d1f5c2a10", "quantity": 2}]},
    )


class UpdateCartRequest(CamelModel):
    book_id: str
    quantity: int = Field(ge=0)


class RemoveCartItemRequest(CamelModel):
    book_id: str


class CartItemSchema(CamelModel):
    book_id: str
    title: str
    author: str | None = None
    image: str = ""
    price: float
    stock: int
    quantity: int
    subtotal: float


class CartResponse(CamelModel):
    items: list[CartItemSchema]
    total: float


class MergeCartResponse(CamelModel):
    merged: int
    dropped: int


class MessageResponse(CamelModel):
    status: str = "success"
    message: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(CamelModel):
    payment_method: Literal["cash", "paymob"] = "cash"


class OrderItemSchema(CamelModel):
    book_id: str
    title: str
    image: str = ""
    unit_price: float
    quantity: int


class OrderSchema(CamelModel):
    id: str
    user_id: str
    items: list[OrderItemSchema]
    total: float
    status: str
    payment_method: str
    payment_status: str
    payment_link: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlaceOrderResponse(CamelModel):
    order_id: str
    total: float
    items: list[OrderItemSchema]
    status: str
    payment_status: str
    payment_link: str | None = None


class OrderEnvelope(CamelModel):
    order: OrderSchema


class OrderPageResponse(CamelModel):
    orders: list[OrderSchema]
    current_page: int
    total_pages: int
    total_orders: int


class UpdateOrderRequest(CamelModel):
    status: Literal["pending", "shipped", "delivered", "completed", "cancelled", "rejected"] | None = None
    payment_status: Literal["pending", "pendingPayment", "paid"] | None = None


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookSchema(CamelModel):
    id: str
    title: str
    author: str | None = None
    price: float
    stock: int
    image: str = ""
    rating_average: float = 0.0
    rating_count: int = 0


class BookPageResponse(CamelModel):
    books: list[BookSchema]
    current_page: int
    total_pages: int
    total_books: int


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------
def order_item_schema(item) -> OrderItemSchema:
    return OrderItemSchema(
        book_id=str(item.book_id),
        title=item.title,
        image=item.image or "",
        unit_price=item.unit_price,
        quantity=item.quantity,
    )


def order_schema(order) -> OrderSchema:
    return OrderSchema(
        id=str(order.id),
        user_id=str(order.user_id),
        items=[order_item_schema(item) for item in order.items],
        total=order.total,
        status=order.status,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        payment_link=order.payment_link,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def book_schema(book) -> BookSchema:
    return BookSchema(
        id=str(book.id),
        title=book.title,
        author=book.author,
        price=book.price,
        stock=book.stock,
        image=book.image or "",
        rating_average=book.rating_average or 0.0,
        rating_count=book.rating_count or 0,
    )
