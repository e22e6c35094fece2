"""FastAPI routes for the bookstore — cart, orders, admin orders and catalogue reads.

Endpoints are plain functions: FastAPI runs them on its worker pool, so the
blocking lock waits and gateway calls below never stall the event loop.
"""

import structlog
from fastapi import APIRouter, Depends, Query, Request
from protean.utils.globals import current_domain

from bookstore.api.identity import Identity, current_admin, current_identity, current_user, guest_id_header
from bookstore.api.schemas import (
    AddToCartRequest,
    BookPageResponse,
    CartItemSchema,
    CartResponse,
    MergeCartResponse,
    MessageResponse,
    OrderEnvelope,
    OrderPageResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    RemoveCartItemRequest,
    UpdateCartRequest,
    UpdateOrderRequest,
    book_schema,
    order_item_schema,
    order_schema,
)
from bookstore.cache import cache_key, get_cache
from bookstore.cart.store import CartStore
from bookstore.checkout.service import CheckoutService
from bookstore.config import get_settings
from bookstore.inventory.catalogue import book_detail, list_books
from bookstore.order.administration import delete_order, update_order_status
from bookstore.order.cancellation import cancel_order
from bookstore.order.order import Order
from bookstore.order.payment import reconcile_payment

logger = structlog.get_logger(__name__)

cart_store = CartStore()
checkout = CheckoutService()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
def view_cart(identity: Identity = Depends(current_identity)) -> CartResponse:
    summary = cart_store.get_cart(identity.id)
    return CartResponse(
        items=[
            CartItemSchema(
                book_id=item.book_id,
                title=item.title,
                author=item.author,
                image=item.image,
                price=item.price,
                stock=item.stock,
                quantity=item.quantity,
                subtotal=item.subtotal,
            )
            for item in summary.items
        ],
        total=summary.total,
    )


@cart_router.post("", response_model=MessageResponse)
def add_to_cart(body: AddToCartRequest, identity: Identity = Depends(current_identity)) -> MessageResponse:
    cart_store.add_item(identity.id, body.book_id, body.quantity)
    return MessageResponse(message="Book added to cart")


@cart_router.patch("", response_model=MessageResponse)
def update_cart(body: UpdateCartRequest, identity: Identity = Depends(current_identity)) -> MessageResponse:
    cart_store.set_item_quantity(identity.id, body.book_id, body.quantity)
    if body.quantity == 0:
        return MessageResponse(message="Book removed from cart")
    return MessageResponse(message="Cart updated")


@cart_router.delete("/item", response_model=MessageResponse)
def remove_cart_item(
    body: RemoveCartItemRequest, identity: Identity = Depends(current_identity)
) -> MessageResponse:
    cart_store.remove_item(identity.id, body.book_id)
    return MessageResponse(message="Book removed from cart")


@cart_router.delete("", response_model=MessageResponse)
def clear_cart(identity: Identity = Depends(current_identity)) -> MessageResponse:
    cart_store.clear(identity.id)
    return MessageResponse(message="Cart cleared")


@cart_router.post("/merge", response_model=MergeCartResponse)
def merge_cart(
    identity: Identity = Depends(current_user),
    guest_id: str | None = Depends(guest_id_header),
) -> MergeCartResponse:
    if guest_id is None:
        return MergeCartResponse(merged=0, dropped=0)
    result = cart_store.merge(guest_id=guest_id, user_id=identity.id)
    return MergeCartResponse(**result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
def place_order(body: PlaceOrderRequest, identity: Identity = Depends(current_user)) -> PlaceOrderResponse:
    order = checkout.place_order(identity.id, body.payment_method)
    return PlaceOrderResponse(
        order_id=str(order.id),
        total=order.total,
        items=[order_item_schema(item) for item in order.items],
        status=order.status,
        payment_status=order.payment_status,
        payment_link=order.payment_link,
    )


@order_router.get("", response_model=OrderPageResponse)
def list_my_orders(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    identity: Identity = Depends(current_user),
) -> OrderPageResponse:
    result = current_domain.repository_for(Order).page_for_user(
        identity.id, page=page, limit=limit or get_settings().orders_page_size
    )
    return OrderPageResponse(
        orders=[order_schema(o) for o in result.orders],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_orders=result.total_orders,
    )


@order_router.get("/{order_id}", response_model=OrderEnvelope)
def get_my_order(order_id: str, identity: Identity = Depends(current_user)) -> OrderEnvelope:
    order = current_domain.repository_for(Order).get_for_user(order_id, identity.id)
    return OrderEnvelope(order=order_schema(order))


@order_router.post("/{order_id}/cancel", response_model=OrderEnvelope)
def cancel_my_order(order_id: str, identity: Identity = Depends(current_user)) -> OrderEnvelope:
    order = cancel_order(order_id, identity.id)
    return OrderEnvelope(order=order_schema(order))


@order_router.get("/{order_id}/payment-status", response_model=OrderEnvelope)
def check_payment_status(order_id: str, identity: Identity = Depends(current_user)) -> OrderEnvelope:
    user_id = None if identity.is_admin else identity.id
    order = reconcile_payment(order_id, user_id=user_id)
    return OrderEnvelope(order=order_schema(order))


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/orders/admin/orders", tags=["admin"])


@admin_order_router.get("", response_model=OrderPageResponse)
def list_all_orders(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    status: str | None = None,
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    payment_method: str | None = Query(default=None, alias="paymentMethod"),
    _admin: Identity = Depends(current_admin),
) -> OrderPageResponse:
    result = current_domain.repository_for(Order).page_all(
        page=page,
        limit=limit or get_settings().orders_page_size,
        status=status,
        payment_status=payment_status,
        payment_method=payment_method,
    )
    return OrderPageResponse(
        orders=[order_schema(o) for o in result.orders],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_orders=result.total_orders,
    )


@admin_order_router.patch("/{order_id}", response_model=OrderEnvelope)
def update_order(
    order_id: str, body: UpdateOrderRequest, _admin: Identity = Depends(current_admin)
) -> OrderEnvelope:
    order = update_order_status(order_id, status=body.status, payment_status=body.payment_status)
    return OrderEnvelope(order=order_schema(order))


@admin_order_router.delete("/{order_id}", response_model=MessageResponse)
def remove_order(order_id: str, _admin: Identity = Depends(current_admin)) -> MessageResponse:
    delete_order(order_id)
    return MessageResponse(message="Order deleted")


# ---------------------------------------------------------------------------
# Book Router (cached reads)
# ---------------------------------------------------------------------------
book_router = APIRouter(prefix="/books", tags=["books"])


def _cached(request: Request, build):
    """Serve a JSON body from the response cache, computing and storing it on a miss.

    A cache outage degrades to uncached reads.
    """
    path = request.url.path + (f"?{request.url.query}" if request.url.query else "")
    key = cache_key(path)
    cache = get_cache()

    try:
        hit = cache.get(key)
    except Exception:
        logger.warning("cache_read_failed", key=key, exc_info=True)
        hit = None
    if hit is not None:
        return hit

    body = build()
    try:
        cache.set(key, body, get_settings().catalogue_cache_ttl)
    except Exception:
        logger.warning("cache_write_failed", key=key, exc_info=True)
    return body


@book_router.get("")
def browse_books(request: Request, page: int = Query(default=1, ge=1), limit: int = Query(default=12, ge=1, le=100)):
    def build():
        result = list_books(page=page, limit=limit)
        return BookPageResponse(
            books=[book_schema(b) for b in result.books],
            current_page=result.current_page,
            total_pages=result.total_pages,
            total_books=result.total_books,
        ).model_dump(by_alias=True, mode="json")

    return _cached(request, build)


@book_router.get("/{book_id}")
def get_book(request: Request, book_id: str):
    return _cached(request, lambda: {"book": book_schema(book_detail(book_id)).model_dump(by_alias=True, mode="json")})
