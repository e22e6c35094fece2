"""Repository for the Order aggregate — lookups scoped to a user and paged listings."""

import math
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError

from bookstore.domain import bookstore
from bookstore.errors import OrderNotFound
from bookstore.order.order import Order
from bookstore.utils.locks import KeyedLocks

# Serializes status, payment and cancellation updates to one order
order_locks = KeyedLocks("order")


@dataclass(frozen=True)
class OrderPage:
    orders: list
    current_page: int
    total_pages: int
    total_orders: int


@bookstore.repository(part_of=Order)
class OrderRepository:
    """Order lookups beyond plain get/add.

    Listings are newest first. ``page`` is 1-based; values below 1 are
    treated as 1.
    """

    def get_order(self, order_id) -> Order:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise OrderNotFound(str(order_id)) from None

    def get_for_user(self, order_id, user_id) -> Order:
        """Fetch an order only if it belongs to ``user_id``; someone else's order reads as missing."""
        order = self.get_order(order_id)
        if str(order.user_id) != str(user_id):
            raise OrderNotFound(str(order_id))
        return order

    def page_for_user(self, user_id, page=1, limit=10) -> OrderPage:
        return self._page({"user_id": str(user_id)}, page, limit)

    def page_all(self, page=1, limit=10, status=None, payment_status=None, payment_method=None) -> OrderPage:
        filters = {
            "status": status,
            "payment_status": payment_status,
            "payment_method": payment_method,
        }
        return self._page({k: v for k, v in filters.items() if v}, page, limit)

    def _page(self, filters, page, limit) -> OrderPage:
        page = max(int(page or 1), 1)
        limit = max(int(limit or 10), 1)

        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()

        return OrderPage(
            orders=list(results.items),
            current_page=page,
            total_pages=math.ceil(results.total / limit) if results.total else 0,
            total_orders=results.total,
        )
