"""CartStore — the entry point the HTTP layer uses for cart operations.

Every mutation holds the owner's cart lock for the whole unit of work, so
rapid updates to one cart apply one after another instead of overwriting
each other.
"""

import structlog
from protean.utils.globals import current_domain

from bookstore.cart.items import AddToCart, RemoveFromCart, SetCartItemQuantity
from bookstore.cart.management import ClearCart, MergeGuestCart
from bookstore.cart.queries import CartSummary, view_cart
from bookstore.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

cart_locks = KeyedLocks("cart")


class CartStore:
    def get_cart(self, owner_id) -> CartSummary:
        return view_cart(owner_id)

    def add_item(self, owner_id, book_id, quantity):
        with cart_locks.hold(owner_id):
            current_domain.process(
                AddToCart(owner_id=owner_id, book_id=book_id, quantity=quantity),
                asynchronous=False,
            )
        logger.debug("cart_item_added", owner_id=owner_id, book_id=book_id, quantity=quantity)

    def set_item_quantity(self, owner_id, book_id, quantity):
        with cart_locks.hold(owner_id):
            current_domain.process(
                SetCartItemQuantity(owner_id=owner_id, book_id=book_id, quantity=quantity),
                asynchronous=False,
            )

    def remove_item(self, owner_id, book_id):
        with cart_locks.hold(owner_id):
            current_domain.process(
                RemoveFromCart(owner_id=owner_id, book_id=book_id),
                asynchronous=False,
            )

    def clear(self, owner_id):
        with cart_locks.hold(owner_id):
            current_domain.process(ClearCart(owner_id=owner_id), asynchronous=False)

    def merge(self, guest_id, user_id) -> dict:
        """Merge a guest cart into a user's cart. Returns merged and dropped line counts."""
        with cart_locks.hold(guest_id, user_id):
            result = current_domain.process(
                MergeGuestCart(owner_id=user_id, guest_id=guest_id),
                asynchronous=False,
            )
        logger.info("guest_cart_merged", guest_id=guest_id, user_id=user_id, **result)
        return result
