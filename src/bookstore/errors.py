"""Custom exceptions for the bookstore.

Every error carries the HTTP status it maps to; the API layer turns them into
``{"status", "error", "message"}`` responses.
"""


class BookstoreError(Exception):
    """Base exception for all bookstore errors."""

    status_code = 400


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFoundError(BookstoreError):
    """Base for missing books, carts, cart items and orders."""

    status_code = 404


class BookNotFound(NotFoundError):
    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book not found: {book_id}")


class CartNotFound(NotFoundError):
    def __init__(self, owner_id: str):
        self.owner_id = owner_id
        super().__init__("Cart not found")


class ItemNotFound(NotFoundError):
    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book {book_id} is not in the cart")


class OrderNotFound(NotFoundError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class StockExceeded(BookstoreError):
    """Raised by cart mutations when the requested quantity is more than is on the shelf."""

    status_code = 409

    def __init__(self, book_id: str, requested: int, available: int):
        self.book_id = book_id
        self.requested = requested
        self.available = available
        super().__init__(f"Only {available} left in stock, cannot hold {requested}")


class InsufficientStock(BookstoreError):
    """Raised at checkout when a cart line can no longer be fulfilled."""

    status_code = 409

    def __init__(self, book_id: str, title: str, requested: int, available: int):
        self.book_id = book_id
        self.title = title
        self.requested = requested
        self.available = available
        super().__init__(f"Not enough stock for '{title}': requested {requested}, only {available} left")


class BookUnavailable(BookstoreError):
    """Raised at checkout when a book in the cart has been removed from the catalogue."""

    status_code = 409

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book {book_id} is no longer available")


# ---------------------------------------------------------------------------
# Checkout and orders
# ---------------------------------------------------------------------------
class EmptyCart(BookstoreError):
    def __init__(self):
        super().__init__("Cart is empty")


class PriceChanged(BookstoreError):
    """Raised when the committed total no longer matches the amount sent to the gateway."""

    status_code = 409

    def __init__(self, quoted: float, current: float):
        self.quoted = quoted
        self.current = current
        super().__init__(f"Cart total changed from {quoted:.2f} to {current:.2f}, please retry checkout")


class PaymentGatewayError(BookstoreError):
    """Raised when the payment provider is unreachable or returns an unusable response."""

    status_code = 502

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Payment gateway error: {reason}")


class NoPaymentLink(BookstoreError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} has no payment gateway reference")


class OrderNotCancellable(BookstoreError):
    status_code = 409

    def __init__(self, order_id: str, reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Order {order_id} cannot be cancelled: {reason}")


class PaymentAfterCancellation(BookstoreError):
    """The gateway settled a payment for an order that is already cancelled."""

    status_code = 409

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} was cancelled before its payment settled; refund required")


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------
class Unauthorized(BookstoreError):
    status_code = 401

    def __init__(self, reason: str = "Authentication required"):
        super().__init__(reason)


class Forbidden(BookstoreError):
    status_code = 403

    def __init__(self, reason: str = "You are not allowed to perform this action"):
        super().__init__(reason)
