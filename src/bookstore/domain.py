"""Bookstore domain — books, shopping carts, orders and checkout.

A single Protean domain so that one unit of work can span the Book, Cart and
Order aggregates during checkout.
"""

import structlog
from protean.domain import Domain

bookstore = Domain(name="bookstore")

logger = structlog.get_logger(__name__)
