"""Cart aggregate — one cart per identity, keyed by the identity itself.

A signed-in user's id and a guest's UUID share the same key space, so the
cart's identifier is the owner id. Stock checks made here are advisory; the
checkout transaction re-validates every line against the ledger.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from bookstore.cart.events import (
    CartEmptied,
    CartItemAdded,
    CartItemQuantitySet,
    CartItemRemoved,
    GuestCartMerged,
)
from bookstore.domain import bookstore
from bookstore.errors import ItemNotFound, StockExceeded


@bookstore.entity(part_of="Cart")
class CartItem:
    book_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@bookstore.aggregate
class Cart:
    owner_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_book(self):
        book_ids = [str(item.book_id) for item in self.items]
        if len(book_ids) != len(set(book_ids)):
            raise ValidationError({"items": ["A book can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = datetime.now(UTC)
        return cls(owner_id=owner_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def line_for(self, book_id):
        return next((i for i in self.items if str(i.book_id) == str(book_id)), None)

    def quantity_of(self, book_id) -> int:
        line = self.line_for(book_id)
        return line.quantity if line else 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def lines(self) -> list[tuple[str, int]]:
        return [(str(item.book_id), item.quantity) for item in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, book_id, quantity, available):
        """Add ``quantity`` of a book, summing with any existing line.

        ``available`` is the book's current stock; the combined line may not
        exceed it.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(book_id)
        requested = (existing.quantity if existing else 0) + quantity
        if requested > available:
            raise StockExceeded(str(book_id), requested, available)

        if existing:
            existing.quantity = requested
        else:
            self.add_items(CartItem(book_id=book_id, quantity=quantity))

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                owner_id=str(self.owner_id),
                book_id=str(book_id),
                quantity=quantity,
                line_quantity=requested,
            )
        )

    def set_quantity(self, book_id, quantity, available):
        """Set a line to exactly ``quantity``."""
        if quantity > available:
            raise StockExceeded(str(book_id), quantity, available)

        line = self.line_for(book_id)
        if line is None:
            raise ItemNotFound(str(book_id))

        previous = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantitySet(
                owner_id=str(self.owner_id),
                book_id=str(book_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, book_id):
        line = self.line_for(book_id)
        if line is None:
            raise ItemNotFound(str(book_id))

        self.remove_items(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(owner_id=str(self.owner_id), book_id=str(book_id)))

    def empty(self, reason="checkout"):
        """Drop every line. The cart itself survives for the next visit."""
        count = len(self.items)
        for line in list(self.items):
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartEmptied(owner_id=str(self.owner_id), reason=reason, item_count=count))

    # -------------------------------------------------------------------
    # Guest cart merging
    # -------------------------------------------------------------------
    def absorb(self, guest_id, guest_lines):
        """Fold a guest's lines into this cart.

        ``guest_lines`` holds ``(book_id, quantity, available)`` triples where
        ``available`` is the current stock, or ``None`` when the book is gone.
        Quantities are summed and clipped to stock; lines for missing or
        sold-out books are dropped.
        """
        merged = dropped = 0
        for book_id, quantity, available in guest_lines:
            if not available:
                dropped += 1
                continue

            existing = self.line_for(book_id)
            if existing:
                existing.quantity = min(existing.quantity + quantity, available)
            else:
                self.add_items(CartItem(book_id=book_id, quantity=min(quantity, available)))
            merged += 1

        self.updated_at = datetime.now(UTC)

        self.raise_(
            GuestCartMerged(
                owner_id=str(self.owner_id),
                guest_id=str(guest_id),
                merged=merged,
                dropped=dropped,
            )
        )
        return merged, dropped
