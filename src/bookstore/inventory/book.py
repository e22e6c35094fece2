"""Book aggregate — the inventory ledger.

``stock`` is the authoritative count of sellable units. The checkout path only
ever lowers it through ``withdraw``, which refuses to go below zero; the field
itself also rejects negative values.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from bookstore.domain import bookstore
from bookstore.errors import InsufficientStock
from bookstore.inventory.events import (
    BookAdded,
    BookPriceChanged,
    BookRestocked,
    StockReturned,
    StockWithdrawn,
)


@bookstore.aggregate
class Book:
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    image = String(max_length=1024, default="")
    rating_average = Float(default=0.0)
    rating_count = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, title, price, stock=0, author=None, image=""):
        now = datetime.now(UTC)
        book = cls(
            title=title,
            author=author,
            price=price,
            stock=stock,
            image=image or "",
            created_at=now,
            updated_at=now,
        )
        book.raise_(
            BookAdded(
                book_id=str(book.id),
                title=title,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return book

    def has_available(self, quantity) -> bool:
        return quantity <= self.stock

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def withdraw(self, quantity):
        """Take ``quantity`` units out of stock for an order."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.has_available(quantity):
            raise InsufficientStock(str(self.id), self.title, quantity, self.stock)

        previous = self.stock
        self.stock = previous - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockWithdrawn(
                book_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
            )
        )

    def return_stock(self, quantity):
        """Put units from a cancelled order back on the shelf."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.stock += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(StockReturned(book_id=str(self.id), quantity=quantity, new_stock=self.stock))

    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.stock += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(BookRestocked(book_id=str(self.id), quantity=quantity, new_stock=self.stock))

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(BookPriceChanged(book_id=str(self.id), previous_price=previous, new_price=new_price))
