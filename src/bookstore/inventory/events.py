"""Domain events for the Book aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from bookstore.domain import bookstore


@bookstore.event(part_of="Book")
class BookAdded:
    """A new book was added to the catalogue."""

    __version__ = 1

    book_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    added_at = DateTime(required=True)


@bookstore.event(part_of="Book")
class BookRestocked:
    """Units were added to a book's stock."""

    __version__ = 1

    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_stock = Integer(required=True)


@bookstore.event(part_of="Book")
class BookPriceChanged:
    """A book's selling price changed. Existing orders keep their snapshot price."""

    __version__ = 1

    book_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@bookstore.event(part_of="Book")
class StockWithdrawn:
    """Units were taken out of stock for an order."""

    __version__ = 1

    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@bookstore.event(part_of="Book")
class StockReturned:
    """Units came back into stock from a cancelled order."""

    __version__ = 1

    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_stock = Integer(required=True)
