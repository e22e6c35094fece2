"""Stock reads and locks shared by the cart, checkout and cancellation paths."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from bookstore.errors import BookNotFound, BookUnavailable, InsufficientStock
from bookstore.inventory.book import Book
from bookstore.utils.locks import KeyedLocks

# Held around every unit of work that reads-then-writes a book's stock
stock_locks = KeyedLocks("stock")


@dataclass(frozen=True)
class StockLine:
    """A cart line checked against the book it references."""

    book: Book
    quantity: int

    @property
    def subtotal(self) -> float:
        return round(self.book.price * self.quantity, 2)


def find_book(book_id) -> Book | None:
    try:
        return current_domain.repository_for(Book).get(str(book_id))
    except ObjectNotFoundError:
        return None


def get_book(book_id) -> Book:
    book = find_book(book_id)
    if book is None:
        raise BookNotFound(str(book_id))
    return book


def check_lines(lines) -> list[StockLine]:
    """Check ``(book_id, quantity)`` pairs against current stock, all or nothing.

    Raises BookUnavailable for a book that no longer exists and
    InsufficientStock for the first line that cannot be filled.
    """
    checked = []
    for book_id, quantity in lines:
        book = find_book(book_id)
        if book is None:
            raise BookUnavailable(str(book_id))
        if not book.has_available(quantity):
            raise InsufficientStock(str(book.id), book.title, quantity, book.stock)
        checked.append(StockLine(book=book, quantity=quantity))
    return checked


def total_of(lines: list[StockLine]) -> float:
    return round(sum(line.subtotal for line in lines), 2)
