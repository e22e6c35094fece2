"""Book management — commands and handler.

The catalogue itself is administered elsewhere; these commands cover what the
bookstore core needs: adding a book, restocking, repricing and removal.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from bookstore.cache import invalidate_responses
from bookstore.domain import bookstore
from bookstore.inventory.book import Book
from bookstore.inventory.ledger import get_book, stock_locks

logger = structlog.get_logger(__name__)


@bookstore.command(part_of="Book")
class AddBook:
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    image = String(max_length=1024)


@bookstore.command(part_of="Book")
class RestockBook:
    book_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@bookstore.command(part_of="Book")
class ChangeBookPrice:
    book_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@bookstore.command(part_of="Book")
class RemoveBook:
    book_id = Identifier(required=True)


@bookstore.command_handler(part_of=Book)
class ManageBookHandler:
    @handle(AddBook)
    def add_book(self, command):
        book = Book.create(
            title=command.title,
            author=command.author,
            price=command.price,
            stock=command.stock or 0,
            image=command.image,
        )
        current_domain.repository_for(Book).add(book)
        return str(book.id)

    @handle(RestockBook)
    def restock_book(self, command):
        book = get_book(command.book_id)
        book.restock(command.quantity)
        current_domain.repository_for(Book).add(book)
        return book.stock

    @handle(ChangeBookPrice)
    def change_book_price(self, command):
        book = get_book(command.book_id)
        book.change_price(command.price)
        current_domain.repository_for(Book).add(book)

    @handle(RemoveBook)
    def remove_book(self, command):
        book = get_book(command.book_id)
        current_domain.repository_for(Book)._dao.delete(book)


# ---------------------------------------------------------------------------
# Entry points: stock-changing commands run under the book's stock lock and
# drop cached catalogue responses once committed.
# ---------------------------------------------------------------------------
def add_book(title, price, stock=0, author=None, image="") -> str:
    book_id = current_domain.process(
        AddBook(title=title, author=author, price=price, stock=stock, image=image),
        asynchronous=False,
    )
    invalidate_responses("book_added")
    return book_id


def restock_book(book_id, quantity) -> int:
    with stock_locks.hold(book_id):
        new_stock = current_domain.process(RestockBook(book_id=book_id, quantity=quantity), asynchronous=False)
    logger.info("book_restocked", book_id=str(book_id), quantity=quantity, stock=new_stock)
    invalidate_responses("book_restocked")
    return new_stock


def change_book_price(book_id, price) -> None:
    with stock_locks.hold(book_id):
        current_domain.process(ChangeBookPrice(book_id=book_id, price=price), asynchronous=False)
    invalidate_responses("book_repriced")


def remove_book(book_id) -> None:
    with stock_locks.hold(book_id):
        current_domain.process(RemoveBook(book_id=book_id), asynchronous=False)
    logger.info("book_removed", book_id=str(book_id))
    invalidate_responses("book_removed")
