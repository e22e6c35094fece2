"""Catalogue reads — paged book listings and book detail."""

import math
from dataclasses import dataclass

from protean.utils.globals import current_domain

from bookstore.inventory.book import Book
from bookstore.inventory.ledger import get_book


@dataclass(frozen=True)
class BookPage:
    books: list
    current_page: int
    total_pages: int
    total_books: int


def list_books(page=1, limit=12) -> BookPage:
    page = max(int(page or 1), 1)
    limit = max(int(limit or 12), 1)

    results = (
        current_domain.repository_for(Book)
        ._dao.query.order_by("title")
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return BookPage(
        books=list(results.items),
        current_page=page,
        total_pages=math.ceil(results.total / limit) if results.total else 0,
        total_books=results.total,
    )


def book_detail(book_id) -> Book:
    return get_book(book_id)
