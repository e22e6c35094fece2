"""Bookstore management CLI.

Creates and drops database schemas, and seeds a handful of books for local
runs and load tests.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed-books --count 20 --stock 5
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def _initialized_domain():
    from bookstore.domain import bookstore

    bookstore.init()
    return bookstore


def setup_databases():
    from bookstore.utils.db import setup_db

    prepared = setup_db(_initialized_domain())
    if not prepared:
        print("No SQL providers configured; nothing to create.")
    for name in prepared:
        print(f"  {name} schema ready.")


def drop_databases():
    from bookstore.utils.db import drop_db

    dropped = drop_db(_initialized_domain())
    if not dropped:
        print("No SQL providers configured; nothing to drop.")
    for name in dropped:
        print(f"  {name} schema dropped.")


def seed_books(count: int, stock: int, price: float):
    domain = _initialized_domain()
    from bookstore.inventory.management import add_book

    ids = []
    with domain.domain_context():
        for n in range(1, count + 1):
            ids.append(add_book(title=f"Sample Book {n:03d}", author="Seed Author", price=price, stock=stock))
    logger.info("books_seeded", count=len(ids))
    for book_id in ids:
        print(book_id)


def main():
    parser = argparse.ArgumentParser(description="Bookstore management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-books", help="Add sample books and print their ids")
    seed_parser.add_argument("--count", type=int, default=10)
    seed_parser.add_argument("--stock", type=int, default=5)
    seed_parser.add_argument("--price", type=float, default=19.99)

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "seed-books":
        seed_books(args.count, args.stock, args.price)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
