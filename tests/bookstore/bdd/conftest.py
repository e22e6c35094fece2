"""Shared BDD fixtures and step definitions for the bookstore."""

import pytest
from bookstore.cart.queries import find_cart
from bookstore.inventory.ledger import get_book
from bookstore.inventory.management import add_book
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for the exception a When step raised."""
    return {"exc": None}


@pytest.fixture()
def books():
    """Book ids by title."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the book "{title}" priced {price:f} with {stock:d} in stock'))
def _book_in_stock(books, title, price, stock):
    books[title] = add_book(title=title, price=price, stock=stock)


@given(parsers.cfparse('"{owner}" has {quantity:d} of "{title}" in their cart'))
def _cart_holds(cart_store, books, owner, quantity, title):
    cart_store.add_item(owner, books[title], quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{title}" has {stock:d} in stock'))
def _stock_is(books, title, stock):
    assert get_book(books[title]).stock == stock


@then(parsers.cfparse('the cart of "{owner}" holds {quantity:d} of "{title}"'))
def _cart_line(books, owner, quantity, title):
    assert find_cart(owner).quantity_of(books[title]) == quantity


@then(parsers.cfparse('"{owner}" has no cart'))
def _no_cart(owner):
    assert find_cart(owner) is None


@then(parsers.cfparse("the action fails with {error_type}"))
def _fails_with(error, error_type):
    assert error["exc"] is not None, f"Expected {error_type} but nothing was raised"
    assert type(error["exc"]).__name__ == error_type
