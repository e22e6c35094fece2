"""Tests for the Cart aggregate."""

import pytest
from bookstore.cart.cart import Cart
from bookstore.cart.events import CartEmptied, CartItemAdded, CartItemQuantitySet, GuestCartMerged
from bookstore.errors import ItemNotFound, StockExceeded
from protean.exceptions import ValidationError


def _make_cart(owner_id="user-1"):
    return Cart.create(owner_id=owner_id)


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("book-1", 2, available=5)
        assert cart.lines() == [("book-1", 2)]

    def test_add_same_book_sums_quantity(self):
        cart = _make_cart()
        cart.add_item("book-1", 2, available=5)
        cart.add_item("book-1", 3, available=5)
        assert len(cart.items) == 1
        assert cart.quantity_of("book-1") == 5

    def test_sum_beyond_stock_rejected(self):
        cart = _make_cart()
        cart.add_item("book-1", 2, available=3)
        with pytest.raises(StockExceeded) as exc:
            cart.add_item("book-1", 2, available=3)
        assert exc.value.requested == 4
        assert exc.value.available == 3
        assert cart.quantity_of("book-1") == 2

    def test_add_raises_event_with_line_total(self):
        cart = _make_cart()
        cart.add_item("book-1", 1, available=5)
        cart.add_item("book-1", 2, available=5)
        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert [e.line_quantity for e in events] == [1, 3]

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("book-1", 0, available=5)


class TestSetQuantity:
    def test_set_quantity_exactly(self):
        cart = _make_cart()
        cart.add_item("book-1", 4, available=5)
        cart.set_quantity("book-1", 1, available=5)
        assert cart.quantity_of("book-1") == 1
        event = next(e for e in cart._events if isinstance(e, CartItemQuantitySet))
        assert event.previous_quantity == 4

    def test_set_above_stock_rejected(self):
        cart = _make_cart()
        cart.add_item("book-1", 1, available=2)
        with pytest.raises(StockExceeded):
            cart.set_quantity("book-1", 3, available=2)

    def test_set_missing_line(self):
        cart = _make_cart()
        with pytest.raises(ItemNotFound):
            cart.set_quantity("book-1", 1, available=5)


class TestRemoveAndEmpty:
    def test_remove_item(self):
        cart = _make_cart()
        cart.add_item("book-1", 1, available=5)
        cart.remove_item("book-1")
        assert cart.is_empty

    def test_remove_missing_item(self):
        cart = _make_cart()
        with pytest.raises(ItemNotFound):
            cart.remove_item("book-1")

    def test_empty(self):
        cart = _make_cart()
        cart.add_item("book-1", 1, available=5)
        cart.add_item("book-2", 2, available=5)
        cart.empty()
        assert cart.is_empty
        event = next(e for e in cart._events if isinstance(e, CartEmptied))
        assert event.item_count == 2
        assert event.reason == "checkout"


class TestAbsorb:
    def test_sums_and_clips_to_stock(self):
        cart = _make_cart()
        cart.add_item("book-1", 2, available=5)
        merged, dropped = cart.absorb("guest-1", [("book-1", 4, 5)])
        assert (merged, dropped) == (1, 0)
        assert cart.quantity_of("book-1") == 5

    def test_drops_missing_and_sold_out_books(self):
        cart = _make_cart()
        merged, dropped = cart.absorb("guest-1", [("book-1", 1, None), ("book-2", 1, 0), ("book-3", 2, 1)])
        assert (merged, dropped) == (1, 2)
        assert cart.lines() == [("book-3", 1)]

    def test_raises_merge_event(self):
        cart = _make_cart()
        cart.absorb("guest-1", [("book-1", 1, 3)])
        event = next(e for e in cart._events if isinstance(e, GuestCartMerged))
        assert event.guest_id == "guest-1"
        assert event.merged == 1
