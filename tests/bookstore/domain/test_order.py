"""Tests for the Order aggregate."""

import pytest
from bookstore.errors import OrderNotCancellable, PaymentAfterCancellation
from bookstore.order.events import OrderCancelled, OrderPaid, OrderPlaced
from bookstore.order.order import Order, OrderStatus, PaymentStatus, order_total
from protean.exceptions import ValidationError


def _items():
    return [
        {"book_id": "book-1", "title": "Dune", "image": "", "unit_price": 10.10, "quantity": 3},
        {"book_id": "book-2", "title": "Emma", "image": "emma.jpg", "unit_price": 5.0, "quantity": 1},
    ]


def _place(**overrides):
    kwargs = {"user_id": "user-1", "items": _items(), "payment_method": "cash"}
    kwargs.update(overrides)
    return Order.place(**kwargs)


class TestPlace:
    def test_total_is_sum_of_lines_rounded(self):
        order = _place()
        assert order.total == 35.3
        assert order_total(_items()) == 35.3

    def test_items_are_copied(self):
        order = _place()
        assert [(i.title, i.unit_price, i.quantity) for i in order.items] == [
            ("Dune", 10.10, 3),
            ("Emma", 5.0, 1),
        ]

    def test_cash_order_starts_pending(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value

    def test_gateway_order_awaits_payment(self):
        order = _place(payment_method="paymob", payment_link="https://pay/1", payment_order_id="42")
        assert order.payment_status == PaymentStatus.PENDING_PAYMENT.value
        assert order.payment_link == "https://pay/1"

    def test_gateway_order_needs_reference(self):
        with pytest.raises(ValidationError):
            _place(payment_method="paymob")

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            _place(items=[])

    def test_unknown_payment_method_rejected(self):
        with pytest.raises(ValidationError):
            _place(payment_method="cheque")

    def test_raises_order_placed(self):
        order = _place()
        event = next(e for e in order._events if isinstance(e, OrderPlaced))
        assert event.item_count == 4
        assert event.total == 35.3


class TestStatusUpdates:
    def test_change_status(self):
        order = _place()
        order.change_status("shipped")
        assert order.status == "shipped"

    def test_invalid_status_rejected(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.change_status("lost")

    def test_change_payment_status(self):
        order = _place()
        order.change_payment_status("paid")
        assert order.is_paid

    def test_total_unchanged_by_status_updates(self):
        order = _place()
        order.change_status("delivered")
        order.change_payment_status("paid")
        assert order.total == 35.3


class TestConfirmPayment:
    def test_confirm_payment_is_idempotent(self):
        order = _place(payment_method="paymob", payment_link="https://pay/1", payment_order_id="42")
        order.confirm_payment()
        order.confirm_payment()
        assert order.is_paid
        assert len([e for e in order._events if isinstance(e, OrderPaid)]) == 1

    def test_cancelled_order_refuses_payment(self):
        order = _place(payment_method="paymob", payment_link="https://pay/1", payment_order_id="42")
        order.cancel()

        with pytest.raises(PaymentAfterCancellation):
            order.confirm_payment()
        assert not order.is_paid
        assert order.status == OrderStatus.CANCELLED.value


class TestCancel:
    def test_cancel_pending_unpaid(self):
        order = _place()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED.value
        assert any(isinstance(e, OrderCancelled) for e in order._events)

    def test_cannot_cancel_shipped(self):
        order = _place()
        order.change_status("shipped")
        with pytest.raises(OrderNotCancellable):
            order.cancel()

    def test_cannot_cancel_paid(self):
        order = _place()
        order.change_payment_status("paid")
        with pytest.raises(OrderNotCancellable):
            order.cancel()
