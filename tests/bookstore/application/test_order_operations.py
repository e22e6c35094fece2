"""Order listing, administration and cancellation."""

import pytest
from bookstore.errors import OrderNotCancellable, OrderNotFound, PaymentAfterCancellation, PaymentGatewayError
from bookstore.inventory.ledger import get_book
from bookstore.inventory.management import remove_book
from bookstore.order.administration import delete_order, update_order_status
from bookstore.order.cancellation import cancel_order
from bookstore.order.order import Order
from bookstore.order.payment import reconcile_payment
from protean import current_domain
from protean.exceptions import ValidationError


def _repo():
    return current_domain.repository_for(Order)


def _store_order(user_id="user-1", payment_method="cash", total_price=10.0, **extra):
    order = Order.place(
        user_id=user_id,
        items=[{"book_id": "book-1", "title": "Dune", "image": "", "unit_price": total_price, "quantity": 1}],
        payment_method=payment_method,
        **extra,
    )
    _repo().add(order)
    return order


@pytest.fixture()
def placed_order(checkout, cart_store, make_book):
    dune = make_book(title="Dune", price=10.0, stock=5)
    emma = make_book(title="Emma", price=7.5, stock=2)
    cart_store.add_item("user-1", dune, 2)
    cart_store.add_item("user-1", emma, 1)
    order = checkout.place_order("user-1", "cash")
    return {"order": order, "dune": dune, "emma": emma}


class TestLookups:
    def test_get_for_user(self, placed_order):
        order = placed_order["order"]
        assert _repo().get_for_user(order.id, "user-1").total == 27.5

    def test_other_users_order_reads_as_missing(self, placed_order):
        with pytest.raises(OrderNotFound):
            _repo().get_for_user(placed_order["order"].id, "user-2")

    def test_unknown_order(self):
        with pytest.raises(OrderNotFound):
            _repo().get_order("no-such-order")


class TestPaging:
    def test_user_pages(self):
        for _ in range(5):
            _store_order(user_id="user-1")
        _store_order(user_id="user-2")

        first = _repo().page_for_user("user-1", page=1, limit=2)
        last = _repo().page_for_user("user-1", page=3, limit=2)

        assert first.total_orders == 5
        assert first.total_pages == 3
        assert len(first.orders) == 2
        assert len(last.orders) == 1
        assert all(o.user_id == "user-1" for o in first.orders + last.orders)

    def test_page_below_one_reads_first_page(self):
        _store_order()
        page = _repo().page_for_user("user-1", page=0, limit=10)
        assert page.current_page == 1
        assert len(page.orders) == 1

    def test_no_orders(self):
        page = _repo().page_for_user("user-1")
        assert page.orders == []
        assert page.total_pages == 0

    def test_admin_filters(self):
        _store_order(user_id="user-1")
        _store_order(user_id="user-2", payment_method="paymob", payment_link="https://pay/1", payment_order_id="9")
        shipped = _store_order(user_id="user-3")
        update_order_status(shipped.id, status="shipped")

        assert _repo().page_all().total_orders == 3
        assert _repo().page_all(payment_method="paymob").total_orders == 1
        assert _repo().page_all(payment_status="pendingPayment").orders[0].user_id == "user-2"
        assert [o.id for o in _repo().page_all(status="shipped").orders] == [shipped.id]


class TestAdministration:
    def test_update_status(self, placed_order, cache):
        cache.set("__cache__/orders", {"orders": []}, ttl=60)
        order = update_order_status(placed_order["order"].id, status="shipped")

        assert order.status == "shipped"
        assert order.payment_status == "pending"
        assert _repo().get_order(order.id).status == "shipped"
        assert cache.get("__cache__/orders") is None

    def test_update_both_fields(self, placed_order):
        order = update_order_status(placed_order["order"].id, status="delivered", payment_status="paid")
        assert (order.status, order.payment_status) == ("delivered", "paid")

    def test_update_leaves_total(self, placed_order):
        order = update_order_status(placed_order["order"].id, payment_status="paid")
        assert order.total == 27.5

    def test_update_needs_a_field(self, placed_order):
        with pytest.raises(ValidationError):
            update_order_status(placed_order["order"].id)

    def test_invalid_status(self, placed_order):
        with pytest.raises(ValidationError):
            update_order_status(placed_order["order"].id, status="misplaced")
        assert _repo().get_order(placed_order["order"].id).status == "pending"

    def test_update_unknown_order(self):
        with pytest.raises(OrderNotFound):
            update_order_status("no-such-order", status="shipped")

    def test_delete(self, placed_order):
        delete_order(placed_order["order"].id)
        with pytest.raises(OrderNotFound):
            _repo().get_order(placed_order["order"].id)

    def test_delete_unknown(self):
        with pytest.raises(OrderNotFound):
            delete_order("no-such-order")


class TestCancellation:
    def test_cancel_restores_stock(self, placed_order):
        order = cancel_order(placed_order["order"].id, "user-1")

        assert order.status == "cancelled"
        assert get_book(placed_order["dune"]).stock == 5
        assert get_book(placed_order["emma"]).stock == 2

    def test_removed_books_are_not_restocked(self, placed_order):
        remove_book(placed_order["emma"])
        cancel_order(placed_order["order"].id, "user-1")
        assert get_book(placed_order["dune"]).stock == 5

    def test_cannot_cancel_twice(self, placed_order):
        cancel_order(placed_order["order"].id, "user-1")
        with pytest.raises(OrderNotCancellable):
            cancel_order(placed_order["order"].id, "user-1")
        assert get_book(placed_order["dune"]).stock == 5

    def test_cannot_cancel_shipped(self, placed_order):
        update_order_status(placed_order["order"].id, status="shipped")
        with pytest.raises(OrderNotCancellable):
            cancel_order(placed_order["order"].id, "user-1")
        assert get_book(placed_order["dune"]).stock == 3

    def test_cannot_cancel_someone_elses(self, placed_order):
        with pytest.raises(OrderNotFound):
            cancel_order(placed_order["order"].id, "user-2")


@pytest.fixture()
def gateway_order(checkout, cart_store, make_book):
    book_id = make_book(title="Dune", price=12.0, stock=3)
    cart_store.add_item("user-1", book_id, 1)
    return {"order": checkout.place_order("user-1", "paymob"), "book": book_id}


class TestCancellingGatewayOrders:
    def test_unsettled_order_is_cancelled(self, gateway, gateway_order):
        order = cancel_order(gateway_order["order"].id, "user-1")

        assert order.status == "cancelled"
        assert get_book(gateway_order["book"]).stock == 3
        assert gateway.calls_to("is_settled") == [
            {"method": "is_settled", "gateway_order_id": gateway_order["order"].payment_order_id}
        ]

    def test_settled_payment_blocks_cancellation(self, gateway, gateway_order):
        gateway.settle(gateway_order["order"].payment_order_id)

        with pytest.raises(OrderNotCancellable, match="already paid"):
            cancel_order(gateway_order["order"].id, "user-1")

        stored = _repo().get(gateway_order["order"].id)
        assert stored.status == "pending"
        assert stored.payment_status == "paid"
        assert get_book(gateway_order["book"]).stock == 2

    def test_gateway_error_leaves_order_pending(self, gateway, gateway_order):
        gateway.configure(should_succeed=False, failure_reason="Paymob down")

        with pytest.raises(PaymentGatewayError):
            cancel_order(gateway_order["order"].id, "user-1")

        stored = _repo().get(gateway_order["order"].id)
        assert stored.status == "pending"
        assert stored.payment_status == "pendingPayment"
        assert get_book(gateway_order["book"]).stock == 2

    def test_late_settlement_is_refused(self, gateway, gateway_order):
        cancel_order(gateway_order["order"].id, "user-1")
        gateway.settle(gateway_order["order"].payment_order_id)

        with pytest.raises(PaymentAfterCancellation):
            reconcile_payment(gateway_order["order"].id, "user-1")

        stored = _repo().get(gateway_order["order"].id)
        assert stored.status == "cancelled"
        assert stored.payment_status == "pendingPayment"
        assert get_book(gateway_order["book"]).stock == 3
