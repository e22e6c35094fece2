"""Order cancellation by the customer.

Only a pending order that has not been paid can be cancelled. Its items go
back on the shelf in the same unit of work that marks it cancelled; items
whose book has since been removed are not restocked.

An unpaid gateway order is checked with the gateway first, under the order
lock. If the payment has settled the order is marked paid instead and the
cancellation is refused. If the gateway cannot be reached nothing changes and
the caller gets the gateway error. A settlement that lands after the check is
refused by reconciliation as a payment on a cancelled order.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookstore.cache import invalidate_responses
from bookstore.domain import bookstore
from bookstore.errors import OrderNotCancellable
from bookstore.inventory.book import Book
from bookstore.inventory.ledger import find_book, stock_locks
from bookstore.order.order import Order
from bookstore.order.payment import ConfirmPayment
from bookstore.order.repository import order_locks
from bookstore.payments.gateway import get_gateway
from bookstore.payments.guard import call_gateway

logger = structlog.get_logger(__name__)


@bookstore.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


@bookstore.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_for_user(command.order_id, command.user_id)
        order.cancel()

        book_repo = current_domain.repository_for(Book)
        for item in order.items:
            book = find_book(item.book_id)
            if book is None:
                continue
            book.return_stock(item.quantity)
            book_repo.add(book)

        repo.add(order)
        return order


def _settled_with_gateway(order: Order) -> bool:
    if not order.has_gateway_reference or order.is_paid:
        return False
    return call_gateway("is_settled", get_gateway().is_settled, order.payment_order_id)


def cancel_order(order_id, user_id) -> Order:
    order = current_domain.repository_for(Order).get_for_user(order_id, user_id)
    book_ids = [str(item.book_id) for item in order.items]

    with order_locks.hold(order.id):
        if _settled_with_gateway(order):
            current_domain.process(ConfirmPayment(order_id=str(order.id)), asynchronous=False)
            logger.info(
                "payment_settled_before_cancel",
                order_id=str(order.id),
                payment_order_id=order.payment_order_id,
            )
            invalidate_responses("payment_settled")
            raise OrderNotCancellable(str(order.id), "order is already paid")

        with stock_locks.hold(*book_ids):
            order = current_domain.process(
                CancelOrder(order_id=str(order.id), user_id=str(user_id)),
                asynchronous=False,
            )

    logger.info("order_cancelled", order_id=str(order.id), user_id=str(user_id))
    invalidate_responses("order_cancelled")
    return order
