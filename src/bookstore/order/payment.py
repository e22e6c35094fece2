"""Payment reconciliation — sync an order's payment status with the gateway.

The gateway is only consulted while the order is unpaid. Once the gateway
reports settlement the order flips to paid; asking again afterwards returns
the order as it is without another gateway call.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookstore.cache import invalidate_responses
from bookstore.domain import bookstore
from bookstore.errors import NoPaymentLink, PaymentAfterCancellation
from bookstore.order.order import Order
from bookstore.order.repository import order_locks
from bookstore.payments.gateway import get_gateway
from bookstore.payments.guard import call_gateway

logger = structlog.get_logger(__name__)


@bookstore.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)


@bookstore.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.confirm_payment()
        repo.add(order)
        return order


def reconcile_payment(order_id, user_id=None) -> Order:
    """Check the gateway for settlement of ``order_id``.

    ``user_id`` scopes the lookup to that user's orders; admins pass None.
    Gateway failures leave the order untouched.
    """
    repo = current_domain.repository_for(Order)
    order = repo.get_order(order_id) if user_id is None else repo.get_for_user(order_id, user_id)

    if not order.has_gateway_reference:
        raise NoPaymentLink(str(order.id))
    if order.is_paid:
        return order

    settled = call_gateway("is_settled", get_gateway().is_settled, order.payment_order_id)
    if not settled:
        logger.info("payment_not_settled", order_id=str(order.id), payment_order_id=order.payment_order_id)
        return order

    with order_locks.hold(order.id):
        try:
            order = current_domain.process(ConfirmPayment(order_id=str(order.id)), asynchronous=False)
        except PaymentAfterCancellation:
            logger.error(
                "payment_settled_on_cancelled_order",
                order_id=str(order.id),
                payment_order_id=order.payment_order_id,
            )
            raise

    logger.info("payment_settled", order_id=str(order.id), payment_order_id=order.payment_order_id)
    invalidate_responses("payment_settled")
    return order
