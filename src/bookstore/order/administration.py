"""Order administration — status updates and hard deletes."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from bookstore.cache import invalidate_responses
from bookstore.domain import bookstore
from bookstore.order.order import Order
from bookstore.order.repository import order_locks

logger = structlog.get_logger(__name__)


@bookstore.command(part_of="Order")
class UpdateOrderStatus:
    """Set either or both of an order's status fields. Omitted fields keep their value."""

    order_id = Identifier(required=True)
    status = String(max_length=50)
    payment_status = String(max_length=50)


@bookstore.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


@bookstore.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)

        if command.status:
            order.change_status(command.status)
        if command.payment_status:
            order.change_payment_status(command.payment_status)

        repo.add(order)
        return order

    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        repo._dao.delete(order)


def update_order_status(order_id, status=None, payment_status=None) -> Order:
    if not status and not payment_status:
        raise ValidationError({"status": ["Provide status, payment status or both"]})

    with order_locks.hold(order_id):
        order = current_domain.process(
            UpdateOrderStatus(order_id=order_id, status=status, payment_status=payment_status),
            asynchronous=False,
        )
    logger.info(
        "order_status_updated",
        order_id=str(order_id),
        status=order.status,
        payment_status=order.payment_status,
    )
    invalidate_responses("order_status_updated")
    return order


def delete_order(order_id) -> None:
    with order_locks.hold(order_id):
        current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    logger.info("order_deleted", order_id=str(order_id))
    invalidate_responses("order_deleted")
