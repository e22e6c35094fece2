"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from bookstore.domain import bookstore


@bookstore.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into an order and its stock withdrawn."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    total = Float(required=True)
    item_count = Integer(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)


@bookstore.event(part_of="Order")
class PaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)


@bookstore.event(part_of="Order")
class OrderPaid:
    """The gateway reported the order's payment as settled."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_order_id = String(required=True)
    paid_at = DateTime(required=True)


@bookstore.event(part_of="Order")
class OrderCancelled:
    """The customer cancelled an unpaid order; its stock went back on the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)
