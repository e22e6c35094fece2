"""Order aggregate — an immutable snapshot of a cart at checkout time.

Items carry a copy of each book's title, image and price as they were when the
order was placed; later catalogue changes never reach an existing order. After
creation only ``status`` and ``payment_status`` move.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from bookstore.domain import bookstore
from bookstore.errors import OrderNotCancellable, PaymentAfterCancellation
from bookstore.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class PaymentMethod(Enum):
    CASH = "cash"
    PAYMOB = "paymob"


class PaymentStatus(Enum):
    PENDING = "pending"
    PENDING_PAYMENT = "pendingPayment"
    PAID = "paid"


# Payment methods that need a gateway link before the order is committed
GATEWAY_METHODS = {PaymentMethod.PAYMOB}


def coerce_choice(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError({field: [f"'{value}' is not a valid {field}"]}) from None


def order_total(items) -> float:
    """Sum of unit price times quantity, rounded to cents."""
    return round(sum(item["unit_price"] * item["quantity"] for item in items), 2)


@bookstore.entity(part_of="Order")
class OrderItem:
    book_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    image = String(max_length=1024, default="")
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)


@bookstore.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_link = String(max_length=2048)
    payment_order_id = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def gateway_orders_carry_a_reference(self):
        if PaymentMethod(self.payment_method) in GATEWAY_METHODS and not self.payment_order_id:
            raise ValidationError({"payment_order_id": ["Gateway orders must carry a payment reference"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, items, payment_method, payment_link=None, payment_order_id=None):
        """Create an order from already-validated cart lines.

        ``items`` is a list of dicts with book_id, title, image, unit_price and
        quantity. The total is computed once here and never recomputed.
        """
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        method = coerce_choice(PaymentMethod, payment_method, "payment_method")
        payment_status = (
            PaymentStatus.PENDING_PAYMENT if method in GATEWAY_METHODS else PaymentStatus.PENDING
        )
        now = datetime.now(UTC)

        order = cls(
            user_id=user_id,
            items=[OrderItem(**item) for item in items],
            total=order_total(items),
            status=OrderStatus.PENDING.value,
            payment_method=method.value,
            payment_status=payment_status.value,
            payment_link=payment_link,
            payment_order_id=payment_order_id,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                total=order.total,
                item_count=sum(item["quantity"] for item in items),
                payment_method=method.value,
                placed_at=now,
            )
        )
        return order

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def has_gateway_reference(self) -> bool:
        return bool(self.payment_order_id)

    # -------------------------------------------------------------------
    # Admin updates
    # -------------------------------------------------------------------
    def change_status(self, new_status):
        target = coerce_choice(OrderStatus, new_status, "status")
        previous = self.status
        if previous == target.value:
            return

        self.status = target.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderStatusChanged(order_id=str(self.id), previous_status=previous, new_status=target.value)
        )

    def change_payment_status(self, new_status):
        target = coerce_choice(PaymentStatus, new_status, "payment_status")
        previous = self.payment_status
        if previous == target.value:
            return

        self.payment_status = target.value
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PaymentStatusChanged(order_id=str(self.id), previous_status=previous, new_status=target.value)
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def confirm_payment(self):
        """Mark the order paid after the gateway reports settlement. Repeats are no-ops.

        A cancelled order has already released its stock, so a late settlement
        is refused and left for a refund.
        """
        if self.is_paid:
            return
        if self.status == OrderStatus.CANCELLED.value:
            raise PaymentAfterCancellation(str(self.id))

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = now
        self.raise_(OrderPaid(order_id=str(self.id), payment_order_id=self.payment_order_id, paid_at=now))

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self):
        if self.status != OrderStatus.PENDING.value:
            raise OrderNotCancellable(str(self.id), f"order is {self.status}")
        if self.is_paid:
            raise OrderNotCancellable(str(self.id), "order is already paid")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(OrderCancelled(order_id=str(self.id), user_id=str(self.user_id), cancelled_at=now))
