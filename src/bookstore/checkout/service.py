"""Checkout orchestration — from a user's cart to a committed order.

Stages:
    INITIATED → VALIDATED → GATEWAY_REQUESTED → COMMITTED
    any stage → ABORTED

Gateway payment methods get their payment link before the order transaction
opens, so no database work ever waits on the network. The amount sent to the
gateway is checked again inside the transaction; if the cart's total moved in
between, the checkout aborts with PriceChanged.

Lock order: the user's cart lock, then the stock locks of every book in the
cart (sorted). Cart mutations take only the cart lock and admin stock changes
take only stock locks, so no two paths wait on each other in reverse.

The cart lock is held across the gateway call, which is bounded by
GATEWAY_TIMEOUT_SECONDS. The same user's cart edits wait for it, so the cart
that was quoted to the gateway is the cart that gets committed. Other users
are not affected.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.utils.globals import current_domain

from bookstore.cache import invalidate_responses
from bookstore.cart.queries import find_cart
from bookstore.cart.store import cart_locks
from bookstore.checkout.placement import PlaceOrder
from bookstore.errors import EmptyCart, PaymentGatewayError
from bookstore.inventory.ledger import check_lines, stock_locks, total_of
from bookstore.notifications.dispatch import announce_order
from bookstore.order.order import GATEWAY_METHODS, Order, PaymentMethod, coerce_choice
from bookstore.payments.gateway import get_gateway
from bookstore.payments.guard import call_gateway

logger = structlog.get_logger(__name__)


class CheckoutStage(Enum):
    INITIATED = "Initiated"
    VALIDATED = "Validated"
    GATEWAY_REQUESTED = "Gateway_Requested"
    COMMITTED = "Committed"
    ABORTED = "Aborted"


@dataclass
class CheckoutAttempt:
    user_id: str
    payment_method: str
    stage: CheckoutStage = CheckoutStage.INITIATED
    history: list[CheckoutStage] = field(default_factory=lambda: [CheckoutStage.INITIATED])
    order_id: str | None = None
    error: str | None = None

    def advance(self, stage: CheckoutStage, **context) -> None:
        self.stage = stage
        self.history.append(stage)
        logger.info(
            "checkout_stage",
            stage=stage.value,
            user_id=self.user_id,
            payment_method=self.payment_method,
            **context,
        )


class CheckoutService:
    def __init__(self, gateway=None, gateway_timeout: float | None = None) -> None:
        self._gateway = gateway
        self.gateway_timeout = gateway_timeout
        self.last_attempt: CheckoutAttempt | None = None

    @property
    def gateway(self):
        return self._gateway or get_gateway()

    def place_order(self, user_id, payment_method) -> Order:
        user_id = str(user_id)
        method = coerce_choice(PaymentMethod, payment_method, "payment_method")
        attempt = CheckoutAttempt(user_id=user_id, payment_method=method.value)
        self.last_attempt = attempt
        logger.info("checkout_stage", stage=attempt.stage.value, user_id=user_id, payment_method=method.value)

        try:
            with cart_locks.hold(user_id):
                order = self._place(attempt, method)
        except Exception as exc:
            attempt.error = type(exc).__name__
            attempt.advance(CheckoutStage.ABORTED, error=attempt.error, reason=str(exc))
            raise

        self._after_commit(order)
        return order

    def _place(self, attempt: CheckoutAttempt, method: PaymentMethod) -> Order:
        cart = find_cart(attempt.user_id)
        if cart is None or cart.is_empty:
            raise EmptyCart()
        cart_lines = cart.lines()

        # Advisory: catches unavailable books before money is asked for
        quote = total_of(check_lines(cart_lines))
        attempt.advance(CheckoutStage.VALIDATED, quote=quote)

        payment_link = payment_order_id = quoted_total = None
        if method in GATEWAY_METHODS:
            quoted_total = quote
            link = call_gateway(
                "request_payment_link",
                self.gateway.request_payment_link,
                quoted_total,
                timeout=self.gateway_timeout,
            )
            if not link or not link.iframe_url or not link.gateway_order_id:
                raise PaymentGatewayError("gateway returned an empty payment link")
            payment_link, payment_order_id = link.iframe_url, link.gateway_order_id
            attempt.advance(CheckoutStage.GATEWAY_REQUESTED, payment_order_id=payment_order_id)

        with stock_locks.hold(*(book_id for book_id, _ in cart_lines)):
            order = current_domain.process(
                PlaceOrder(
                    user_id=attempt.user_id,
                    payment_method=method.value,
                    payment_link=payment_link,
                    payment_order_id=payment_order_id,
                    quoted_total=quoted_total,
                ),
                asynchronous=False,
            )

        attempt.order_id = str(order.id)
        attempt.advance(CheckoutStage.COMMITTED, order_id=attempt.order_id, total=order.total)
        return order

    def _after_commit(self, order: Order) -> None:
        invalidate_responses("order_placed")
        announce_order(order)
