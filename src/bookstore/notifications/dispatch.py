"""Fire-and-forget dispatch of post-commit notifications.

Publishing happens on a small worker pool after the order has committed. A
failed publish is logged and dropped; it never reaches the request that
triggered it.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

import structlog

from bookstore.notifications import get_broadcaster

logger = structlog.get_logger(__name__)

ORDER_CREATED = "order.created"


class NotificationDispatcher:
    def __init__(self, max_workers: int = 2) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def fire_and_forget(self, topic: str, payload: dict) -> None:
        future = self._executor.submit(self._publish, topic, payload)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _publish(self, topic: str, payload: dict) -> None:
        try:
            result = get_broadcaster().publish(topic, payload)
        except Exception:
            logger.exception("broadcast_failed", topic=topic)
            return
        logger.debug("broadcast_sent", topic=topic, message_id=result.get("message_id"))

    def drain(self, timeout: float = 5.0) -> None:
        """Wait for in-flight publishes. Tests call this before asserting on the broadcaster."""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


_dispatcher: NotificationDispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = NotificationDispatcher()
        return _dispatcher


def reset_dispatcher() -> None:
    """Drain and discard the dispatcher singleton (useful for testing)."""
    global _dispatcher
    with _dispatcher_lock:
        dispatcher, _dispatcher = _dispatcher, None
    if dispatcher is not None:
        dispatcher.shutdown()


def announce_order(order) -> None:
    """Broadcast a newly committed order to admin dashboards."""
    payload = {
        "orderId": str(order.id),
        "userId": str(order.user_id),
        "total": order.total,
        "status": order.status,
        "paymentMethod": order.payment_method,
        "paymentStatus": order.payment_status,
    }
    try:
        get_dispatcher().fire_and_forget(ORDER_CREATED, payload)
    except RuntimeError:
        # Executor already shut down during interpreter exit
        logger.warning("broadcast_skipped", topic=ORDER_CREATED, order_id=payload["orderId"])
