"""Configurable fake payment gateway for development and testing.

This adapter simulates Paymob without any external calls. It can be configured
at runtime to succeed, fail, stall or hand back an empty link, and it records
every call so tests can assert on what the checkout asked for.
"""

import threading
import time
from uuid import uuid4

from bookstore.errors import PaymentGatewayError
from bookstore.payments.gateway.port import PaymentGateway, PaymentLink


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.latency: float = 0.0
        self.empty_link: bool = False
        self.on_request = None
        self.calls: list[dict] = []
        self._settled: set[str] = set()
        self._lock = threading.Lock()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Gateway unavailable",
        latency: float = 0.0,
        empty_link: bool = False,
        on_request=None,
    ) -> None:
        """Configure gateway behavior at runtime.

        ``on_request`` is called with the amount before a link is issued; tests
        use it to pause one checkout while another runs.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency
        self.empty_link = empty_link
        self.on_request = on_request

    def settle(self, gateway_order_id: str) -> None:
        """Simulate the customer completing payment on the hosted page."""
        with self._lock:
            self._settled.add(str(gateway_order_id))

    def request_payment_link(self, amount: float) -> PaymentLink:
        with self._lock:
            self.calls.append({"method": "request_payment_link", "amount": amount})

        if self.on_request is not None:
            self.on_request(amount)
        if self.latency:
            time.sleep(self.latency)
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)
        if self.empty_link:
            return PaymentLink(gateway_order_id="", iframe_url="")

        gateway_order_id = f"fake_ord_{uuid4().hex[:12]}"
        return PaymentLink(
            gateway_order_id=gateway_order_id,
            iframe_url=f"https://payments.example.test/iframes/1?payment_token={gateway_order_id}",
        )

    def is_settled(self, gateway_order_id: str) -> bool:
        with self._lock:
            self.calls.append({"method": "is_settled", "gateway_order_id": gateway_order_id})

        if self.latency:
            time.sleep(self.latency)
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)
        with self._lock:
            return str(gateway_order_id) in self._settled

    def calls_to(self, method: str) -> list[dict]:
        with self._lock:
            return [call for call in self.calls if call["method"] == method]
