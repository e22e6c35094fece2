"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and PaymobGateway
(production) without changing any domain or application code.

Every failure, whether transport, protocol or an unusable response, surfaces
as ``PaymentGatewayError``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentLink:
    """A hosted payment page for one gateway order."""

    gateway_order_id: str
    iframe_url: str


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def request_payment_link(self, amount: float) -> PaymentLink:
        """Register ``amount`` with the gateway and return the page the customer pays on."""
        ...

    @abstractmethod
    def is_settled(self, gateway_order_id: str) -> bool:
        """Ask the gateway whether the order's funds have been captured."""
        ...
