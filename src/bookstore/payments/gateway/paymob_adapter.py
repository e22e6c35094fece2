"""Paymob Accept gateway adapter.

A payment link takes three calls: an auth token, an ecommerce order carrying
the amount in cents, and a payment key for that order. The customer pays on
the hosted iframe built from the payment key. Settlement is read back from the
ecommerce order.
"""

import requests
import structlog

from bookstore.config import Settings
from bookstore.errors import PaymentGatewayError
from bookstore.payments.gateway.port import PaymentGateway, PaymentLink

logger = structlog.get_logger(__name__)

PAYMENT_KEY_EXPIRATION = 3600

# Paymob insists on billing data even when nothing is shipped
_PLACEHOLDER_BILLING = {
    "apartment": "NA",
    "email": "customer@example.com",
    "floor": "NA",
    "first_name": "NA",
    "street": "NA",
    "building": "NA",
    "phone_number": "NA",
    "shipping_method": "PKG",
    "postal_code": "NA",
    "city": "NA",
    "country": "NA",
    "last_name": "NA",
    "state": "NA",
}


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


class PaymobGateway(PaymentGateway):
    def __init__(
        self,
        api_key: str,
        integration_id: int,
        iframe_id: int,
        base_url: str = "https://accept.paymob.com/api",
        currency: str = "EGP",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.integration_id = integration_id
        self.iframe_id = iframe_id
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymobGateway":
        return cls(
            api_key=settings.paymob_api_key,
            integration_id=settings.paymob_integration_id,
            iframe_id=settings.paymob_iframe_id,
            base_url=settings.paymob_base_url,
            currency=settings.paymob_currency,
            timeout=settings.gateway_timeout_seconds,
        )

    # -------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------
    def _call(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.Timeout:
            raise PaymentGatewayError(f"timed out calling {path}") from None
        except requests.HTTPError as exc:
            raise PaymentGatewayError(f"{path} returned HTTP {exc.response.status_code}") from exc
        except (requests.RequestException, ValueError) as exc:
            raise PaymentGatewayError(f"{path} failed: {exc}") from exc

    def _require(self, body: dict, key: str, path: str):
        value = body.get(key)
        if value in (None, ""):
            raise PaymentGatewayError(f"{path} response has no '{key}'")
        return value

    def _auth_token(self) -> str:
        body = self._call("POST", "/auth/tokens", json={"api_key": self.api_key})
        return self._require(body, "token", "/auth/tokens")

    # -------------------------------------------------------------------
    # PaymentGateway
    # -------------------------------------------------------------------
    def request_payment_link(self, amount: float) -> PaymentLink:
        amount_cents = to_cents(amount)
        token = self._auth_token()

        order = self._call(
            "POST",
            "/ecommerce/orders",
            json={
                "auth_token": token,
                "delivery_needed": False,
                "amount_cents": str(amount_cents),
                "currency": self.currency,
                "items": [],
            },
        )
        gateway_order_id = str(self._require(order, "id", "/ecommerce/orders"))

        payment_key = self._call(
            "POST",
            "/acceptance/payment_keys",
            json={
                "auth_token": token,
                "amount_cents": str(amount_cents),
                "expiration": PAYMENT_KEY_EXPIRATION,
                "order_id": gateway_order_id,
                "currency": self.currency,
                "integration_id": self.integration_id,
                "billing_data": _PLACEHOLDER_BILLING,
            },
        )
        payment_token = self._require(payment_key, "token", "/acceptance/payment_keys")

        logger.info("paymob_order_registered", gateway_order_id=gateway_order_id, amount_cents=amount_cents)
        return PaymentLink(
            gateway_order_id=gateway_order_id,
            iframe_url=f"{self.base_url}/acceptance/iframes/{self.iframe_id}?payment_token={payment_token}",
        )

    def is_settled(self, gateway_order_id: str) -> bool:
        token = self._auth_token()
        order = self._call(
            "GET",
            f"/ecommerce/orders/{gateway_order_id}",
            headers={"Authorization": f"Bearer {token}"},
        )

        if order.get("is_paid") is True:
            return True
        paid = order.get("paid_amount_cents") or 0
        expected = order.get("amount_cents") or 0
        return bool(expected) and int(paid) >= int(expected)
