"""
Payment gateway collaborator.

The engine only needs two things from the gateway: creating a hosted
order, and the shared secret used to check the signed client callback.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional, Protocol

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError
from requests.exceptions import RequestException

from onboarding.core.logging import get_logger
from onboarding.services.common.errors import PaymentGatewayError

logger = get_logger(__name__)


class PaymentGateway(Protocol):
    key_id: Optional[str]

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> Dict[str, Any]:
        """Create a hosted order; the result carries at least ``id``."""
        ...

    def signing_secret(self) -> str:
        ...


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    """Hex HMAC-SHA256 over ``order_id|payment_id``."""
    payload = f"{order_id}|{payment_id}"
    return hmac.new(
        secret.encode(),
        payload.encode(),
        hashlib.sha256
    ).hexdigest()


def verify_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    expected = compute_signature(secret, order_id, payment_id)
    return hmac.compare_digest(expected, signature)


class RazorpayGateway:
    """Razorpay orders through the official SDK client."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: float = 30.0,
        client: Optional[razorpay.Client] = None,
    ):
        if not key_id or not key_secret:
            raise PaymentGatewayError("Razorpay credentials are not configured")
        self.key_id = key_id
        self._key_secret = key_secret
        self.timeout = timeout
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> Dict[str, Any]:
        params = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
        }
        try:
            order = self.client.order.create(data=params, timeout=self.timeout)
        except (BadRequestError, GatewayError, ServerError) as e:
            logger.error(f"Order creation error: {e}", extra={"receipt": receipt})
            raise PaymentGatewayError(
                f"Order creation failed: {e}", details={"receipt": receipt}
            ) from e
        except RequestException as e:
            logger.error(f"Order creation failed: {e}", extra={"receipt": receipt})
            raise PaymentGatewayError(str(e), details={"receipt": receipt}) from e

        if not isinstance(order, dict) or not order.get("id"):
            raise PaymentGatewayError("Gateway returned an order without an id")
        return order

    def signing_secret(self) -> str:
        return self._key_secret
