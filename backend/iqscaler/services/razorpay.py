"""
IQScaler - Razorpay Client
Minimal Orders API client; only order creation talks to the gateway
"""
import logging
from typing import Any, Protocol

import httpx

from iqscaler.core.config import settings
from iqscaler.core.exceptions import ConfigurationError, UpstreamServiceError

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    key_id: str

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        ...


class RazorpayClient:
    """Creates Razorpay orders over HTTPS with basic auth."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Open an order.

        Args:
            amount: Amount in the smallest currency unit (paise)
            currency: ISO currency code
            receipt: Merchant receipt reference
            notes: Free-form key/value notes stored with the order

        Returns:
            The gateway's order object (its "id" is the order id)
        """
        if not self.key_id or not self.key_secret:
            raise ConfigurationError("Payment gateway credentials are not configured")

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/orders",
                    auth=(self.key_id, self.key_secret),
                    json=payload,
                )
                response.raise_for_status()
                order = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Razorpay order creation rejected: {e.response.status_code}")
            raise UpstreamServiceError("Payment gateway rejected the order") from e
        except httpx.HTTPError as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise UpstreamServiceError("Payment gateway is unavailable") from e

        if not order.get("id"):
            raise UpstreamServiceError("Payment gateway returned no order id")
        return order


def get_payment_gateway() -> PaymentGateway:
    """Dependency returning the configured gateway client."""
    return RazorpayClient(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_API_URL,
        timeout=settings.RAZORPAY_TIMEOUT_SECONDS,
    )
