"""
Razorpay Gateway
Order creation through the Razorpay SDK and checkout signature checks
"""

import hashlib
import hmac
import logging
from typing import Optional

import razorpay
from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from razorpay.errors import BadRequestError, GatewayError, ServerError

from app.config import settings

logger = logging.getLogger(__name__)


class RazorpayGateway:
    """Razorpay client wrapper"""

    def __init__(self):
        self._client = None
        self._client_key = None

    def _get_client(self) -> razorpay.Client:
        if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Payment gateway is not configured"
            )
        if self._client is None or self._client_key != settings.RAZORPAY_KEY_ID:
            self._client = razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))
            self._client_key = settings.RAZORPAY_KEY_ID
        return self._client

    @staticmethod
    def key_id() -> Optional[str]:
        return settings.RAZORPAY_KEY_ID

    @staticmethod
    def to_paise(amount: float) -> int:
        return int(round(float(amount) * 100))

    async def create_order(self, amount_paise: int, receipt: str, notes: Optional[dict] = None) -> dict:
        """
        Create a Razorpay order

        Args:
            amount_paise: Amount in paise
            receipt: Merchant receipt (max 40 chars)
            notes: Free-form key/values stored with the order

        Returns:
            Razorpay order (id, amount, currency, receipt, status)

        Raises:
            HTTPException: 502 when Razorpay rejects the request or is unreachable
        """
        client = self._get_client()
        order_data = {
            "amount": amount_paise,
            "currency": settings.CURRENCY,
            "receipt": receipt[:40],
            "notes": {k: str(v) for k, v in (notes or {}).items()},
        }

        try:
            # The SDK is blocking (requests)
            order = await run_in_threadpool(client.order.create, data=order_data)
        except (BadRequestError, ServerError, GatewayError) as e:
            logger.error("[PAYMENT] Razorpay order failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to create payment order"
            )
        except OSError as e:
            logger.error("[PAYMENT] Razorpay unreachable: %s", e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Payment gateway unavailable"
            )

        logger.info("[PAYMENT] Razorpay order %s created for %s paise", order.get("id"), amount_paise)
        return order

    @staticmethod
    def generate_signature(order_id: str, payment_id: str, secret: Optional[str] = None) -> str:
        """HMAC-SHA256 of 'order_id|payment_id' keyed with the Razorpay secret"""
        key = (secret or settings.RAZORPAY_KEY_SECRET or "").encode()
        return hmac.new(key, f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()

    @staticmethod
    def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
        """Constant time check of the checkout signature"""
        if not settings.RAZORPAY_KEY_SECRET or not signature:
            return False
        expected = RazorpayGateway.generate_signature(order_id, payment_id)
        return hmac.compare_digest(expected, signature)


# Create singleton instance
payment_gateway = RazorpayGateway()
