"""
IQScaler - Payment Service
Certificate checkout: gateway order creation, signature verification and payment state
"""
import hashlib
import hmac
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from iqscaler.core.config import settings
from iqscaler.core.exceptions import ConfigurationError, ResultNotFound, VerificationFailed
from iqscaler.models.payment import Payment, PaymentStatus
from iqscaler.models.result import Result
from iqscaler.models.user import User
from iqscaler.services.razorpay import PaymentGateway
from iqscaler.services.results import ResultService

logger = logging.getLogger(__name__)


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 hex digest of "order_id|payment_id", as Razorpay signs checkouts."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """Constant-time comparison of the posted signature with the expected one."""
    if not secret:
        return False
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())


class PaymentService:
    """
    Service for certificate payments.

    A Payment starts Pending and moves to Success or Failed once; later
    updates for the same order leave a terminal status alone.
    """

    def __init__(self, db: AsyncSession, gateway: PaymentGateway | None = None):
        self.db = db
        self.gateway = gateway
        self.results = ResultService(db)

    @staticmethod
    def get_price() -> int:
        """Certificate price in paise."""
        price = settings.CERTIFICATE_PRICE_PAISE
        if not price or price <= 0:
            raise ConfigurationError("Certificate price is not configured in environment variables")
        return price

    async def get_payment(self, order_id: str) -> Payment | None:
        result = await self.db.execute(
            select(Payment).where(Payment.razorpay_order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def create_order(self, result_id: uuid.UUID, user: User) -> dict:
        """
        Open a gateway order for a result's certificate and log it as Pending.

        Raises:
            ResultNotFound: If the result does not exist
            ConfigurationError: If no price is configured
            UpstreamServiceError: If the gateway call fails
        """
        result = await self.db.get(Result, result_id)
        if not result:
            raise ResultNotFound("Test Result not found")

        price = self.get_price()
        currency = settings.CERTIFICATE_CURRENCY

        order = await self.gateway.create_order(
            amount=price,
            currency=currency,
            receipt=f"receipt_{result_id}",
            notes={"resultId": str(result_id), "userId": str(user.id)},
        )

        payment = Payment(
            user_id=user.id,
            result_id=result.id,
            razorpay_order_id=order["id"],
            amount=price / 100,
            status=PaymentStatus.PENDING.value,
        )
        self.db.add(payment)
        await self.db.flush()

        logger.info(f"Payment order {order['id']} opened for result {result_id}")
        return {
            "order_id": order["id"],
            "amount": price,
            "currency": currency,
            "key_id": self.gateway.key_id,
            "user_name": user.username,
            "user_email": user.email,
        }

    async def verify(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
        result_id: uuid.UUID,
    ) -> Result:
        """
        Verify a checkout signature and unlock the certificate.

        The Payment row is matched by order id, not by result.

        Raises:
            VerificationFailed: If the signature does not match; the Payment
                is marked Failed and the Result is untouched
            ResultNotFound: If the signature matches but the result is missing
        """
        payment = await self.get_payment(order_id)

        if not verify_signature(order_id, payment_id, signature, settings.RAZORPAY_KEY_SECRET):
            if payment and not payment.is_terminal:
                payment.status = PaymentStatus.FAILED.value
            # Persist the failure before the error unwinds the request
            await self.db.commit()
            logger.warning(f"Payment verification failed for order {order_id}")
            raise VerificationFailed()

        result = await self.results.get_result(result_id)
        if not result:
            raise ResultNotFound("Test Result not found")

        # Result and Payment are written in the same transaction
        result.certificate_purchased = True
        result.payment_id = payment_id
        result.order_id = order_id

        if payment and not payment.is_terminal:
            payment.status = PaymentStatus.SUCCESS.value
            payment.razorpay_payment_id = payment_id

        await self.db.flush()
        logger.info(f"Payment {payment_id} verified for order {order_id}, result {result_id}")
        return await self.results.get_result(result_id)

    async def mark_failed(self, order_id: str) -> None:
        """Client-reported failure (e.g. checkout closed). Unknown orders are ignored."""
        payment = await self.get_payment(order_id)
        if payment and not payment.is_terminal:
            payment.status = PaymentStatus.FAILED.value
            await self.db.flush()
            logger.info(f"Payment order {order_id} marked as failed")

    async def list_history(self) -> list[Payment]:
        """All payments with their users, newest first."""
        result = await self.db.execute(
            select(Payment)
            .options(selectinload(Payment.user))
            .order_by(Payment.created_at.desc())
        )
        return list(result.scalars().all())
