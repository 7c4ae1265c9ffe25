"""
IQScaler - Payment Schemas
Pydantic schemas for certificate checkout with Razorpay
"""
import uuid
from datetime import datetime

from pydantic import Field

from iqscaler.models.payment import PaymentStatus
from iqscaler.schemas.common import CamelModel, UserSummary
from iqscaler.schemas.result import ResultWithUser


class CreateOrderRequest(CamelModel):
    result_id: uuid.UUID


class CreateOrderResponse(CamelModel):
    """Everything the checkout widget needs to open."""
    order_id: str
    amount: int  # paise
    currency: str
    key_id: str
    user_name: str
    user_email: str


class VerifyPaymentRequest(CamelModel):
    """Fields posted back by the Razorpay checkout handler."""
    razorpay_order_id: str = Field(alias="razorpay_order_id")
    razorpay_payment_id: str = Field(alias="razorpay_payment_id")
    razorpay_signature: str = Field(alias="razorpay_signature")
    result_id: uuid.UUID


class VerifyPaymentResponse(CamelModel):
    success: bool
    result_details: ResultWithUser | None = None


class MarkFailedRequest(CamelModel):
    order_id: str


class PaymentResponse(CamelModel):
    """Payment history row (admin)."""
    id: uuid.UUID
    user: UserSummary | None = None
    result_id: uuid.UUID
    razorpay_order_id: str
    razorpay_payment_id: str | None = None
    amount: float
    status: PaymentStatus
    created_at: datetime


class PriceResponse(CamelModel):
    amount: int  # paise
