"""
IQScaler - Payment API Routes
Certificate checkout through Razorpay
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from iqscaler.api.deps import AdminUser, CurrentUser, DbSession
from iqscaler.schemas.common import MessageResponse
from iqscaler.schemas.payment import (
    CreateOrderRequest,
    CreateOrderResponse,
    MarkFailedRequest,
    PaymentResponse,
    PriceResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from iqscaler.schemas.result import ResultWithUser
from iqscaler.services.payments import PaymentService
from iqscaler.services.razorpay import PaymentGateway, get_payment_gateway

router = APIRouter(prefix="/payments", tags=["Payments"])

Gateway = Annotated[PaymentGateway, Depends(get_payment_gateway)]


@router.get(
    "/price",
    response_model=PriceResponse,
    summary="Certificate price in paise",
)
async def get_certificate_price(current_user: CurrentUser) -> PriceResponse:
    return PriceResponse(amount=PaymentService.get_price())


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    summary="Open a checkout order for a certificate",
)
async def create_order(
    data: CreateOrderRequest,
    current_user: CurrentUser,
    db: DbSession,
    gateway: Gateway,
) -> CreateOrderResponse:
    order = await PaymentService(db, gateway).create_order(data.result_id, current_user)
    return CreateOrderResponse(**order)


@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    summary="Verify a completed checkout",
)
async def verify_payment(
    data: VerifyPaymentRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> VerifyPaymentResponse:
    result = await PaymentService(db).verify(
        order_id=data.razorpay_order_id,
        payment_id=data.razorpay_payment_id,
        signature=data.razorpay_signature,
        result_id=data.result_id,
    )
    return VerifyPaymentResponse(
        success=True,
        result_details=ResultWithUser.model_validate(result),
    )


@router.put(
    "/fail",
    response_model=MessageResponse,
    summary="Mark a checkout as failed",
)
async def mark_payment_failed(
    data: MarkFailedRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    await PaymentService(db).mark_failed(data.order_id)
    return MessageResponse(message="Payment marked as failed")


@router.get(
    "/history",
    response_model=list[PaymentResponse],
    summary="Payment history (admin)",
)
async def get_payment_history(admin: AdminUser, db: DbSession) -> list[PaymentResponse]:
    payments = await PaymentService(db).list_history()
    return [PaymentResponse.model_validate(p) for p in payments]
