from fastapi import APIRouter, Depends, Request

from resumeflow.api.dependencies import entitlement_store, payment_gateway
from resumeflow.core.entitlement_store import EntitlementStore
from resumeflow.core.rate_limit import rate_limit
from resumeflow.core.security import current_user_id
from resumeflow.schemas.api import (
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from resumeflow.services.payments_service import RazorpayGateway, create_order, verify_payment

router = APIRouter()


@router.post("/payments/razorpay/order", response_model=CreateOrderResponse)
@rate_limit("10/minute")
def razorpay_order(
    request: Request,
    payload: CreateOrderRequest,
    user_id: str = Depends(current_user_id),
    store: EntitlementStore = Depends(entitlement_store),
    gateway: RazorpayGateway = Depends(payment_gateway),
):
    _ = request
    order = create_order(user_id=user_id, plan_id=payload.plan_id, store=store, gateway=gateway)
    return CreateOrderResponse(**order)


@router.post("/payments/razorpay/verify", response_model=VerifyPaymentResponse)
def razorpay_verify(
    payload: VerifyPaymentRequest,
    user_id: str = Depends(current_user_id),
    store: EntitlementStore = Depends(entitlement_store),
    gateway: RazorpayGateway = Depends(payment_gateway),
):
    result = verify_payment(
        user_id=user_id,
        order_id=payload.razorpay_order_id,
        payment_id=payload.razorpay_payment_id,
        signature=payload.razorpay_signature,
        store=store,
        gateway=gateway,
    )
    return VerifyPaymentResponse(**result)
