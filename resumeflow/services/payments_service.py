from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import httpx

from resumeflow.core.config import settings
from resumeflow.core.entitlement_store import EntitlementStore, PaymentOrder
from resumeflow.core.errors import (
    InvalidInput,
    PaymentGatewayError,
    PaymentVerificationFailed,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

RAZORPAY_API_BASE = "https://api.razorpay.com/v1"


@dataclass(frozen=True)
class CreditPlan:
    id: str
    name: str
    amount: int
    credits: int


PLANS: dict[str, CreditPlan] = {
    "starter": CreditPlan(id="starter", name="Starter Pack", amount=499, credits=10),
    "pro": CreditPlan(id="pro", name="Pro Pack", amount=1499, credits=50),
}


class RazorpayGateway:
    def __init__(
        self,
        key_id: str | None,
        key_secret: str | None,
        *,
        base_url: str = RAZORPAY_API_BASE,
        timeout_s: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.key_id = (key_id or "").strip() or None
        self._key_secret = (key_secret or "").strip() or None
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self._key_secret)

    def create_order(self, *, amount: int, currency: str, receipt: str, notes: dict[str, str]) -> dict[str, Any]:
        if not self.configured:
            raise PaymentGatewayError("Payments are not configured.")
        try:
            with httpx.Client(
                timeout=self._timeout_s,
                auth=(self.key_id, self._key_secret),
                transport=self._transport,
            ) as client:
                response = client.post(
                    f"{self._base_url}/orders",
                    json={"amount": amount, "currency": currency, "receipt": receipt, "notes": notes},
                )
        except httpx.HTTPError as exc:
            logger.warning("razorpay_order_request_failed: %s", exc)
            raise PaymentGatewayError() from exc

        if response.status_code >= 400:
            logger.warning("razorpay_order_rejected status=%s body=%s", response.status_code, response.text[:300])
            raise PaymentGatewayError("The payment provider rejected the order.")
        try:
            payload = response.json()
        except ValueError as exc:
            raise PaymentGatewayError("The payment provider returned an invalid response.") from exc
        if not isinstance(payload, dict) or not payload.get("id"):
            raise PaymentGatewayError("The payment provider returned an invalid response.")
        return payload

    def signature_valid(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self._key_secret:
            return False
        message = f"{order_id}|{payment_id}".encode("utf-8")
        expected = hmac.new(self._key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)


@lru_cache(maxsize=1)
def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway(settings.razorpay_key_id, settings.razorpay_key_secret)


def create_order(
    *,
    user_id: str | None,
    plan_id: str,
    store: EntitlementStore,
    gateway: RazorpayGateway,
) -> dict[str, Any]:
    if not user_id:
        raise Unauthenticated()
    plan = PLANS.get((plan_id or "").strip().lower())
    if plan is None:
        raise InvalidInput(f"Unknown plan '{plan_id}'. Choose one of: {', '.join(sorted(PLANS))}.")

    currency = settings.razorpay_currency
    order = gateway.create_order(
        amount=plan.amount * 100,
        currency=currency,
        receipt=f"receipt_{uuid.uuid4().hex[:20]}",
        notes={"userId": user_id, "planId": plan.id},
    )
    order_id = str(order["id"])
    store.record_order(
        PaymentOrder(
            order_id=order_id,
            user_id=user_id,
            plan_id=plan.id,
            credits=plan.credits,
            amount=int(order.get("amount") or plan.amount * 100),
            currency=str(order.get("currency") or currency),
            status="created",
            payment_id=None,
        )
    )
    logger.info("payment_order_created user=%s plan=%s order=%s", user_id, plan.id, order_id)
    return {
        "id": order_id,
        "amount": int(order.get("amount") or plan.amount * 100),
        "currency": str(order.get("currency") or currency),
        "key_id": gateway.key_id,
        "plan_id": plan.id,
        "credits": plan.credits,
    }


def verify_payment(
    *,
    user_id: str | None,
    order_id: str,
    payment_id: str,
    signature: str,
    store: EntitlementStore,
    gateway: RazorpayGateway,
) -> dict[str, Any]:
    """Apply a paid order's credits exactly once, keyed by the provider order id."""
    if not user_id:
        raise Unauthenticated()
    order_id = (order_id or "").strip()
    payment_id = (payment_id or "").strip()
    signature = (signature or "").strip()
    if not order_id or not payment_id or not signature:
        raise InvalidInput("Order id, payment id and signature are required.")

    if not gateway.signature_valid(order_id, payment_id, signature):
        logger.warning("payment_signature_invalid user=%s order=%s", user_id, order_id)
        raise PaymentVerificationFailed("Invalid payment signature.")

    order = store.get_order(order_id)
    if order is None or order.user_id != user_id:
        logger.warning("payment_order_mismatch user=%s order=%s", user_id, order_id)
        raise PaymentVerificationFailed("Unknown order.")

    result = store.top_up(
        user_id,
        order.credits,
        reference=f"razorpay:{order_id}",
        meta={"gateway": "razorpay", "plan_id": order.plan_id, "order_id": order_id, "payment_id": payment_id},
    )
    store.mark_order_paid(order_id, payment_id)
    return {"success": True, "credits": result.balance, "applied": result.applied}
