from __future__ import annotations

import logging
from typing import Callable, TypeVar

from resumeflow.core.config import settings
from resumeflow.core.entitlement_store import EntitlementStore
from resumeflow.core.errors import InsufficientCredits, StoreUnavailable, Unauthenticated

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREDITS_PER_CALL = 1


class CreditGate:
    """Charge one credit, then run the paid operation.

    A failure inside the paid operation does not give the credit back unless
    ``refund_on_failure`` is enabled.
    """

    def __init__(self, store: EntitlementStore, *, refund_on_failure: bool | None = None):
        self._store = store
        self._refund_on_failure = settings.refund_on_failure if refund_on_failure is None else refund_on_failure

    def run_gated(self, user_id: str | None, fn: Callable[[], T], *, action: str = "ai_call") -> T:
        if not user_id:
            raise Unauthenticated()

        if not self._store.try_spend(user_id, CREDITS_PER_CALL):
            logger.info("credit_gate_rejected user=%s action=%s", user_id, action)
            raise InsufficientCredits()

        try:
            return fn()
        except Exception as exc:
            logger.warning("credit_gate_operation_failed user=%s action=%s error=%s", user_id, action, type(exc).__name__)
            if self._refund_on_failure:
                self._refund(user_id, action)
            raise

    def _refund(self, user_id: str, action: str) -> None:
        try:
            balance = self._store.refund(user_id, CREDITS_PER_CALL)
            logger.info("credit_refunded user=%s action=%s balance=%s", user_id, action, balance)
        except StoreUnavailable:
            logger.exception("credit_refund_failed user=%s action=%s", user_id, action)
