from fastapi import Depends

from resumeflow.ai.completion import get_completion_client
from resumeflow.ai.types import CompletionBackend
from resumeflow.core.entitlement_store import EntitlementStore, get_entitlement_store
from resumeflow.services.credit_gate import CreditGate
from resumeflow.services.payments_service import RazorpayGateway, get_payment_gateway


def entitlement_store() -> EntitlementStore:
    return get_entitlement_store()


def credit_gate(store: EntitlementStore = Depends(entitlement_store)) -> CreditGate:
    return CreditGate(store)


def completion_backend() -> CompletionBackend:
    return get_completion_client()


def payment_gateway() -> RazorpayGateway:
    return get_payment_gateway()
