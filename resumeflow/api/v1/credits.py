from fastapi import APIRouter, Depends

from resumeflow.api.dependencies import entitlement_store
from resumeflow.core.entitlement_store import EntitlementStore
from resumeflow.core.security import current_user_id
from resumeflow.schemas.api import CreditsResponse

router = APIRouter()


@router.get("/credits", response_model=CreditsResponse)
def get_credits(
    user_id: str = Depends(current_user_id),
    store: EntitlementStore = Depends(entitlement_store),
):
    return CreditsResponse(credits=store.get_balance(user_id))
