from contextlib import asynccontextmanager
import logging

from resumeflow.core.config import settings
from resumeflow.core.entitlement_store import get_entitlement_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    if not settings.auth_jwt_secret:
        logger.warning("startup_config: AUTH_JWT_SECRET is not set, every authenticated route will return 401")
    if not settings.completion_api_key:
        logger.warning("startup_config: COMPLETION_API_KEY is not set, AI routes will fail")
    if not (settings.razorpay_key_id and settings.razorpay_key_secret):
        logger.info("startup_config: Razorpay keys missing, payments disabled")
    if settings.refund_on_failure:
        logger.info("startup_config: credits are refunded when an AI call fails")

    store = get_entitlement_store()
    try:
        yield
    finally:
        store.close()
