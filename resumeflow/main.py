import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resumeflow.api.v1.ai import router as ai_router
from resumeflow.api.v1.credits import router as credits_router
from resumeflow.api.v1.health import router as health_router
from resumeflow.api.v1.payments import router as payments_router
from resumeflow.api.v1.resume import router as resume_router
from resumeflow.core.config import settings
from resumeflow.core.errors import ResumeFlowError
from resumeflow.core.lifespan import lifespan
from resumeflow.core.rate_limit import limiter

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="ResumeFlow AI API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=settings.cors_allow_origin_regex,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(ResumeFlowError)
async def resumeflow_error_handler(request: Request, exc: ResumeFlowError):
    if exc.status_code >= 500:
        logger.error("request_failed path=%s code=%s: %s", request.url.path, exc.code, exc, exc_info=exc)
    else:
        logger.info("request_rejected path=%s code=%s status=%s", request.url.path, exc.code, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc), "code": exc.code})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    _ = request
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request.", "code": "invalid_input", "details": jsonable_encoder(exc.errors())},
    )


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(resume_router, prefix="/v1", tags=["Resume"])
app.include_router(ai_router, prefix="/v1", tags=["AI"])
app.include_router(credits_router, prefix="/v1", tags=["Credits"])
app.include_router(payments_router, prefix="/v1", tags=["Payments"])
