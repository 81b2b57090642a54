from fastapi import APIRouter, Depends, Request

from resumeflow.ai.types import CompletionBackend
from resumeflow.api.dependencies import completion_backend, credit_gate
from resumeflow.core.rate_limit import rate_limit
from resumeflow.core.security import current_user_id
from resumeflow.schemas.api import (
    AnalyzeResumeRequest,
    PhraseRequest,
    PhraseResponse,
    PortfolioRequest,
    PortfolioResponse,
)
from resumeflow.schemas.resume import AnalysisResult
from resumeflow.services.analysis_service import analyze_resume
from resumeflow.services.credit_gate import CreditGate
from resumeflow.services.portfolio_service import generate_portfolio
from resumeflow.services.rewrite_service import rewrite_content

router = APIRouter()


@router.post("/ai/analyze-resume", response_model=AnalysisResult)
@rate_limit()
def ai_analyze_resume(
    request: Request,
    payload: AnalyzeResumeRequest,
    user_id: str = Depends(current_user_id),
    gate: CreditGate = Depends(credit_gate),
    completion: CompletionBackend = Depends(completion_backend),
):
    _ = request
    return analyze_resume(
        user_id=user_id,
        resume_text=payload.resume_text,
        keywords=payload.keywords,
        gate=gate,
        completion=completion,
    )


@router.post("/ai/phrase", response_model=PhraseResponse)
@rate_limit()
def ai_phrase(
    request: Request,
    payload: PhraseRequest,
    user_id: str = Depends(current_user_id),
    gate: CreditGate = Depends(credit_gate),
    completion: CompletionBackend = Depends(completion_backend),
):
    _ = request
    content = rewrite_content(
        user_id=user_id,
        role=payload.role,
        tone=payload.tone,
        content=payload.content,
        gate=gate,
        completion=completion,
    )
    return PhraseResponse(content=content)


@router.post("/ai/portfolio", response_model=PortfolioResponse)
@rate_limit()
def ai_portfolio(
    request: Request,
    payload: PortfolioRequest,
    user_id: str = Depends(current_user_id),
    gate: CreditGate = Depends(credit_gate),
):
    _ = request
    artifact = generate_portfolio(
        user_id=user_id,
        resume_data=payload.resume_data,
        theme=payload.theme,
        gate=gate,
    )
    return PortfolioResponse(
        html=artifact.html,
        preview_url=artifact.preview_url,
        filename=artifact.filename,
        media_type=artifact.media_type,
    )
