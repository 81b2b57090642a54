from __future__ import annotations

import logging
from typing import Sequence

from pydantic import ValidationError

from resumeflow.ai.completion import decode_json_object
from resumeflow.ai.prompts import build_analysis_prompts
from resumeflow.ai.types import CompletionBackend
from resumeflow.core.errors import CompletionFailed, InvalidInput
from resumeflow.schemas.resume import AnalysisResult
from resumeflow.services.credit_gate import CreditGate

logger = logging.getLogger(__name__)


def _clean_keywords(keywords: Sequence[str] | None) -> list[str]:
    seen: set[str] = set()
    cleaned: list[str] = []
    for keyword in keywords or []:
        value = (keyword or "").strip()
        if not value or value.lower() in seen:
            continue
        seen.add(value.lower())
        cleaned.append(value)
    return cleaned


def parse_analysis_payload(text: str) -> AnalysisResult:
    payload = decode_json_object(text)
    if "parsed_resume" not in payload or "analysis" not in payload:
        raise CompletionFailed("The AI response is missing parsed_resume or analysis.")
    try:
        return AnalysisResult.model_validate(
            {"parsed_resume": payload["parsed_resume"], "analysis": payload["analysis"]}
        )
    except ValidationError as exc:
        logger.warning("analysis_payload_invalid errors=%s", exc.error_count())
        raise CompletionFailed("The AI response did not match the expected resume analysis shape.") from exc


def analyze_resume(
    *,
    user_id: str | None,
    resume_text: str,
    keywords: Sequence[str] | None,
    gate: CreditGate,
    completion: CompletionBackend,
) -> AnalysisResult:
    text = (resume_text or "").strip()
    if not text:
        raise InvalidInput("Resume text is required")
    target_keywords = _clean_keywords(keywords)
    system_prompt, user_prompt = build_analysis_prompts(text, target_keywords)

    def run() -> AnalysisResult:
        raw = completion.complete(system_prompt, user_prompt, json_mode=True)
        return parse_analysis_payload(raw)

    result = gate.run_gated(user_id, run, action="analyze_resume")
    logger.info(
        "resume_analyzed user=%s keywords=%s ats_score=%s",
        user_id,
        len(target_keywords),
        result.analysis.ats_score,
    )
    return result
