from __future__ import annotations

import logging

from resumeflow.ai.prompts import build_rewrite_prompts
from resumeflow.ai.types import CompletionBackend
from resumeflow.core.errors import InvalidInput
from resumeflow.services.credit_gate import CreditGate

logger = logging.getLogger(__name__)


def rewrite_content(
    *,
    user_id: str | None,
    role: str,
    tone: str,
    content: str,
    gate: CreditGate,
    completion: CompletionBackend,
) -> str:
    if not (content or "").strip():
        raise InvalidInput("Content is required")
    system_prompt, user_prompt = build_rewrite_prompts((role or "").strip(), (tone or "").strip(), content)

    rewritten = gate.run_gated(
        user_id,
        lambda: completion.complete(system_prompt, user_prompt),
        action="rewrite",
    )
    logger.info("content_rewritten user=%s input_chars=%s output_chars=%s", user_id, len(content), len(rewritten))
    return rewritten
