from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from resumeflow.core.errors import InvalidInput
from resumeflow.schemas.resume import ParsedResume
from resumeflow.services.credit_gate import CreditGate
from resumeflow.services.portfolio_renderer import render_portfolio_html, resolve_theme

logger = logging.getLogger(__name__)

PORTFOLIO_MEDIA_TYPE = "text/html"


@dataclass(frozen=True)
class PortfolioArtifact:
    """A downloadable page; the caller decides how to deliver it."""

    filename: str
    media_type: str
    html: str
    theme: str

    @property
    def preview_url(self) -> str:
        return f"data:{self.media_type};charset=utf-8,{quote(self.html, safe='')}"


def portfolio_filename(resume: ParsedResume) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", resume.personal_info.full_name.lower()).strip("-")
    return f"{slug or 'portfolio'}-portfolio.html"


def coerce_resume(resume_data: ParsedResume | dict[str, Any] | None) -> ParsedResume:
    if isinstance(resume_data, ParsedResume):
        return resume_data
    if not resume_data:
        raise InvalidInput("Resume data is required")
    try:
        return ParsedResume.model_validate(resume_data)
    except ValidationError as exc:
        raise InvalidInput("Resume data does not match the parsed resume format.") from exc


def generate_portfolio(
    *,
    user_id: str | None,
    resume_data: ParsedResume | dict[str, Any] | None,
    theme: str | None,
    gate: CreditGate,
) -> PortfolioArtifact:
    resume = coerce_resume(resume_data)
    resolved_theme = resolve_theme(theme)

    def run() -> PortfolioArtifact:
        return PortfolioArtifact(
            filename=portfolio_filename(resume),
            media_type=PORTFOLIO_MEDIA_TYPE,
            html=render_portfolio_html(resume, resolved_theme),
            theme=resolved_theme,
        )

    artifact = gate.run_gated(user_id, run, action="portfolio")
    logger.info("portfolio_generated user=%s theme=%s bytes=%s", user_id, resolved_theme, len(artifact.html))
    return artifact
