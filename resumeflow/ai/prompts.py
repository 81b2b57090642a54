from __future__ import annotations

from typing import Sequence

_PARSED_RESUME_SHAPE = (
    '{"personal_info": {"full_name": string, "email": string, "phone": string, "location": string, '
    '"links": [{"label": string, "url": string}]}, '
    '"professional_summary": string, '
    '"skills": {"technical": [string], "soft": [string], "tools": [string]}, '
    '"work_experience": [{"role": string, "company": string, "duration": string, "bullet_points": [string]}], '
    '"education": [{"degree": string, "institution": string, "year": string}], '
    '"certifications": [string], '
    '"projects": [{"title": string, "description": string, "link": string | null}]}'
)

_ANALYSIS_SHAPE = (
    '{"ats_score": integer 0-100, "keyword_match_percentage": number 0-100, '
    '"matched_keywords": [string], "missing_keywords": [string], '
    '"weak_placements": [string], "overused_keywords": [string], '
    '"improvement_suggestions": [{"section": string, "suggestion": string, "rewritten_bullet": string | null}]}'
)


def _keyword_list(keywords: Sequence[str]) -> str:
    return ", ".join(keywords)


def build_analysis_prompts(resume_text: str, keywords: Sequence[str]) -> tuple[str, str]:
    keyword_text = _keyword_list(keywords)
    system = (
        "You are an advanced AI Resume Analyzer and ATS Optimizer.\n"
        "Your task is to:\n"
        "1. Parse the provided resume text into a highly structured JSON format.\n"
        f"2. Analyze the resume against the provided target keywords: [{keyword_text}].\n"
        "3. Calculate an ATS compatibility score (0-100).\n"
        "4. Identify matched, missing, and overused keywords.\n"
        "5. Provide specific improvement suggestions, including rewriting weak bullet points "
        "using the STAR method.\n\n"
        "Constraints:\n"
        "- Never hallucinate experience.\n"
        '- Normalize skill names (e.g., "JS" -> "JavaScript").\n'
        "- Ensure the output is valid JSON.\n\n"
        "Return a JSON object with exactly two top-level keys:\n"
        f'{{"parsed_resume": {_PARSED_RESUME_SHAPE}, "analysis": {_ANALYSIS_SHAPE}}}'
    )
    user = f"Resume Text: {resume_text}\n\nTarget Keywords: {keyword_text}"
    return system, user


def build_rewrite_prompts(role: str, tone: str, content: str) -> tuple[str, str]:
    system = (
        f"You are an expert resume writer. Rewrite the following resume bullet points for a {role} role "
        f"with a {tone} tone.\n"
        "Use strong action verbs, quantify achievements where possible, and ensure ATS-friendliness.\n"
        "Return only the rewritten bullet points, one per line."
    )
    return system, content
