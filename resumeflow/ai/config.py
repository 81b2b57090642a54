from dataclasses import dataclass

from resumeflow.core.config import settings


@dataclass(frozen=True)
class CompletionConfig:
    model: str
    api_key: str | None
    base_url: str | None
    timeout_s: float
    temperature: float


def load_completion_config() -> CompletionConfig:
    return CompletionConfig(
        model=settings.completion_model,
        api_key=(settings.completion_api_key or "").strip() or None,
        base_url=(settings.completion_base_url or "").strip() or None,
        timeout_s=settings.completion_timeout_s,
        temperature=settings.completion_temperature,
    )
