from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

N = TypeVar("N", int, float)

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env(name: str, default: str | None = None) -> str | None:
    """Stripped value of ``name``; unset and blank both mean ``default``."""
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    return default if raw is None else raw.lower() in _TRUTHY


def _env_number(name: str, default: N, cast: Callable[[str], N]) -> N:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        return default


def _env_csv(name: str, default: list[str]) -> tuple[str, ...]:
    items = [item.strip() for item in (_env(name) or "").split(",") if item.strip()]
    return tuple(items or default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    entitlement_db_path: str
    default_credits: int
    refund_on_failure: bool
    auth_jwt_secret: str | None
    auth_jwt_audience: str | None
    completion_api_key: str | None
    completion_base_url: str | None
    completion_model: str
    completion_timeout_s: float
    completion_temperature: float
    extraction_timeout_s: float
    max_upload_bytes: int
    razorpay_key_id: str | None
    razorpay_key_secret: str | None
    razorpay_currency: str


_DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]


def load_settings() -> Settings:
    loaded = Settings(
        rate_limit=_env("RATE_LIMIT", "30/minute"),
        rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", True),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        sentry_dsn=_env("SENTRY_DSN"),
        cors_allowed_origins=_env_csv("CORS_ALLOWED_ORIGINS", _DEFAULT_CORS_ORIGINS),
        cors_allow_origin_regex=_env("CORS_ALLOW_ORIGIN_REGEX"),
        cors_allow_credentials=_env_flag("CORS_ALLOW_CREDENTIALS", True),
        entitlement_db_path=_env("ENTITLEMENT_DB_PATH", "data/entitlements.db"),
        default_credits=max(0, _env_number("DEFAULT_CREDITS", 5, int)),
        refund_on_failure=_env_flag("REFUND_ON_FAILURE", False),
        auth_jwt_secret=_env("AUTH_JWT_SECRET"),
        auth_jwt_audience=_env("AUTH_JWT_AUDIENCE", "authenticated"),
        completion_api_key=_env("COMPLETION_API_KEY", _env("OPENAI_API_KEY")),
        completion_base_url=_env("COMPLETION_BASE_URL", _env("OPENAI_BASE_URL")),
        completion_model=_env("COMPLETION_MODEL", "gpt-4o"),
        completion_timeout_s=_env_number("COMPLETION_TIMEOUT_S", 60.0, float),
        completion_temperature=_env_number("COMPLETION_TEMPERATURE", 0.2, float),
        extraction_timeout_s=_env_number("EXTRACTION_TIMEOUT_S", 20.0, float),
        max_upload_bytes=_env_number("MAX_UPLOAD_BYTES", 10 * 1024 * 1024, int),
        razorpay_key_id=_env("RAZORPAY_KEY_ID"),
        razorpay_key_secret=_env("RAZORPAY_KEY_SECRET"),
        razorpay_currency=_env("RAZORPAY_CURRENCY", "INR").upper(),
    )
    for name, value in (
        ("COMPLETION_TIMEOUT_S", loaded.completion_timeout_s),
        ("EXTRACTION_TIMEOUT_S", loaded.extraction_timeout_s),
    ):
        if value <= 0:
            raise RuntimeError(f"{name} must be greater than zero.")
    return loaded


settings = load_settings()
