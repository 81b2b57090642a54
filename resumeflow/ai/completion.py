from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI, OpenAIError

from resumeflow.ai.config import CompletionConfig, load_completion_config
from resumeflow.ai.types import ChatMessage, to_payload
from resumeflow.core.errors import CompletionFailed

logger = logging.getLogger(__name__)


def _provider_message(exc: APIStatusError) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return str(getattr(exc, "message", "") or exc)


class CompletionClient:
    """Single-shot chat completion against an OpenAI-compatible endpoint.

    No retries are attempted; every failure surfaces as ``CompletionFailed``.
    """

    def __init__(self, config: CompletionConfig, client: OpenAI | None = None):
        self._config = config
        self._client: OpenAI | None
        if client is not None:
            self._client = client
            return
        if not config.api_key:
            logger.warning("completion_client_unconfigured: COMPLETION_API_KEY is missing")
            self._client = None
            return
        self._client = OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout_s,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._config.model

    def complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool = False) -> str:
        if self._client is None:
            raise CompletionFailed("The AI service is not configured.")
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]
        create_kwargs: dict[str, Any] = {
            "model": self._config.model,
            "messages": to_payload(messages),
            "temperature": self._config.temperature,
        }
        if json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        started = time.perf_counter()
        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except APITimeoutError as exc:
            logger.warning("completion_timeout model=%s timeout_s=%s", self._config.model, self._config.timeout_s)
            raise CompletionFailed("The AI service timed out. Please try again.") from exc
        except APIStatusError as exc:
            provider_message = _provider_message(exc)
            logger.warning(
                "completion_http_error model=%s status=%s: %s",
                self._config.model,
                exc.status_code,
                provider_message,
            )
            raise CompletionFailed(provider_message or "AI Analysis failed", provider_message=provider_message) from exc
        except APIConnectionError as exc:
            logger.warning("completion_connection_error model=%s: %s", self._config.model, exc)
            raise CompletionFailed("The AI service is unreachable. Please try again.") from exc
        except OpenAIError as exc:
            logger.warning("completion_failed model=%s: %s", self._config.model, exc)
            raise CompletionFailed() from exc

        content = response.choices[0].message.content if response.choices else ""
        latency_ms = int((time.perf_counter() - started) * 1000)
        if not content:
            logger.warning("completion_empty model=%s latency_ms=%s", self._config.model, latency_ms)
            raise CompletionFailed("The AI service returned an empty response.")
        logger.info(
            "completion_ok model=%s json_mode=%s prompt_len=%s latency_ms=%s",
            self._config.model,
            json_mode,
            len(user_prompt),
            latency_ms,
        )
        return str(content)


def decode_json_object(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise CompletionFailed("The AI service returned malformed JSON.") from exc
    if not isinstance(parsed, dict):
        raise CompletionFailed("The AI service returned an unexpected JSON shape.")
    return parsed


@lru_cache(maxsize=1)
def get_completion_client() -> CompletionClient:
    return CompletionClient(load_completion_config())
