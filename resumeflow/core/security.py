from __future__ import annotations

import logging
from functools import lru_cache
from typing import Protocol

import jwt
from fastapi import Depends, Header

from resumeflow.core.config import settings
from resumeflow.core.errors import Unauthenticated

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> str: ...


class JwtIdentityVerifier:
    """Verifies HS256 access tokens (Supabase-style) and returns the ``sub`` claim."""

    def __init__(self, secret: str | None, audience: str | None = None, algorithms: tuple[str, ...] = ("HS256",)):
        self._secret = (secret or "").strip() or None
        self._audience = (audience or "").strip() or None
        self._algorithms = list(algorithms)

    def verify(self, token: str) -> str:
        if not self._secret:
            logger.warning("auth_unconfigured: AUTH_JWT_SECRET is missing")
            raise Unauthenticated()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"require": ["sub", "exp"], "verify_aud": self._audience is not None},
            )
        except jwt.PyJWTError as exc:
            logger.info("auth_token_rejected: %s", exc)
            raise Unauthenticated("Invalid or expired token") from exc
        subject = str(claims.get("sub") or "").strip()
        if not subject:
            raise Unauthenticated("Invalid or expired token")
        return subject


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    return JwtIdentityVerifier(settings.auth_jwt_secret, settings.auth_jwt_audience)


def bearer_token(authorization: str | None) -> str | None:
    value = (authorization or "").strip()
    if not value.lower().startswith("bearer "):
        return None
    token = value[7:].strip()
    return token or None


def current_user_id(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> str:
    token = bearer_token(authorization)
    if not token:
        raise Unauthenticated()
    return verifier.verify(token)
