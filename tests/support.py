"""Shared fixtures for the test modules; import before anything from ``resumeflow``."""

from __future__ import annotations

import os
import sys
import tempfile
import threading
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_JWT_SECRET = "resumeflow-test-secret-0123456789abcdef"

_RUNTIME_DIR = tempfile.mkdtemp(prefix="resumeflow-tests-")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("AUTH_JWT_SECRET", TEST_JWT_SECRET)
os.environ.setdefault("AUTH_JWT_AUDIENCE", "authenticated")
os.environ.setdefault("ENTITLEMENT_DB_PATH", os.path.join(_RUNTIME_DIR, "entitlements.db"))
os.environ.setdefault("REFUND_ON_FAILURE", "0")
os.environ.setdefault("DEFAULT_CREDITS", "5")

import jwt  # noqa: E402

from resumeflow.core.entitlement_store import SqliteEntitlementStore  # noqa: E402
from resumeflow.core.errors import CompletionFailed  # noqa: E402


def make_token(user_id: str, *, secret: str = TEST_JWT_SECRET, expires_in: int = 3600) -> str:
    return jwt.encode(
        {"sub": user_id, "aud": "authenticated", "exp": int(time.time()) + expires_in},
        secret,
        algorithm="HS256",
    )


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def temp_store(testcase, default_credits: int = 5) -> SqliteEntitlementStore:
    directory = tempfile.TemporaryDirectory()
    testcase.addCleanup(directory.cleanup)
    store = SqliteEntitlementStore(os.path.join(directory.name, "entitlements.db"), default_credits=default_credits)
    testcase.addCleanup(store.close)
    return store


class FakeCompletion:
    """Stands in for the completion provider and records every call."""

    def __init__(self, response: str = "", error: Exception | None = None, barrier: threading.Barrier | None = None):
        self.response = response
        self.error = error
        self.barrier = barrier
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool = False) -> str:
        with self._lock:
            self.calls.append({"system": system_prompt, "user": user_prompt, "json_mode": json_mode})
        if self.barrier is not None:
            self.barrier.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.response


def failing_completion(message: str = "upstream exploded") -> FakeCompletion:
    return FakeCompletion(error=CompletionFailed(message))


SAMPLE_RESUME = {
    "personal_info": {
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 555 222 1111",
        "location": "Berlin, Germany",
        "links": [
            {"label": "GitHub", "url": "https://github.com/janedoe"},
            {"label": "LinkedIn", "url": "https://www.linkedin.com/in/janedoe"},
        ],
    },
    "professional_summary": "Backend engineer building reliable payment systems.",
    "skills": {
        "technical": ["Python", "SQL"],
        "soft": ["Mentoring"],
        "tools": ["Docker", "AWS"],
    },
    "work_experience": [
        {
            "role": "Senior Backend Engineer",
            "company": "Acme Pay",
            "duration": "2021 - Present",
            "bullet_points": [
                "Reduced API latency by 38% across 120 endpoints.",
                "Led migration to event-driven architecture.",
            ],
        },
        {
            "role": "Backend Engineer",
            "company": "Globex",
            "duration": "2018 - 2021",
            "bullet_points": ["Built billing services used by 1.2M users."],
        },
    ],
    "education": [{"degree": "BSc Computer Science", "institution": "TU Berlin", "year": "2018"}],
    "certifications": ["AWS Certified Developer"],
    "projects": [
        {"title": "Ledger CLI", "description": "Double-entry bookkeeping tool.", "link": "https://github.com/janedoe/ledger"},
        {"title": "Rate Limiter", "description": "Token bucket library.", "link": None},
    ],
}

SAMPLE_ANALYSIS = {
    "ats_score": 78,
    "keyword_match_percentage": 66.7,
    "matched_keywords": ["Python", "SQL"],
    "missing_keywords": ["Kubernetes"],
    "weak_placements": ["Docker only appears in the skills list."],
    "overused_keywords": [],
    "improvement_suggestions": [
        {
            "section": "Experience",
            "suggestion": "Quantify the migration outcome.",
            "rewritten_bullet": "Led migration to event-driven architecture, cutting deploy time by 40%.",
        }
    ],
}
