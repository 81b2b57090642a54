from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PortfolioTheme = Literal["light", "dark", "neutral"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeResumeRequest(_CamelModel):
    resume_text: str = Field(default="", alias="resumeText", max_length=100000)
    keywords: list[str] = Field(default_factory=list, max_length=200)


class PhraseRequest(_CamelModel):
    role: str = Field(default="", max_length=200)
    tone: str = Field(default="", max_length=100)
    content: str = Field(default="", max_length=20000)


class PhraseResponse(_CamelModel):
    content: str


class PortfolioRequest(_CamelModel):
    resume_data: dict[str, Any] | None = Field(default=None, alias="resumeData")
    theme: str | None = None


class PortfolioResponse(_CamelModel):
    html: str
    preview_url: str = Field(serialization_alias="previewUrl")
    filename: str
    media_type: str = Field(serialization_alias="mediaType")


class ParseResumeResponse(_CamelModel):
    text: str


class CreditsResponse(_CamelModel):
    credits: int = Field(ge=0)


class CreateOrderRequest(_CamelModel):
    plan_id: str = Field(default="", alias="planId", max_length=50)


class CreateOrderResponse(_CamelModel):
    id: str
    amount: int
    currency: str
    key_id: str | None = Field(default=None, serialization_alias="keyId")
    plan_id: str = Field(serialization_alias="planId")
    credits: int


class VerifyPaymentRequest(_CamelModel):
    razorpay_order_id: str = Field(default="", max_length=100)
    razorpay_payment_id: str = Field(default="", max_length=100)
    razorpay_signature: str = Field(default="", max_length=200)


class VerifyPaymentResponse(_CamelModel):
    success: bool
    credits: int
    applied: bool
