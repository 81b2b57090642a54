from __future__ import annotations

from fastapi import status


class ResumeFlowError(Exception):
    """Base for every failure a request can terminate with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return "Something went wrong. Please try again."


class Unauthenticated(ResumeFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"

    @classmethod
    def default_message(cls) -> str:
        return "Unauthorized"


class InvalidInput(ResumeFlowError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid request."


class InsufficientCredits(ResumeFlowError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "insufficient_credits"

    @classmethod
    def default_message(cls) -> str:
        return "Insufficient credits"


class StoreUnavailable(ResumeFlowError):
    code = "store_unavailable"

    @classmethod
    def default_message(cls) -> str:
        return "Credit storage is temporarily unavailable."


class UnparsableDocument(ResumeFlowError):
    code = "unparsable_document"

    @classmethod
    def default_message(cls) -> str:
        return "Failed to parse resume file"


class CompletionFailed(ResumeFlowError):
    code = "completion_failed"

    def __init__(self, message: str = "", *, provider_message: str | None = None):
        super().__init__(message)
        self.provider_message = provider_message

    @classmethod
    def default_message(cls) -> str:
        return "AI request failed. Please try again."


class PaymentGatewayError(ResumeFlowError):
    code = "payment_gateway_error"

    @classmethod
    def default_message(cls) -> str:
        return "The payment provider could not be reached."


class PaymentVerificationFailed(ResumeFlowError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "payment_verification_failed"

    @classmethod
    def default_message(cls) -> str:
        return "Verification failed."


class PayloadTooLarge(ResumeFlowError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "payload_too_large"

    @classmethod
    def default_message(cls) -> str:
        return "File too large."
