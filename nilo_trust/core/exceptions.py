"""
Application-level exceptions.

ValidationError is the only error that leaves TrustEngine.analyze(); provider
and evaluation faults are absorbed by the degradation policy and surface as
flags on the composite score instead.
"""

from __future__ import annotations

PROVIDER_REASON_ERROR = "error"
PROVIDER_REASON_TIMEOUT = "timeout"
PROVIDER_REASON_EMPTY = "empty"


class NiloTrustError(Exception):
    """Base class for all engine errors. `code` is stable for API consumers."""

    code = "nilo_trust_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(NiloTrustError, ValueError):
    """Malformed analysis target; raised before any provider is called."""

    code = "validation_error"


class ProviderError(NiloTrustError):
    """
    One signal provider failed: network error, timeout, auth failure, or no data.

    Never propagates past the provider boundary; it is carried inside a failed
    ProviderOutcome so the aggregator can branch on it.
    """

    code = "provider_error"

    def __init__(self, provider: str, message: str, reason: str = PROVIDER_REASON_ERROR) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.reason = reason

    @property
    def timed_out(self) -> bool:
        return self.reason == PROVIDER_REASON_TIMEOUT


class EvaluationError(NiloTrustError):
    """Unexpected fault inside an evaluator; replaced with a worst-case result."""

    code = "evaluation_error"

    def __init__(self, evaluator: str, cause: BaseException) -> None:
        super().__init__(f"{evaluator}: {type(cause).__name__}: {cause}")
        self.evaluator = evaluator
        self.cause = cause
