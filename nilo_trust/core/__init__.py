"""
Core utilities: exceptions and cross-cutting concerns shared by the
engine, providers, API server and CLI.
"""

from nilo_trust.core.exceptions import (
    EvaluationError,
    NiloTrustError,
    ProviderError,
    ValidationError,
)

__all__ = ["EvaluationError", "NiloTrustError", "ProviderError", "ValidationError"]
