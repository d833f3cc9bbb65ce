"""
Data models for analysis engine input and output.

Structures for signal bundles, per-evaluator results and the composite
score. Used by evaluators, the aggregator, the result cache and API responses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TargetKind(str, Enum):
    TOKEN = "token"
    WALLET = "wallet"
    REPOSITORY = "repository"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisStatus(str, Enum):
    COMPLETE = "complete"
    DEGRADED = "degraded"
    """At least one provider failed; the score is computed from partial data."""
    FALLBACK = "fallback"
    """Every provider failed; the score comes from placeholder data and is not a verdict."""


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class SignalBundle:
    """
    Raw data returned by one provider for one signal.

    observed_at is when the provider answered (unix seconds); evaluators
    measure recency against it so they never read the wall clock.
    """

    name: str
    payload: Any
    observed_at: float
    source: str = ""


@dataclass(frozen=True)
class EvaluationResult:
    """Bounded sub-score from one evaluator. Invariant: 0 <= score <= max_score."""

    name: str
    score: float
    max_score: float
    passed: bool
    risk_flags: tuple[str, ...] = ()
    detail: str = ""
    severity: Severity = Severity.INFO

    def __post_init__(self) -> None:
        if self.max_score < 0:
            raise ValueError(f"max_score must be >= 0, got {self.max_score}")
        if not 0 <= self.score <= self.max_score:
            raise ValueError(
                f"score {self.score} outside [0, {self.max_score}] for {self.name}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "max_score": self.max_score,
            "passed": self.passed,
            "risk_flags": list(self.risk_flags),
            "detail": self.detail,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class CompositeScore:
    """
    Aggregated, normalized trust score for one target.

    normalized_score = overall_score / overall_max * 100 rounded half up, clamped to
    [0, 100]. scaled_score is the same value on the profile's scale (0-10 for
    the point scale). status is authoritative over the numeric score: a
    degraded or fallback composite must be surfaced as such.
    """

    target_kind: TargetKind
    target_id: str
    profile: str
    overall_score: float
    overall_max: float
    normalized_score: int
    scaled_score: float
    scale_max: float
    risk_level: RiskLevel
    risk_label: str
    flags: tuple[str, ...]
    per_signal: tuple[EvaluationResult, ...]
    status: AnalysisStatus = AnalysisStatus.COMPLETE
    summary: str = ""
    computed_at: float = 0.0
    unavailable_signals: tuple[str, ...] = field(default=())

    @property
    def degraded(self) -> bool:
        return self.status is not AnalysisStatus.COMPLETE

    @property
    def is_fallback(self) -> bool:
        return self.status is AnalysisStatus.FALLBACK

    def signal(self, name: str) -> EvaluationResult | None:
        """Return the per-signal result with the given evaluator name, if present."""
        for result in self.per_signal:
            if result.name == name:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_kind": self.target_kind.value,
            "target_id": self.target_id,
            "profile": self.profile,
            "overall_score": self.overall_score,
            "overall_max": self.overall_max,
            "normalized_score": self.normalized_score,
            "scaled_score": self.scaled_score,
            "scale_max": self.scale_max,
            "risk_level": self.risk_level.value,
            "risk_label": self.risk_label,
            "flags": list(self.flags),
            "per_signal": [r.to_dict() for r in self.per_signal],
            "status": self.status.value,
            "degraded": self.degraded,
            "summary": self.summary,
            "computed_at": self.computed_at,
            "unavailable_signals": list(self.unavailable_signals),
        }


def normalize_score(overall_score: float, overall_max: float) -> int:
    """Return score / max * 100 rounded half up, clamped to [0, 100]; 0 when max is 0."""
    if overall_max <= 0:
        return 0
    # Ties round up: 74.5 -> 75
    pct = math.floor(overall_score * 100 / overall_max + 0.5)
    return max(0, min(100, int(pct)))
