"""
Signal evaluator contract.

An evaluator is a named record pairing a pure scoring function with its weight
(max_score) and pass threshold; profiles hold them in an ordered list and the
aggregator dispatches over them uniformly. Scoring functions write to a
ScoreSheet; Evaluator.evaluate() turns the sheet into a bounded
EvaluationResult. Missing or unusable input never raises: it scores zero (or
the evaluator's neutral fraction) and names the missing data in a flag.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from nilo_trust.analysis_engine.models import EvaluationResult, Severity, SignalBundle

DEFAULT_PASS_RATIO = 0.6
STRICT_PASS_RATIO = 0.7

_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


@dataclass
class ScoreSheet:
    """Accumulates points, risk flags and detail lines while one evaluator runs."""

    max_score: float
    points: float = 0.0
    flags: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)
    severity: Severity = Severity.INFO

    def award(self, points: float, detail: str | None = None) -> None:
        self.points += points
        if detail:
            self.details.append(detail)

    def deduct(self, points: float, detail: str | None = None) -> None:
        self.points -= points
        if detail:
            self.details.append(detail)

    def note(self, detail: str) -> None:
        self.details.append(detail)

    def flag(self, message: str, *, critical: bool = False) -> None:
        self.flags.append(message)
        self.raise_severity(Severity.CRITICAL if critical else Severity.WARNING)

    def raise_severity(self, severity: Severity) -> None:
        if _SEVERITY_RANK[severity] > _SEVERITY_RANK[self.severity]:
            self.severity = severity


ScoreFn = Callable[[ScoreSheet, Any, float], None]
"""(sheet, payload, observed_at) -> None; observed_at is the bundle's unix timestamp."""


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Evaluator:
    """
    One risk dimension: consumes the bundle named by `requires`.

    max_score is the evaluator's weight in the composite; passed means
    score >= max_score * pass_ratio.
    """

    name: str
    requires: str
    max_score: float
    score_fn: ScoreFn
    payload_type: type | None = None
    pass_ratio: float = DEFAULT_PASS_RATIO
    missing_flag: str = ""
    missing_fraction: float = 0.0
    description: str = ""

    def coerce(self, payload: Any) -> Any | None:
        """Return payload as payload_type, converting mappings/lists; None if unusable."""
        if self.payload_type is None:
            return payload
        if isinstance(payload, self.payload_type):
            return payload
        from_mapping = getattr(self.payload_type, "from_mapping", None)
        if from_mapping is None:
            return None
        accepts_sequence = getattr(self.payload_type, "accepts_sequence", False)
        if isinstance(payload, Mapping) or (
            accepts_sequence
            and isinstance(payload, Iterable)
            and not isinstance(payload, (str, bytes))
        ):
            try:
                return from_mapping(payload)
            except (TypeError, ValueError, AttributeError, OverflowError):
                return None
        return None

    def result(
        self,
        score: float,
        flags: Iterable[str] = (),
        detail: str = "",
        severity: Severity = Severity.INFO,
    ) -> EvaluationResult:
        """Build a result with the score clamped to [0, max_score]."""
        bounded = round(clamp(float(score), 0.0, self.max_score), 2)
        return EvaluationResult(
            name=self.name,
            score=bounded,
            max_score=self.max_score,
            passed=bounded >= self.max_score * self.pass_ratio,
            risk_flags=tuple(flags),
            detail=detail,
            severity=severity,
        )

    def evaluate(self, bundle: SignalBundle | None) -> EvaluationResult:
        if bundle is None:
            return self.missing("no data")
        payload = self.coerce(bundle.payload)
        if payload is None:
            return self.result(
                0.0,
                [f"Malformed {self.requires} data"],
                f"Cannot evaluate {self.name}: unusable {self.requires} payload",
                Severity.WARNING,
            )
        sheet = ScoreSheet(max_score=self.max_score)
        self.score_fn(sheet, payload, bundle.observed_at)
        return self.result(sheet.points, sheet.flags, "\n".join(sheet.details), sheet.severity)

    def missing(self, reason: str) -> EvaluationResult:
        """Documented penalty for a bundle that never arrived (provider failed or timed out)."""
        message = self.missing_flag or f"No {self.requires} data"
        return self.result(
            self.max_score * self.missing_fraction,
            [f"{message} ({reason})"],
            f"{self.name} not evaluated: {self.requires} provider unavailable",
            Severity.WARNING,
        )

    def failed(self, error: BaseException) -> EvaluationResult:
        """Worst-case result substituted when the scoring function itself faults."""
        return self.result(
            0.0,
            [f"evaluation failed: {self.name}"],
            f"{type(error).__name__}: {error}",
            Severity.WARNING,
        )
