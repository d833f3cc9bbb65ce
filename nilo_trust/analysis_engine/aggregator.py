"""
Aggregation engine: run a profile's evaluators over collected bundles and
reduce them to one CompositeScore.

Synchronous and side-effect free apart from logging. aggregate() never
raises: missing bundles score their documented penalty, a faulting evaluator
is replaced with a worst-case result, and a fault while composing yields an
emergency composite.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence

from nilo_trust.analysis_engine import degradation
from nilo_trust.analysis_engine.models import (
    AnalysisStatus,
    CompositeScore,
    EvaluationResult,
    RiskLevel,
    Severity,
    SignalBundle,
    normalize_score,
)
from nilo_trust.analysis_engine.profiles import ScoringProfile
from nilo_trust.analysis_engine.targets import AnalysisTarget
from nilo_trust.core.exceptions import EvaluationError
from nilo_trust.nilo_logging import get_logger
from nilo_trust.providers.base import ProviderOutcome

logger = get_logger(__name__)


def run_evaluators(
    profile: ScoringProfile,
    bundles: Mapping[str, SignalBundle],
    missing_reasons: Mapping[str, str] | None = None,
) -> list[EvaluationResult]:
    """
    Evaluate every enabled evaluator in profile order.

    An evaluator whose bundle is absent gets degradation.missing_result with
    the provider's failure reason (default "no data").
    """
    missing_reasons = missing_reasons or {}
    results: list[EvaluationResult] = []
    for evaluator in profile.active_evaluators:
        bundle = bundles.get(evaluator.requires)
        if bundle is None:
            reason = missing_reasons.get(evaluator.requires, "no data")
            results.append(degradation.missing_result(evaluator, reason))
            continue
        try:
            results.append(evaluator.evaluate(bundle))
        except Exception as e:
            err = EvaluationError(evaluator.name, e)
            logger.error(
                "evaluation_failed",
                evaluator=evaluator.name,
                profile=profile.name,
                error=err.message,
                exc_info=True,
            )
            results.append(evaluator.failed(e))
    return results


def _summary(results: Sequence[EvaluationResult], status: AnalysisStatus) -> str:
    passed = sum(1 for r in results if r.passed)
    critical = sum(1 for r in results if r.severity is Severity.CRITICAL)
    parts = [f"{passed}/{len(results)} checks passed."]
    if critical:
        parts.append(f"{critical} critical issue{'s' if critical != 1 else ''} found.")
    if status is AnalysisStatus.DEGRADED:
        parts.append("Some signal providers were unavailable; result is partial.")
    elif status is AnalysisStatus.FALLBACK:
        parts.append("No signal provider answered; placeholder data only.")
    return " ".join(parts)


def compose(
    target: AnalysisTarget,
    profile: ScoringProfile,
    results: Sequence[EvaluationResult],
    *,
    status: AnalysisStatus = AnalysisStatus.COMPLETE,
    banner: str | None = None,
    unavailable: Sequence[str] = (),
    computed_at: float = 0.0,
) -> CompositeScore:
    """Weighted sum, normalization and risk mapping; banner (if any) is the first flag."""
    overall = 0.0
    overall_max = 0.0
    for r in results:
        w = profile.weight(r.name)
        overall += r.score * w
        overall_max += r.max_score * w
    normalized = normalize_score(overall, overall_max)
    level = profile.risk_level(normalized)

    flags: list[str] = [banner] if banner else []
    for r in results:
        flags.extend(r.risk_flags)

    return CompositeScore(
        target_kind=target.kind,
        target_id=target.identifier,
        profile=profile.name,
        overall_score=round(overall, 2),
        overall_max=round(overall_max, 2),
        normalized_score=normalized,
        scaled_score=profile.scaled(normalized),
        scale_max=profile.scale.scale_max,
        risk_level=level,
        risk_label=profile.scale.label(level),
        flags=tuple(flags),
        per_signal=tuple(results),
        status=status,
        summary=_summary(results, status),
        computed_at=computed_at,
        unavailable_signals=tuple(unavailable),
    )


def fallback_composite(
    target: AnalysisTarget,
    profile: ScoringProfile,
    unavailable: Sequence[str],
    now: float,
) -> CompositeScore:
    """Every provider failed: score placeholder bundles, tag FALLBACK."""
    results = run_evaluators(profile, degradation.demo_bundles(target.kind, now))
    return compose(
        target,
        profile,
        results,
        status=AnalysisStatus.FALLBACK,
        banner=degradation.FALLBACK_FLAG,
        unavailable=unavailable,
        computed_at=now,
    )


def emergency_composite(
    target: AnalysisTarget,
    profile: ScoringProfile,
    now: float,
) -> CompositeScore:
    """Built without running any evaluator, so it cannot fail the way aggregate() did."""
    return CompositeScore(
        target_kind=target.kind,
        target_id=target.identifier,
        profile=profile.name,
        overall_score=0.0,
        overall_max=0.0,
        normalized_score=0,
        scaled_score=0.0,
        scale_max=profile.scale.scale_max,
        risk_level=RiskLevel.HIGH,
        risk_label=profile.scale.label(RiskLevel.HIGH),
        flags=(degradation.EMERGENCY_FLAG,),
        per_signal=(),
        status=AnalysisStatus.FALLBACK,
        summary="Analysis could not be completed.",
        computed_at=now,
    )


def aggregate(
    target: AnalysisTarget,
    profile: ScoringProfile,
    outcomes: Sequence[ProviderOutcome],
    now: float | None = None,
) -> CompositeScore:
    """
    Reduce provider outcomes to a CompositeScore.

    - all outcomes succeeded: COMPLETE
    - some failed: DEGRADED, banner flag first, failed bundles penalized
    - all failed (or none given): FALLBACK from placeholder data
    """
    now = time.time() if now is None else now
    try:
        bundles: dict[str, SignalBundle] = {}
        for outcome in outcomes:
            if outcome.succeeded and outcome.bundle is not None:
                bundles[outcome.bundle_name] = outcome.bundle
        # A bundle is unavailable only if no provider delivered it
        missing_reasons: dict[str, str] = {}
        for outcome in outcomes:
            if outcome.bundle_name not in bundles:
                missing_reasons.setdefault(outcome.bundle_name, outcome.reason or "error")
        unavailable: list[str] = list(missing_reasons)

        if not bundles:
            logger.warning(
                "aggregate_fallback",
                target_kind=target.kind.value,
                target_id=target.short_id,
                unavailable=unavailable,
            )
            return fallback_composite(target, profile, unavailable, now)

        # Bundles the profile needs but no provider was registered for
        expected = len({outcome.bundle_name for outcome in outcomes})
        for name in profile.required_bundles:
            if name not in bundles and name not in missing_reasons:
                unavailable.append(name)
                missing_reasons[name] = "no provider"
                expected += 1

        results = run_evaluators(profile, bundles, missing_reasons)
        if unavailable:
            return compose(
                target,
                profile,
                results,
                status=AnalysisStatus.DEGRADED,
                banner=degradation.degraded_banner(unavailable, expected),
                unavailable=unavailable,
                computed_at=now,
            )
        return compose(target, profile, results, computed_at=now)
    except Exception:
        logger.exception(
            "aggregate_failed",
            target_kind=target.kind.value,
            target_id=target.short_id,
            profile=profile.name,
        )
        return emergency_composite(target, profile, now)
