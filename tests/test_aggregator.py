"""
Tests for the aggregation engine: weighting, degradation banners, fallback,
evaluator faults and the never-raise guarantee.
"""

from __future__ import annotations

from nilo_trust.analysis_engine import aggregator
from nilo_trust.analysis_engine.degradation import FALLBACK_FLAG, is_banner
from nilo_trust.analysis_engine.evaluators import Evaluator
from nilo_trust.analysis_engine.models import AnalysisStatus, RiskLevel, SignalBundle, TargetKind
from nilo_trust.analysis_engine.profiles import PERCENT_SCALE, ScoringProfile, build_profile
from nilo_trust.analysis_engine.targets import AnalysisTarget
from nilo_trust.core.exceptions import ProviderError
from nilo_trust.providers.base import ProviderOutcome

from conftest import NOW, TOKEN_MINT, established_repository, healthy_token_signals


def _ok(bundle, payload):
    return ProviderOutcome.ok(f"p:{bundle}", SignalBundle(bundle, payload, NOW, f"p:{bundle}"))


def _failed(bundle, reason="error"):
    return ProviderOutcome.failed(f"p:{bundle}", bundle, ProviderError(f"p:{bundle}", "down", reason))


def _token_outcomes(overrides=None, failed=()):
    signals = healthy_token_signals()
    signals.update(overrides or {})
    return [_failed(b) if b in failed else _ok(b, p) for b, p in signals.items()]


TOKEN = AnalysisTarget.token(TOKEN_MINT)


def test_healthy_token_is_low_risk():
    """All four bundles healthy: 105 of 105, complete, no flags."""
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), _token_outcomes(), now=NOW)
    assert c.status is AnalysisStatus.COMPLETE
    assert c.overall_score == 105
    assert c.overall_max == 105
    assert c.normalized_score == 100
    assert c.risk_level is RiskLevel.LOW
    assert c.flags == ()
    assert c.summary.startswith("5/5 checks passed.")
    assert [r.name for r in c.per_signal] == [
        "token_metadata",
        "token_authority",
        "holder_distribution",
        "dex_activity",
        "creator_origin",
    ]


def test_concentrated_token_is_at_least_medium():
    """Holders [600, 200, 100, 100] drop distribution to 0: 75/105 -> 71, medium."""
    holders = [{"address": str(i), "balance": b} for i, b in enumerate([600, 200, 100, 100])]
    c = aggregator.aggregate(
        TOKEN, build_profile(TargetKind.TOKEN), _token_outcomes({"holders": holders}), now=NOW
    )
    assert c.normalized_score == 71
    assert c.risk_level in (RiskLevel.MEDIUM, RiskLevel.HIGH)
    assert "Top holder owns 60.0% of supply" in c.flags
    assert "1 critical issue found." in c.summary


def test_partial_failure_is_degraded_with_banner_first():
    """One failed provider: DEGRADED, banner flag first, its evaluator penalized."""
    c = aggregator.aggregate(
        TOKEN, build_profile(TargetKind.TOKEN), _token_outcomes(failed=("holders",)), now=NOW
    )
    assert c.status is AnalysisStatus.DEGRADED
    assert c.degraded
    assert c.flags[0] == "degraded: 1 of 4 signal providers unavailable (holders)"
    assert c.signal("holder_distribution").score == 0
    assert "No holder data (error)" in c.flags
    assert c.unavailable_signals == ("holders",)
    assert c.normalized_score == 71


def test_all_failed_is_fallback():
    """Every provider failed: FALLBACK from placeholder data, tagged distinctly."""
    outcomes = [_failed(b, "timeout") for b in healthy_token_signals()]
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), outcomes, now=NOW)
    assert c.status is AnalysisStatus.FALLBACK
    assert c.is_fallback and c.degraded
    assert c.flags[0] == FALLBACK_FLAG
    assert len(c.per_signal) == 5
    assert c.to_dict()["status"] == "fallback"


def test_no_outcomes_is_fallback():
    """No providers at all is treated like all providers failing."""
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), [], now=NOW)
    assert c.status is AnalysisStatus.FALLBACK


def test_unregistered_bundle_counts_as_unavailable():
    """A profile bundle with no provider is penalized and degrades the composite."""
    outcomes = [o for o in _token_outcomes() if o.bundle_name != "dex_trades"]
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), outcomes, now=NOW)
    assert c.status is AnalysisStatus.DEGRADED
    assert "No DEX trade data (no provider)" in c.flags
    assert c.flags[0].startswith("degraded: 1 of 4")


def test_bundle_delivered_by_second_provider_is_not_unavailable():
    """A failed provider does not degrade the result when another one supplied its bundle."""
    backup = ProviderOutcome.ok(
        "backup:holders", SignalBundle("holders", healthy_token_signals()["holders"], NOW, "backup")
    )
    outcomes = _token_outcomes(failed=("holders",)) + [backup]
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), outcomes, now=NOW)
    assert c.status is AnalysisStatus.COMPLETE
    assert c.unavailable_signals == ()
    assert c.normalized_score == 100


def test_bundle_failed_by_every_provider_is_counted_once():
    """Two failed providers for one bundle yield one unavailable entry."""
    outcomes = _token_outcomes(failed=("holders",)) + [_failed("holders", "timeout")]
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), outcomes, now=NOW)
    assert c.status is AnalysisStatus.DEGRADED
    assert c.unavailable_signals == ("holders",)
    assert c.flags[0] == "degraded: 1 of 4 signal providers unavailable (holders)"


def test_disabled_evaluator_is_skipped():
    """A disabled evaluator is neither run nor counted, and its bundle is not expected."""
    profile = build_profile(TargetKind.TOKEN).disable("dex_activity")
    outcomes = [o for o in _token_outcomes() if o.bundle_name != "dex_trades"]
    c = aggregator.aggregate(TOKEN, profile, outcomes, now=NOW)
    assert c.status is AnalysisStatus.COMPLETE
    assert c.signal("dex_activity") is None
    assert c.overall_max == 90
    assert c.normalized_score == 100


def test_evaluator_fault_is_contained():
    """An evaluator that raises gets a zero result and 'evaluation failed' flag; others still run."""

    def explode(sheet, payload, observed_at):
        raise RuntimeError("boom")

    bad = Evaluator(name="broken", requires="repository", max_score=10, score_fn=explode)
    base = build_profile(TargetKind.REPOSITORY)
    profile = ScoringProfile(
        name="repo_with_broken",
        kind=TargetKind.REPOSITORY,
        evaluators=base.evaluators + (bad,),
        scale=PERCENT_SCALE,
    )
    repo = AnalysisTarget.repository("solana-labs", "solana")
    c = aggregator.aggregate(repo, profile, [_ok("repository", established_repository())], now=NOW)
    assert c.status is AnalysisStatus.COMPLETE
    assert c.signal("broken").score == 0
    assert "evaluation failed: broken" in c.flags
    assert c.overall_score == 45
    assert c.overall_max == 55


def test_weights_apply_to_score_and_max():
    """Doubling the license weight doubles its score and max contribution."""
    repo = AnalysisTarget.repository("solana-labs", "solana")
    profile = build_profile(TargetKind.REPOSITORY, weights={"license": 2.0})
    c = aggregator.aggregate(repo, profile, [_ok("repository", established_repository())], now=NOW)
    assert c.overall_score == 55
    assert c.overall_max == 55
    assert c.scaled_score == 10.0
    assert c.risk_label == "legit"


def test_aggregate_never_raises(monkeypatch):
    """A fault while composing yields an emergency FALLBACK composite."""

    def broken_compose(*args, **kwargs):
        raise KeyError("unexpected")

    monkeypatch.setattr(aggregator, "compose", broken_compose)
    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), _token_outcomes(), now=NOW)
    assert c.status is AnalysisStatus.FALLBACK
    assert c.flags and is_banner(c.flags[0])
    assert c.normalized_score == 0


def test_composite_to_dict_is_json_safe():
    """to_dict() uses plain values only."""
    import json

    c = aggregator.aggregate(TOKEN, build_profile(TargetKind.TOKEN), _token_outcomes(), now=NOW)
    data = json.loads(json.dumps(c.to_dict()))
    assert data["risk_level"] == "low"
    assert data["degraded"] is False
    assert data["per_signal"][0]["severity"] == "info"
