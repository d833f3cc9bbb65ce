"""
Tests for scoring profiles: scale cut points, monotonic risk mapping, config overrides.
"""

from __future__ import annotations

import pytest

from nilo_trust.analysis_engine.models import RiskLevel, TargetKind, normalize_score
from nilo_trust.analysis_engine.profiles import (
    PERCENT_SCALE,
    POINT_SCALE,
    build_profile,
    default_profiles,
)
from nilo_trust.config.settings import EngineSettings


@pytest.mark.parametrize(
    "normalized,level",
    [(100, RiskLevel.LOW), (75, RiskLevel.LOW), (74, RiskLevel.MEDIUM), (50, RiskLevel.MEDIUM), (49, RiskLevel.HIGH), (0, RiskLevel.HIGH)],
)
def test_percent_scale_cut_points(normalized, level):
    """Percent scale: >=75 low, >=50 medium, else high."""
    assert PERCENT_SCALE.risk_level(normalized) is level


def test_point_scale_labels_and_cut_points():
    """Point scale: >=8 legit, >=5 medium, else suspicious, on 0-10."""
    assert POINT_SCALE.scaled(80) == 8.0
    assert POINT_SCALE.risk_level(80) is RiskLevel.LOW
    assert POINT_SCALE.label(RiskLevel.LOW) == "legit"
    assert POINT_SCALE.risk_level(79) is RiskLevel.MEDIUM
    assert POINT_SCALE.risk_level(49) is RiskLevel.HIGH
    assert POINT_SCALE.label(RiskLevel.HIGH) == "suspicious"


@pytest.mark.parametrize("scale", [PERCENT_SCALE, POINT_SCALE])
def test_risk_mapping_is_monotonic_and_deterministic(scale):
    """A higher normalized score never maps to a riskier level."""
    order = {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2}
    levels = [scale.risk_level(n) for n in range(101)]
    assert all(order[a] <= order[b] for a, b in zip(levels, levels[1:]))
    assert levels == [scale.risk_level(n) for n in range(101)]


def test_normalize_score_bounds():
    """normalize_score is score/max*100 rounded, clamped to [0, 100]; 0 when max is 0."""
    assert normalize_score(75, 105) == 71
    assert normalize_score(0, 0) == 0
    assert normalize_score(-5, 10) == 0
    assert normalize_score(20, 10) == 100


@pytest.mark.parametrize(
    "score,max_score,expected,level",
    [
        (149, 200, 75, RiskLevel.LOW),
        (99, 200, 50, RiskLevel.MEDIUM),
        (1, 8, 13, RiskLevel.HIGH),
        (148, 200, 74, RiskLevel.MEDIUM),
    ],
)
def test_normalize_score_rounds_ties_up(score, max_score, expected, level):
    """Exact .5 results round up, so 74.5 lands in the low-risk band."""
    normalized = normalize_score(score, max_score)
    assert normalized == expected
    assert PERCENT_SCALE.risk_level(normalized) is level


def test_default_profiles_per_kind():
    """Token and wallet use the percent scale, repositories the point scale."""
    profiles = default_profiles(EngineSettings())
    assert profiles[TargetKind.TOKEN].scale is PERCENT_SCALE
    assert profiles[TargetKind.WALLET].scale is PERCENT_SCALE
    assert profiles[TargetKind.REPOSITORY].scale is POINT_SCALE
    assert profiles[TargetKind.TOKEN].max_total == 105
    assert profiles[TargetKind.REPOSITORY].max_total == 45
    assert profiles[TargetKind.TOKEN].required_bundles == (
        "token_metadata",
        "holders",
        "dex_trades",
        "creator_history",
    )


def test_scale_override_from_settings():
    """A settings override swaps the scale without changing the evaluators."""
    profiles = default_profiles(EngineSettings(repository_scale="percent", token_scale="points"))
    assert profiles[TargetKind.REPOSITORY].scale is PERCENT_SCALE
    assert profiles[TargetKind.TOKEN].scale is POINT_SCALE
    assert profiles[TargetKind.TOKEN].name == "token_points"


def test_scale_from_env(monkeypatch):
    """NILO_REPOSITORY_SCALE=percent is read by load_settings()."""
    from nilo_trust.config.settings import load_settings

    monkeypatch.setenv("NILO_REPOSITORY_SCALE", "percent")
    monkeypatch.setenv("NILO_CACHE_TTL_SEC", "60")
    s = load_settings()
    assert s.repository_scale == "percent"
    assert s.cache_ttl_sec == 60.0


def test_weights_multiply_max_total():
    """Weights scale an evaluator's contribution; negative weights are rejected."""
    profile = build_profile(TargetKind.REPOSITORY, weights={"license": 2.0})
    assert profile.max_total == 55
    with pytest.raises(ValueError):
        build_profile(TargetKind.REPOSITORY, weights={"license": -1.0})
    with pytest.raises(ValueError):
        build_profile(TargetKind.TOKEN, scale="stars")


def test_disable_and_enable_evaluators():
    """Disabled evaluators stay listed but leave max_total and required_bundles."""
    profile = build_profile(TargetKind.TOKEN).disable("dex_activity")
    assert profile.max_total == 90
    assert "dex_trades" not in profile.required_bundles
    assert [e.name for e in profile.active_evaluators] == [
        "token_metadata",
        "token_authority",
        "holder_distribution",
        "creator_origin",
    ]
    info = {entry["name"]: entry for entry in profile.evaluators_info()}
    assert info["dex_activity"]["enabled"] is False
    assert profile.enable("dex_activity").max_total == 105


def test_with_evaluator_and_without():
    """Evaluators can be added, replaced in place, or removed; unknown names raise."""
    from dataclasses import replace

    from nilo_trust.analysis_engine.repository_rules import REPO_LICENSE, REPO_METADATA

    profile = build_profile(TargetKind.REPOSITORY).without("license")
    assert profile.max_total == 35
    profile = profile.with_evaluator(REPO_LICENSE, weight=2.0)
    assert [e.name for e in profile.evaluators][-1] == "license"
    assert profile.max_total == 55

    louder = replace(REPO_METADATA, max_score=10)
    replaced = profile.with_evaluator(louder)
    assert [e.name for e in replaced.evaluators] == [e.name for e in profile.evaluators]
    assert replaced.max_total == 60

    with pytest.raises(KeyError):
        profile.disable("stars")
    with pytest.raises(KeyError):
        profile.without("stars")


def test_evaluators_info_lists_descriptions():
    """evaluators_info reports name, description, bundle, max score and weight in order."""
    info = build_profile(TargetKind.REPOSITORY, weights={"license": 2.0}).evaluators_info()
    assert [entry["name"] for entry in info] == [
        "popularity",
        "contributors",
        "maintenance",
        "repository_metadata",
        "license",
    ]
    assert info[0]["description"] == "Star count"
    assert info[-1]["weight"] == 2.0
    assert all(entry["enabled"] for entry in info)


def test_disabled_evaluators_from_settings(monkeypatch):
    """NILO_DISABLED_EVALUATORS switches names off in whichever profile has them."""
    from nilo_trust.config.settings import load_settings

    monkeypatch.setenv("NILO_DISABLED_EVALUATORS", "license, dex_activity")
    s = load_settings()
    assert s.disabled_evaluators == ("license", "dex_activity")
    profiles = default_profiles(s)
    assert profiles[TargetKind.REPOSITORY].disabled == frozenset({"license"})
    assert profiles[TargetKind.TOKEN].disabled == frozenset({"dex_activity"})
    assert profiles[TargetKind.WALLET].disabled == frozenset()
