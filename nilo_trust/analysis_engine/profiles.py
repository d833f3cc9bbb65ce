"""
Scoring profiles: which evaluators run for a target kind, their weights, and
the output scale with its risk cut points.

One engine, parameterized per target kind. Token and wallet default to the
0-100 percent scale, repositories to the 0-10 point scale; either can be
overridden per kind through NILO_<KIND>_SCALE.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from nilo_trust.analysis_engine.evaluators import Evaluator
from nilo_trust.analysis_engine.models import RiskLevel, TargetKind
from nilo_trust.analysis_engine.repository_rules import REPOSITORY_EVALUATORS
from nilo_trust.analysis_engine.token_rules import TOKEN_EVALUATORS
from nilo_trust.analysis_engine.wallet_rules import WALLET_EVALUATORS
from nilo_trust.config import env
from nilo_trust.config.settings import EngineSettings


@dataclass(frozen=True)
class ScoreScale:
    """
    Output scale. low_at / medium_at are cut points on this scale: a score at or
    above low_at is low risk, at or above medium_at medium, otherwise high.
    """

    name: str
    scale_max: float
    low_at: float
    medium_at: float
    labels: Mapping[RiskLevel, str]

    def scaled(self, normalized: int) -> float:
        """Express a 0-100 normalized score on this scale (one decimal)."""
        return round(normalized * self.scale_max / 100.0, 1)

    def risk_level(self, normalized: int) -> RiskLevel:
        value = self.scaled(normalized)
        if value >= self.low_at:
            return RiskLevel.LOW
        if value >= self.medium_at:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    def label(self, level: RiskLevel) -> str:
        return self.labels.get(level, level.value)


PERCENT_SCALE = ScoreScale(
    name=env.SCALE_PERCENT,
    scale_max=100.0,
    low_at=75.0,
    medium_at=50.0,
    labels=MappingProxyType(
        {RiskLevel.LOW: "low", RiskLevel.MEDIUM: "medium", RiskLevel.HIGH: "high"}
    ),
)

POINT_SCALE = ScoreScale(
    name=env.SCALE_POINTS,
    scale_max=10.0,
    low_at=8.0,
    medium_at=5.0,
    labels=MappingProxyType(
        {RiskLevel.LOW: "legit", RiskLevel.MEDIUM: "medium", RiskLevel.HIGH: "suspicious"}
    ),
)

SCALES = {PERCENT_SCALE.name: PERCENT_SCALE, POINT_SCALE.name: POINT_SCALE}

DEFAULT_EVALUATORS: dict[TargetKind, tuple[Evaluator, ...]] = {
    TargetKind.TOKEN: TOKEN_EVALUATORS,
    TargetKind.WALLET: WALLET_EVALUATORS,
    TargetKind.REPOSITORY: REPOSITORY_EVALUATORS,
}


@dataclass(frozen=True)
class ScoringProfile:
    """
    Ordered evaluators plus per-evaluator weight multipliers (default 1.0).

    Profiles are immutable; with_evaluator / without / enable / disable return
    a new profile. Disabled evaluators stay listed but are not run and do not
    count toward max_total.
    """

    name: str
    kind: TargetKind
    evaluators: tuple[Evaluator, ...]
    scale: ScoreScale
    weights: Mapping[str, float] = field(default_factory=dict)
    disabled: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        names = [e.name for e in self.evaluators]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate evaluator names in profile {self.name}: {names}")
        for name, weight in self.weights.items():
            if weight < 0:
                raise ValueError(f"Negative weight for {name} in profile {self.name}")
        unknown = set(self.disabled) - set(names)
        if unknown:
            raise ValueError(f"Unknown evaluators disabled in profile {self.name}: {sorted(unknown)}")

    def weight(self, evaluator_name: str) -> float:
        return float(self.weights.get(evaluator_name, 1.0))

    @property
    def active_evaluators(self) -> tuple[Evaluator, ...]:
        return tuple(e for e in self.evaluators if e.name not in self.disabled)

    @property
    def required_bundles(self) -> tuple[str, ...]:
        """Bundle names the enabled evaluators consume, in first-use order."""
        seen: dict[str, None] = {}
        for e in self.active_evaluators:
            seen.setdefault(e.requires, None)
        return tuple(seen)

    @property
    def max_total(self) -> float:
        return sum(e.max_score * self.weight(e.name) for e in self.active_evaluators)

    def risk_level(self, normalized: int) -> RiskLevel:
        return self.scale.risk_level(normalized)

    def risk_label(self, normalized: int) -> str:
        return self.scale.label(self.risk_level(normalized))

    def scaled(self, normalized: int) -> float:
        return self.scale.scaled(normalized)

    def _names(self) -> set[str]:
        return {e.name for e in self.evaluators}

    def _check_known(self, names: tuple[str, ...]) -> None:
        unknown = set(names) - self._names()
        if unknown:
            raise KeyError(f"Unknown evaluators for profile {self.name}: {sorted(unknown)}")

    def with_evaluator(self, evaluator: Evaluator, weight: float | None = None) -> ScoringProfile:
        """Add evaluator at the end, or replace the one with the same name in place."""
        if evaluator.name in self._names():
            evaluators = tuple(evaluator if e.name == evaluator.name else e for e in self.evaluators)
        else:
            evaluators = self.evaluators + (evaluator,)
        weights = dict(self.weights)
        if weight is not None:
            weights[evaluator.name] = weight
        return replace(self, evaluators=evaluators, weights=weights)

    def without(self, *names: str) -> ScoringProfile:
        """Drop evaluators by name; raises KeyError for names not in the profile."""
        self._check_known(names)
        return replace(
            self,
            evaluators=tuple(e for e in self.evaluators if e.name not in names),
            weights={k: v for k, v in self.weights.items() if k not in names},
            disabled=self.disabled - set(names),
        )

    def disable(self, *names: str) -> ScoringProfile:
        self._check_known(names)
        return replace(self, disabled=self.disabled | set(names))

    def enable(self, *names: str) -> ScoringProfile:
        self._check_known(names)
        return replace(self, disabled=self.disabled - set(names))

    def evaluators_info(self) -> list[dict[str, Any]]:
        """One entry per evaluator, in profile order, including disabled ones."""
        return [
            {
                "name": e.name,
                "description": e.description,
                "requires": e.requires,
                "max_score": e.max_score,
                "weight": self.weight(e.name),
                "enabled": e.name not in self.disabled,
            }
            for e in self.evaluators
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "scale": self.scale.name,
            "scale_max": self.scale.scale_max,
            "max_total": self.max_total,
            "evaluators": self.evaluators_info(),
        }


def build_profile(
    kind: TargetKind,
    scale: ScoreScale | str | None = None,
    weights: Mapping[str, float] | None = None,
) -> ScoringProfile:
    """Default evaluator list for kind, on the given (or kind-default) scale."""
    if scale is None:
        scale = POINT_SCALE if kind is TargetKind.REPOSITORY else PERCENT_SCALE
    elif isinstance(scale, str):
        try:
            scale = SCALES[scale]
        except KeyError:
            raise ValueError(f"Unknown score scale: {scale!r}") from None
    return ScoringProfile(
        name=f"{kind.value}_{scale.name}",
        kind=kind,
        evaluators=DEFAULT_EVALUATORS[kind],
        scale=scale,
        weights=dict(weights or {}),
    )


def default_profiles(settings: EngineSettings | None = None) -> dict[TargetKind, ScoringProfile]:
    """One profile per kind; settings.disabled_evaluators applies wherever the name exists."""
    settings = settings or EngineSettings()
    profiles = {}
    for kind in TargetKind:
        profile = build_profile(kind, settings.scale_for(kind.value))
        names = {e.name for e in profile.evaluators}
        off = [name for name in settings.disabled_evaluators if name in names]
        profiles[kind] = profile.disable(*off) if off else profile
    return profiles
