"""
TrustEngine: validate target -> cache -> concurrent providers -> aggregate.

Only ValidationError leaves analyze(); every provider or evaluator failure is
absorbed into a degraded or fallback CompositeScore. Fallback composites are
returned but not cached, so the next caller retries the providers.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from nilo_trust.analysis_engine.aggregator import aggregate, emergency_composite
from nilo_trust.analysis_engine.cache import ResultCache
from nilo_trust.analysis_engine.models import CompositeScore, TargetKind
from nilo_trust.analysis_engine.profiles import ScoringProfile, default_profiles
from nilo_trust.analysis_engine.targets import AnalysisTarget
from nilo_trust.config.settings import EngineSettings, get_settings
from nilo_trust.core.exceptions import ValidationError
from nilo_trust.nilo_logging import get_logger, target_context
from nilo_trust.providers.base import SignalProvider, collect_signals
from nilo_trust.providers.static import StaticProvider

logger = get_logger(__name__)


class TrustEngine:
    """
    Composite risk scorer for tokens, wallets and repositories.

    providers: per target kind, the providers to call (one bundle each).
    profiles: per target kind, the scoring profile; defaults from settings.
    cache: shared ResultCache; one is created from settings if omitted.
    clock: wall clock used for observed_at / computed_at stamps.
    """

    def __init__(
        self,
        providers: Mapping[TargetKind, Sequence[SignalProvider]],
        profiles: Mapping[TargetKind, ScoringProfile] | None = None,
        cache: ResultCache | None = None,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or get_settings()
        self.providers = {TargetKind(k): tuple(v) for k, v in providers.items()}
        self.profiles = dict(profiles) if profiles is not None else default_profiles(self.settings)
        self.cache = cache or ResultCache(
            ttl=self.settings.cache_ttl_sec,
            max_entries=self.settings.cache_max_entries,
        )
        self._clock = clock

    def profile_for(self, kind: TargetKind) -> ScoringProfile:
        try:
            return self.profiles[kind]
        except KeyError:
            raise ValidationError(f"No scoring profile configured for {kind.value}") from None

    async def analyze(
        self,
        target: AnalysisTarget,
        *,
        ttl: float | None = None,
        timeout: float | None = None,
    ) -> CompositeScore:
        """
        Return the composite score for target, from cache when fresh.

        ttl overrides the cache TTL for the stored entry; timeout (seconds)
        overrides the per-provider timeout. Raises ValidationError only.
        """
        if not isinstance(target, AnalysisTarget):
            raise ValidationError(
                f"analyze() expects an AnalysisTarget, got {type(target).__name__}"
            )
        # Re-validate: a hand-built AnalysisTarget skips the constructor checks
        target = AnalysisTarget.parse(target.kind, target.identifier)
        profile = self.profile_for(target.kind)
        timeout = self.settings.provider_timeout_sec if timeout is None else timeout

        async def compute() -> CompositeScore:
            return await self._compute(target, profile, timeout)

        with target_context(target.kind.value, target.identifier):
            result = await self.cache.get_or_compute(
                target.cache_key,
                compute,
                ttl=ttl,
                should_cache=lambda composite: not composite.is_fallback,
            )
            logger.info(
                "engine_analyze_done",
                profile=profile.name,
                status=result.status.value,
                normalized_score=result.normalized_score,
                risk_level=result.risk_level.value,
                flags=len(result.flags),
            )
        return result

    async def _compute(
        self,
        target: AnalysisTarget,
        profile: ScoringProfile,
        timeout: float,
    ) -> CompositeScore:
        needed = set(profile.required_bundles)
        # Providers for disabled evaluators are not called
        providers = [p for p in self.providers.get(target.kind, ()) if p.bundle in needed]
        logger.info(
            "engine_analyze_start",
            target_kind=target.kind.value,
            target_id=target.short_id,
            providers=len(providers),
            timeout_sec=timeout,
        )
        try:
            outcomes = await collect_signals(target, providers, timeout, self._clock)
        except Exception:
            logger.exception("engine_collect_failed", target_id=target.short_id)
            return emergency_composite(target, profile, self._clock())
        return aggregate(target, profile, outcomes, now=self._clock())

    async def score_signals(
        self,
        target: AnalysisTarget,
        payloads: Mapping[str, Any],
    ) -> CompositeScore:
        """
        Score caller-supplied payloads (bundle name -> payload) for target.

        Bypasses the configured providers and the cache: the result describes
        the given data, not the live sources. A None payload counts as a
        failed provider; payloads for bundles the profile does not use are ignored.
        """
        if not isinstance(target, AnalysisTarget):
            raise ValidationError(
                f"score_signals() expects an AnalysisTarget, got {type(target).__name__}"
            )
        target = AnalysisTarget.parse(target.kind, target.identifier)
        profile = self.profile_for(target.kind)
        needed = set(profile.required_bundles)
        providers = [
            StaticProvider(name, payload) for name, payload in payloads.items() if name in needed
        ]
        outcomes = await collect_signals(
            target, providers, self.settings.provider_timeout_sec, self._clock
        )
        return aggregate(target, profile, outcomes, now=self._clock())

    def analyze_sync(
        self,
        target: AnalysisTarget,
        *,
        ttl: float | None = None,
        timeout: float | None = None,
    ) -> CompositeScore:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.analyze(target, ttl=ttl, timeout=timeout))
