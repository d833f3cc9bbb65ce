"""
Signal provider contract and concurrent collection.

A provider fetches one named bundle for a target. collect_signals() calls all
providers for a target at once, each under its own timeout, and turns every
outcome into a ProviderOutcome: success carries the bundle, failure carries a
ProviderError. Nothing raised by a provider escapes this module.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from nilo_trust.analysis_engine.models import SignalBundle
from nilo_trust.analysis_engine.targets import AnalysisTarget
from nilo_trust.core.exceptions import (
    PROVIDER_REASON_EMPTY,
    PROVIDER_REASON_ERROR,
    PROVIDER_REASON_TIMEOUT,
    ProviderError,
)
from nilo_trust.nilo_logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class SignalProvider(Protocol):
    """
    Fetches one signal bundle for a target.

    fetch() may return a SignalBundle, a bare payload (wrapped by the
    collector), or None for "no data". It may raise; the collector absorbs it.
    """

    name: str
    bundle: str

    async def fetch(self, target: AnalysisTarget) -> Any: ...


@dataclass(frozen=True)
class ProviderOutcome:
    """Tagged result of one provider call: exactly one of bundle / error is set."""

    provider: str
    bundle_name: str
    bundle: SignalBundle | None = None
    error: ProviderError | None = None
    elapsed_sec: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.bundle is not None and self.error is None

    @property
    def reason(self) -> str | None:
        return self.error.reason if self.error is not None else None

    @classmethod
    def ok(cls, provider: str, bundle: SignalBundle, elapsed_sec: float = 0.0) -> ProviderOutcome:
        return cls(provider=provider, bundle_name=bundle.name, bundle=bundle, elapsed_sec=elapsed_sec)

    @classmethod
    def failed(
        cls,
        provider: str,
        bundle_name: str,
        error: ProviderError,
        elapsed_sec: float = 0.0,
    ) -> ProviderOutcome:
        return cls(provider=provider, bundle_name=bundle_name, error=error, elapsed_sec=elapsed_sec)


def _as_bundle(result: Any, bundle_name: str, source: str, observed_at: float) -> SignalBundle:
    if isinstance(result, SignalBundle):
        return result
    return SignalBundle(name=bundle_name, payload=result, observed_at=observed_at, source=source)


async def call_provider(
    provider: SignalProvider,
    target: AnalysisTarget,
    timeout: float,
    clock: Callable[[], float] = time.time,
) -> ProviderOutcome:
    """Single attempt under asyncio.wait_for; never raises except on cancellation."""
    name = getattr(provider, "name", type(provider).__name__)
    bundle_name = getattr(provider, "bundle", name)
    started = time.monotonic()
    try:
        result = await asyncio.wait_for(provider.fetch(target), timeout=timeout)
    except asyncio.TimeoutError:
        elapsed = time.monotonic() - started
        logger.warning(
            "provider_call_timeout",
            provider=name,
            bundle=bundle_name,
            target_id=target.short_id,
            timeout_sec=timeout,
        )
        return ProviderOutcome.failed(
            name,
            bundle_name,
            ProviderError(name, f"timed out after {timeout:g}s", PROVIDER_REASON_TIMEOUT),
            elapsed,
        )
    except asyncio.CancelledError:
        raise
    except Exception as e:
        elapsed = time.monotonic() - started
        logger.warning(
            "provider_call_failed",
            provider=name,
            bundle=bundle_name,
            target_id=target.short_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return ProviderOutcome.failed(
            name, bundle_name, ProviderError(name, str(e) or type(e).__name__), elapsed
        )

    elapsed = time.monotonic() - started
    if result is None:
        logger.info("provider_call_empty", provider=name, bundle=bundle_name, target_id=target.short_id)
        return ProviderOutcome.failed(
            name, bundle_name, ProviderError(name, "no data returned", PROVIDER_REASON_EMPTY), elapsed
        )
    bundle = _as_bundle(result, bundle_name, name, clock())
    logger.debug(
        "provider_call_ok",
        provider=name,
        bundle=bundle.name,
        target_id=target.short_id,
        elapsed_ms=round(elapsed * 1000, 1),
    )
    return ProviderOutcome.ok(name, bundle, elapsed)


async def collect_signals(
    target: AnalysisTarget,
    providers: Sequence[SignalProvider],
    timeout: float,
    clock: Callable[[], float] = time.time,
) -> list[ProviderOutcome]:
    """
    Call every provider concurrently and wait for all of them to settle.

    Returns one outcome per provider, in provider order. A slow or failing
    provider only affects its own outcome.
    """
    if not providers:
        return []
    outcomes = await asyncio.gather(
        *(call_provider(p, target, timeout, clock) for p in providers)
    )
    failed = [o.provider for o in outcomes if not o.succeeded]
    if failed:
        logger.info(
            "provider_collection_partial",
            target_id=target.short_id,
            failed=failed,
            total=len(outcomes),
        )
    return list(outcomes)


__all__ = [
    "PROVIDER_REASON_EMPTY",
    "PROVIDER_REASON_ERROR",
    "PROVIDER_REASON_TIMEOUT",
    "ProviderOutcome",
    "SignalProvider",
    "call_provider",
    "collect_signals",
]
