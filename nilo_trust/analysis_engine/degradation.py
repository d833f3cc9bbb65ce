"""
Degradation policy: what the engine reports when signal providers fail.

- A bundle that never arrived is scored by the evaluator's documented
  penalty (missing_result), never skipped.
- A partial failure marks the composite DEGRADED and puts a banner flag first.
- A total failure yields a FALLBACK composite scored from placeholder data,
  with its own banner; callers must not present it as a verdict.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from nilo_trust.analysis_engine.evaluators import Evaluator
from nilo_trust.analysis_engine.models import EvaluationResult, SignalBundle, TargetKind
from nilo_trust.analysis_engine.signals import (
    BUNDLE_CREATOR_HISTORY,
    BUNDLE_DEX_TRADES,
    BUNDLE_HOLDERS,
    BUNDLE_REPOSITORY,
    BUNDLE_TOKEN_METADATA,
    BUNDLE_WALLET_HOLDINGS,
)

DEGRADED_FLAG_PREFIX = "degraded:"
FALLBACK_FLAG_PREFIX = "fallback:"
FALLBACK_FLAG = f"{FALLBACK_FLAG_PREFIX} all signal providers failed; placeholder data, not a verdict"
EMERGENCY_FLAG = f"{FALLBACK_FLAG_PREFIX} internal error while scoring; result is not a verdict"
DEMO_SOURCE = "demo"

# Placeholder payloads used only when every provider for a target failed
DEMO_PAYLOADS: dict[TargetKind, dict[str, Any]] = {
    TargetKind.TOKEN: {
        BUNDLE_TOKEN_METADATA: {
            "name": "Demo Token",
            "symbol": "DEMO",
            "supply": 1_000_000_000,
            "decimals": 9,
            "mintAuthority": None,
            "freezeAuthority": None,
        },
        BUNDLE_HOLDERS: [
            {"address": "Demo1holder", "balance": 1_000_000_000},
            {"address": "Demo2holder", "balance": 800_000_000},
            {"address": "Demo3holder", "balance": 600_000_000},
            {"address": "Demo4holder", "balance": 500_000_000},
            {"address": "Demo5holder", "balance": 400_000_000},
        ],
        BUNDLE_DEX_TRADES: [],
        BUNDLE_CREATOR_HISTORY: {"recentSimilarCreations": 0, "transactionCount": 0},
    },
    TargetKind.WALLET: {
        BUNDLE_CREATOR_HISTORY: {"recentSimilarCreations": 0, "transactionCount": 0},
        BUNDLE_WALLET_HOLDINGS: {"solBalance": 0.0, "tokenAccounts": 0, "transactionCount": 0},
    },
    TargetKind.REPOSITORY: {
        BUNDLE_REPOSITORY: {
            "stars": 0,
            "contributors": 0,
            "open_issues": 0,
            "description": "No description provided",
            "license": None,
        },
    },
}


def missing_result(evaluator: Evaluator, reason: str) -> EvaluationResult:
    """Penalty for a bundle that never arrived: max_score * missing_fraction plus a flag."""
    return evaluator.missing(reason)


def degraded_banner(unavailable: Sequence[str], total: int) -> str:
    """e.g. 'degraded: 2 of 4 signal providers unavailable (holders, dex_trades)'."""
    names = ", ".join(unavailable)
    return (
        f"{DEGRADED_FLAG_PREFIX} {len(unavailable)} of {total} signal providers unavailable ({names})"
    )


def is_banner(flag: str) -> bool:
    return flag.startswith((DEGRADED_FLAG_PREFIX, FALLBACK_FLAG_PREFIX))


def demo_bundles(kind: TargetKind, observed_at: float) -> dict[str, SignalBundle]:
    """Placeholder bundles for kind, stamped with observed_at."""
    payloads: Mapping[str, Any] = DEMO_PAYLOADS.get(kind, {})
    return {
        name: SignalBundle(name=name, payload=payload, observed_at=observed_at, source=DEMO_SOURCE)
        for name, payload in payloads.items()
    }
