"""
Pytest fixtures for Nilo Trust tests: fake clock, captured signal payloads
and an engine factory wired to in-memory providers.
"""

from __future__ import annotations

import asyncio

import pytest

NOW = 1_700_000_000.0
DAY = 86400.0

TOKEN_MINT = "So11111111111111111111111111111111111111112"
WALLET = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
CREATOR = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class FakeClock:
    """Callable clock; advance() moves time forward without sleeping."""

    def __init__(self, start: float = NOW) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingProvider:
    """Returns payload and counts calls; optional delay or error."""

    def __init__(self, bundle, payload=None, delay=0.0, error=None, name=None):
        self.bundle = bundle
        self.name = name or f"counting:{bundle}"
        self.payload = payload
        self.delay = delay
        self.error = error
        self.calls = 0

    async def fetch(self, target):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


def healthy_token_metadata() -> dict:
    return {
        "name": "Solid Token",
        "symbol": "SLD",
        "supply": 1_000_000,
        "decimals": 9,
        "mintAuthority": None,
        "freezeAuthority": None,
        "description": "A long-running community token",
        "image": "https://arweave.net/logo.png",
        "uri": "https://arweave.net/metadata.json",
        "creators": [{"address": CREATOR, "share": 100}],
        "isMutable": False,
    }


def healthy_holders() -> list[dict]:
    return [{"address": f"holder{i}", "balance": 100.0} for i in range(600)]


def healthy_trades(now: float = NOW) -> list[dict]:
    venues = ("raydium", "orca")
    return [
        {
            "buyer": f"buyer{i}",
            "seller": f"seller{i % 60}",
            "amount": 10.0 + i,
            "venue": venues[i % 2],
            "timestamp": now - 3600 - i,
        }
        for i in range(120)
    ]


def healthy_creator(now: float = NOW) -> dict:
    return {
        "firstSeenAt": now - 200 * DAY,
        "recentSimilarCreations": 0,
        "transactionCount": 120,
    }


def healthy_token_signals(now: float = NOW) -> dict:
    return {
        "token_metadata": healthy_token_metadata(),
        "holders": healthy_holders(),
        "dex_trades": healthy_trades(now),
        "creator_history": healthy_creator(now),
    }


def established_repository(now: float = NOW) -> dict:
    return {
        "stars": 1500,
        "contributors": 12,
        "open_issues": 10,
        "description": "Well maintained Solana SDK",
        "license": {"spdx_id": "MIT", "name": "MIT License"},
        "updated_at": now - 3 * DAY,
    }


def abandoned_repository(now: float = NOW) -> dict:
    return {
        "stars": 2,
        "contributors": 1,
        "open_issues": 0,
        "description": None,
        "license": None,
        "updated_at": now - 400 * DAY,
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    from nilo_trust.config.settings import EngineSettings

    return EngineSettings(cache_ttl_sec=300, cache_max_entries=50, provider_timeout_sec=1.0)


@pytest.fixture
def make_engine(clock, settings):
    """Factory: make_engine({TargetKind: {bundle: payload or provider}}) -> TrustEngine."""
    from nilo_trust.analysis_engine.cache import ResultCache
    from nilo_trust.analysis_engine.engine import TrustEngine
    from nilo_trust.providers import StaticProvider

    def _make(signals_by_kind, **kwargs):
        providers = {}
        for kind, signals in signals_by_kind.items():
            providers[kind] = [
                p if hasattr(p, "fetch") else StaticProvider(bundle, p)
                for bundle, p in signals.items()
            ]
        cache = kwargs.pop("cache", None) or ResultCache(ttl=300, max_entries=50, clock=clock)
        return TrustEngine(providers, cache=cache, settings=settings, clock=clock, **kwargs)

    return _make
