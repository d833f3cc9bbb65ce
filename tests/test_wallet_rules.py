"""
Tests for wallet evaluators: holdings ratio and penalties, origin reuse.
"""

from __future__ import annotations

import pytest

from nilo_trust.analysis_engine.models import Severity, SignalBundle
from nilo_trust.analysis_engine.wallet_rules import WALLET_HOLDINGS, WALLET_ORIGIN

from conftest import DAY, NOW, healthy_creator


def _holdings(sol, accounts, txs=0):
    payload = {"solBalance": sol, "tokenAccounts": accounts, "transactionCount": txs}
    return WALLET_HOLDINGS.evaluate(SignalBundle("wallet_holdings", payload, NOW))


@pytest.mark.parametrize(
    "sol,accounts,points",
    [
        (10.0, 5, 15),  # ratio 0.5
        (1.0, 150, 10),  # ratio 150, no dust penalty at 1 SOL
        (1.0, 600, 5),  # ratio 600
        (1.0, 1500, 0),  # ratio 1500
    ],
)
def test_holdings_ratio_bands(sol, accounts, points):
    """Token accounts per SOL: >1000 -> 0, >500 -> 5, >100 -> 10, else 15."""
    assert _holdings(sol, accounts).score == points


def test_holdings_extreme_ratio_is_critical():
    """An extreme ratio is a critical flag."""
    r = _holdings(0.0, 200)
    # ratio against the 0.1 SOL floor is 2000
    assert r.score == 0
    assert r.severity is Severity.CRITICAL


def test_holdings_dust_and_bot_penalties():
    """Dust accumulation deducts 3; heavy activity on an empty wallet deducts 4."""
    r = _holdings(0.05, 8, txs=900)
    # ratio 8 / 0.1 = 80 -> 15, bot -4
    assert r.score == 11
    assert any("bot-like activity" in f for f in r.risk_flags)

    r = _holdings(0.4, 60)
    # ratio 150 -> 10, dust -3
    assert r.score == 7
    assert any("dust accumulation" in f for f in r.risk_flags)


def test_wallet_origin_reuses_creator_heuristic():
    """Wallet origin reads creator_history and scores like the token creator rule."""
    assert WALLET_ORIGIN.requires == "creator_history"
    r = WALLET_ORIGIN.evaluate(SignalBundle("creator_history", healthy_creator(), NOW))
    assert r.score == 15
    assert r.name == "wallet_origin"


def test_wallet_origin_fresh_wallet_with_heavy_activity():
    """A wallet under 7 days old with more than 100 transactions loses 5 points."""
    history = {"firstSeenAt": NOW - 3 * DAY, "recentSimilarCreations": 0, "transactionCount": 150}
    r = WALLET_ORIGIN.evaluate(SignalBundle("creator_history", history, NOW))
    # age 0 + no creations 6 + 150 txs 3, fresh-active -5
    assert r.score == 4
    assert "New wallet with high activity (< 7 days old)" in r.risk_flags

    quiet = dict(history, transactionCount=40)
    q = WALLET_ORIGIN.evaluate(SignalBundle("creator_history", quiet, NOW))
    assert q.score == 0 + 6 + 2
    assert "New wallet with high activity (< 7 days old)" not in q.risk_flags


def test_wallet_origin_old_busy_wallet_not_penalized():
    """Heavy activity on an established wallet is not the fresh-wallet pattern."""
    r = WALLET_ORIGIN.evaluate(SignalBundle("creator_history", healthy_creator(), NOW))
    assert not any("New wallet" in f for f in r.risk_flags)
