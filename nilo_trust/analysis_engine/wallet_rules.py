"""
Wallet evaluators: origin (the token creator heuristic applied to the
wallet's own history) and SOL/token-account holdings balance.
"""

from __future__ import annotations

from nilo_trust.analysis_engine.evaluators import Evaluator, ScoreSheet
from nilo_trust.analysis_engine.signals import (
    BUNDLE_CREATOR_HISTORY,
    BUNDLE_WALLET_HOLDINGS,
    CreatorHistory,
    WalletHoldings,
)
from nilo_trust.analysis_engine.token_rules import ORIGIN_MAX, SECONDS_PER_DAY, score_origin

HOLDINGS_MAX = 15
# (ratio of token accounts to SOL above which, points)
ACCOUNT_RATIO_BANDS = ((1000, 0), (500, 5), (100, 10))
MIN_SOL_FOR_RATIO = 0.1
DUST_ACCOUNTS = 50
DUST_SOL = 0.5
DUST_PENALTY = 3
BOT_TX_COUNT = 500
BOT_SOL = 0.1
BOT_PENALTY = 4
FRESH_WALLET_DAYS = 7
FRESH_WALLET_TX_COUNT = 100
FRESH_ACTIVE_PENALTY = 5


def score_holdings(sheet: ScoreSheet, holdings: WalletHoldings, observed_at: float) -> None:
    sol = holdings.sol_balance
    accounts = holdings.token_accounts
    ratio = accounts / max(sol, MIN_SOL_FOR_RATIO)

    points = HOLDINGS_MAX
    for above, band_points in ACCOUNT_RATIO_BANDS:
        if ratio > above:
            points = band_points
            break
    sheet.award(points, f"{accounts} token accounts, {sol:.3f} SOL")
    if ratio > 1000:
        sheet.flag(
            f"Extreme token account to SOL ratio ({ratio:.0f}) - likely airdrop farm or spam sink",
            critical=True,
        )
    elif ratio > 100:
        sheet.flag(f"High token account to SOL ratio ({ratio:.0f})")

    if accounts > DUST_ACCOUNTS and sol < DUST_SOL:
        sheet.deduct(DUST_PENALTY)
        sheet.flag(f"{accounts} token accounts with under {DUST_SOL} SOL (dust accumulation)")

    if holdings.transaction_count > BOT_TX_COUNT and sol < BOT_SOL:
        sheet.deduct(BOT_PENALTY)
        sheet.flag(
            f"{holdings.transaction_count} transactions with under {BOT_SOL} SOL (bot-like activity)"
        )


def score_wallet_origin(sheet: ScoreSheet, history: CreatorHistory, observed_at: float) -> None:
    """Creator origin heuristic, plus a penalty for a days-old wallet that already trades heavily."""
    score_origin(sheet, history, observed_at)
    if history.first_seen_at is None:
        return
    age_days = (observed_at - history.first_seen_at) / SECONDS_PER_DAY
    if age_days < FRESH_WALLET_DAYS and history.transaction_count > FRESH_WALLET_TX_COUNT:
        sheet.deduct(FRESH_ACTIVE_PENALTY)
        sheet.flag(f"New wallet with high activity (< {FRESH_WALLET_DAYS} days old)")


WALLET_ORIGIN = Evaluator(
    name="wallet_origin",
    requires=BUNDLE_CREATOR_HISTORY,
    max_score=ORIGIN_MAX,
    score_fn=score_wallet_origin,
    payload_type=CreatorHistory,
    missing_flag="Unable to analyze wallet history",
    description="Wallet age, recent token launches and transaction history",
)

WALLET_HOLDINGS = Evaluator(
    name="wallet_holdings",
    requires=BUNDLE_WALLET_HOLDINGS,
    max_score=HOLDINGS_MAX,
    score_fn=score_holdings,
    payload_type=WalletHoldings,
    missing_flag="No wallet balance data",
    description="SOL balance against token account count and transaction volume",
)

WALLET_EVALUATORS = (WALLET_ORIGIN, WALLET_HOLDINGS)
