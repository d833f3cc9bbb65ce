"""
Token evaluators: metadata completeness, mint/freeze authority, holder
concentration, DEX activity and creator origin.

Each rule is an additive point table; the band edges below are the tuning
surface. Scores are trust points (higher = safer), so a risk shows up as
points not awarded plus an explicit flag.
"""

from __future__ import annotations

from collections import Counter

from nilo_trust.analysis_engine.evaluators import (
    STRICT_PASS_RATIO,
    Evaluator,
    ScoreSheet,
)
from nilo_trust.analysis_engine.signals import (
    BUNDLE_CREATOR_HISTORY,
    BUNDLE_DEX_TRADES,
    BUNDLE_HOLDERS,
    BUNDLE_TOKEN_METADATA,
    CreatorHistory,
    HolderDistribution,
    TokenMetadata,
    TradeActivity,
)

SECONDS_PER_DAY = 86400.0

# Metadata completeness (max 15)
METADATA_MAX = 15
METADATA_NAME_SYMBOL = 4
METADATA_DESCRIPTION = 2
METADATA_DESCRIPTION_MIN_LEN = 10
METADATA_IMAGE = 2
METADATA_URI = 3
METADATA_URI_PERMANENT_BONUS = 1
METADATA_CREATORS = 3
PERMANENT_STORAGE_MARKERS = ("arweave.net", "ar://", "ipfs")

# Authority / control (max 30)
AUTHORITY_MAX = 30
AUTHORITY_MINT_BURNED = 15
AUTHORITY_FREEZE_DISABLED = 10
AUTHORITY_IMMUTABLE = 5

# Distribution / concentration (max 30)
DISTRIBUTION_MAX = 30
HOLDER_COUNT_BANDS = ((500, 10), (100, 7), (50, 4))
TOP1_BANDS = ((10.0, 10), (25.0, 6), (50.0, 2))
TOP3_BANDS = ((30.0, 10), (50.0, 5))
NO_HOLDER_DATA_FLAG = "No holder data - token may exist only in liquidity pools"

# DEX activity (max 15)
ACTIVITY_MAX = 15
TRADE_COUNT_BANDS = ((100, 6), (50, 5), (10, 3), (0, 1))
TRADER_BANDS = ((50, 6), (20, 4), (4, 2))
VENUES_MULTI = 3
VENUES_SINGLE = 1
WASH_TRADING_PENALTY = 2
WASH_TRADING_MIN_TRADES = 10
WASH_TRADING_SHARE = 0.2
WASH_TRADING_BALANCE = 0.7
RECENT_WINDOW_SEC = SECONDS_PER_DAY

# Creator / origin (max 15)
ORIGIN_MAX = 15
AGE_BANDS = ((90, 6), (30, 4), (7, 2))
AGE_UNKNOWN_POINTS = 3
CREATION_BANDS = ((0, 6), (1, 4), (3, 2))
TX_COUNT_BANDS = ((50, 3), (10, 2))
SPAM_CREATIONS_ABOVE = 3


def _band_at_least(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    """Points for the first (threshold, points) band whose threshold value meets."""
    for threshold, points in bands:
        if value >= threshold:
            return points
    return 0


def _band_at_most(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in bands:
        if value <= threshold:
            return points
    return 0


def score_metadata(sheet: ScoreSheet, meta: TokenMetadata, observed_at: float) -> None:
    if meta.name and meta.symbol:
        sheet.award(METADATA_NAME_SYMBOL, "Name and symbol present")
    else:
        sheet.flag("Missing basic token information")
        sheet.note("Missing name or symbol")

    if meta.description and len(meta.description) > METADATA_DESCRIPTION_MIN_LEN:
        sheet.award(METADATA_DESCRIPTION, "Has description")
    else:
        sheet.note("No description provided")

    if meta.image:
        sheet.award(METADATA_IMAGE, "Has logo/image")
    else:
        sheet.note("No logo/image")

    if meta.metadata_uri:
        sheet.award(METADATA_URI)
        uri = meta.metadata_uri.lower()
        if any(marker in uri for marker in PERMANENT_STORAGE_MARKERS):
            sheet.award(METADATA_URI_PERMANENT_BONUS, "Metadata on permanent storage (Arweave/IPFS)")
        else:
            sheet.note("Metadata on centralized server")
    else:
        sheet.flag("No metadata URI found")

    if meta.creators:
        sheet.award(METADATA_CREATORS, f"{len(meta.creators)} creator(s) listed")
    else:
        sheet.note("No creators specified")


def score_authority(sheet: ScoreSheet, meta: TokenMetadata, observed_at: float) -> None:
    if meta.mint_authority is None:
        sheet.award(AUTHORITY_MINT_BURNED, "Mint authority burned (supply is fixed)")
    else:
        sheet.flag("Mint authority is NOT burned - new tokens can be minted", critical=True)

    if meta.freeze_authority is None:
        sheet.award(AUTHORITY_FREEZE_DISABLED, "Freeze authority disabled")
    else:
        sheet.flag("Freeze authority is active - holder accounts can be frozen", critical=True)

    if meta.is_mutable is False:
        sheet.award(AUTHORITY_IMMUTABLE, "Metadata is immutable")
    elif meta.update_authority or meta.is_mutable:
        sheet.flag("Update authority is mutable - metadata can be changed")
    else:
        sheet.note("Update authority status unknown")


def score_distribution(sheet: ScoreSheet, dist: HolderDistribution, observed_at: float) -> None:
    holders = dist.holders
    if not holders:
        sheet.flag(NO_HOLDER_DATA_FLAG)
        return
    if dist.total_observed <= 0:
        sheet.flag("Cannot calculate holder distribution - zero observed supply")
        return

    count = len(holders)
    count_points = _band_at_least(count, HOLDER_COUNT_BANDS)
    sheet.award(count_points, f"{count} holders observed")
    if count_points == 0:
        sheet.flag(f"Only {count} holders detected")

    top1 = dist.share_of_top(1)
    sheet.award(_band_at_most(top1, TOP1_BANDS), f"Top holder: {top1:.1f}%")
    if top1 > 50.0:
        sheet.flag(f"Top holder owns {top1:.1f}% of supply", critical=True)
    elif top1 > 25.0:
        sheet.flag(f"Top holder owns {top1:.1f}% of supply (high concentration)")

    top3 = dist.share_of_top(3)
    top3_points = 0
    for threshold, points in TOP3_BANDS:
        if top3 < threshold:
            top3_points = points
            break
    sheet.award(top3_points, f"Top 3 holders: {top3:.1f}%")
    if top3_points == 0:
        sheet.flag(f"Top 3 holders own {top3:.1f}% of supply")


def _wash_trading_addresses(activity: TradeActivity) -> int:
    """Addresses with a large share of all trades and balanced buys/sells."""
    trades = activity.trades
    if len(trades) < WASH_TRADING_MIN_TRADES:
        return 0
    buys: Counter[str] = Counter()
    sells: Counter[str] = Counter()
    for t in trades:
        buys[t.buyer] += 1
        sells[t.seller] += 1
    suspicious = 0
    for address in set(buys) | set(sells):
        if not address:
            continue
        b, s = buys[address], sells[address]
        total = b + s
        if total > len(trades) * WASH_TRADING_SHARE and min(b, s) / max(b, s) > WASH_TRADING_BALANCE:
            suspicious += 1
    return suspicious


def score_activity(sheet: ScoreSheet, activity: TradeActivity, observed_at: float) -> None:
    total = len(activity.trades)
    if total == 0:
        sheet.flag("No DEX trading activity found")
        return

    sheet.award(_band_at_least(total - 1, TRADE_COUNT_BANDS), f"{total} DEX trades")
    if total < 10:
        sheet.flag(f"Very low trading activity ({total} trades)")

    traders = activity.unique_participants
    sheet.award(_band_at_least(traders - 1, TRADER_BANDS), f"{traders} unique traders")
    if traders < 5:
        sheet.flag(f"Only {traders} unique traders")

    venues = activity.venues
    if len(venues) > 1:
        sheet.award(VENUES_MULTI, f"Traded on {len(venues)} venues")
    elif len(venues) == 1:
        sheet.award(VENUES_SINGLE)
        sheet.flag(f"Only trading on {venues[0]} (limited liquidity)")

    washers = _wash_trading_addresses(activity)
    if washers:
        sheet.deduct(WASH_TRADING_PENALTY)
        sheet.flag(f"{washers} addresses show potential wash trading patterns")

    if activity.has_timestamps and activity.trades_since(observed_at - RECENT_WINDOW_SEC) == 0:
        sheet.flag("No trading activity in last 24 hours")


def score_origin(sheet: ScoreSheet, history: CreatorHistory, observed_at: float) -> None:
    if history.first_seen_at is None:
        sheet.award(AGE_UNKNOWN_POINTS)
        sheet.flag("Origin wallet age unknown")
    else:
        age_days = max(0.0, (observed_at - history.first_seen_at) / SECONDS_PER_DAY)
        sheet.award(_band_at_least(age_days, AGE_BANDS), f"Wallet age {int(age_days)} days")
        if age_days < 7:
            sheet.flag(f"Origin wallet is only {int(age_days)} days old")

    created = max(0, history.recent_similar_creations)
    sheet.award(_band_at_most(created, CREATION_BANDS), f"{created} similar creations in 30 days")
    if created > SPAM_CREATIONS_ABOVE:
        sheet.flag(
            f"Created {created} tokens in the last 30 days (possible spammer or rug puller)",
            critical=True,
        )
    elif created > 1:
        sheet.flag(f"Created {created} tokens in the last 30 days")

    tx_count = max(0, history.transaction_count)
    sheet.award(_band_at_least(tx_count, TX_COUNT_BANDS), f"{tx_count} transactions")
    if tx_count < 10:
        sheet.flag(f"Low transaction history ({tx_count} transactions)")


TOKEN_METADATA = Evaluator(
    name="token_metadata",
    requires=BUNDLE_TOKEN_METADATA,
    max_score=METADATA_MAX,
    score_fn=score_metadata,
    payload_type=TokenMetadata,
    missing_flag="No token metadata available",
    description="Completeness of name, symbol, description, logo, metadata URI and creators",
)

TOKEN_AUTHORITY = Evaluator(
    name="token_authority",
    requires=BUNDLE_TOKEN_METADATA,
    max_score=AUTHORITY_MAX,
    score_fn=score_authority,
    payload_type=TokenMetadata,
    pass_ratio=STRICT_PASS_RATIO,
    missing_flag="Mint and freeze authority status unknown",
    description="Mint, freeze and update authority state",
)

TOKEN_DISTRIBUTION = Evaluator(
    name="holder_distribution",
    requires=BUNDLE_HOLDERS,
    max_score=DISTRIBUTION_MAX,
    score_fn=score_distribution,
    payload_type=HolderDistribution,
    missing_flag="No holder data",
    description="Holder count and top-1 / top-3 concentration",
)

TOKEN_ACTIVITY = Evaluator(
    name="dex_activity",
    requires=BUNDLE_DEX_TRADES,
    max_score=ACTIVITY_MAX,
    score_fn=score_activity,
    payload_type=TradeActivity,
    missing_flag="No DEX trade data",
    description="DEX trade count, unique traders, venues and wash trading",
)

TOKEN_ORIGIN = Evaluator(
    name="creator_origin",
    requires=BUNDLE_CREATOR_HISTORY,
    max_score=ORIGIN_MAX,
    score_fn=score_origin,
    payload_type=CreatorHistory,
    missing_flag="Unable to analyze creator wallet",
    description="Creator wallet age, recent token launches and transaction history",
)

TOKEN_EVALUATORS = (
    TOKEN_METADATA,
    TOKEN_AUTHORITY,
    TOKEN_DISTRIBUTION,
    TOKEN_ACTIVITY,
    TOKEN_ORIGIN,
)
