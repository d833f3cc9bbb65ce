"""
Signal payloads: the domain data each provider hands to its evaluator.

Providers may return these dataclasses directly or plain mappings (camelCase
or snake_case keys); from_mapping() converts the latter. Payloads are frozen:
a bundle is never mutated after creation.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# Bundle names: one per provider domain
BUNDLE_TOKEN_METADATA = "token_metadata"
BUNDLE_HOLDERS = "holders"
BUNDLE_DEX_TRADES = "dex_trades"
BUNDLE_CREATOR_HISTORY = "creator_history"
BUNDLE_WALLET_HOLDINGS = "wallet_holdings"
BUNDLE_REPOSITORY = "repository"


def to_timestamp(value: Any) -> float | None:
    """Coerce unix seconds, unix milliseconds, ISO 8601 strings or datetimes to unix seconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, (int, float)):
        try:
            ts = float(value)
        except OverflowError:
            return None
        if not math.isfinite(ts):
            return None
        # Values beyond year ~5000 in seconds are milliseconds
        return ts / 1000.0 if ts > 1e11 else ts
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return to_timestamp(float(s))
        except ValueError:
            pass
        try:
            return to_timestamp(datetime.fromisoformat(s.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return result if math.isfinite(result) else default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return int(number) if math.isfinite(number) else default


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class TokenMetadata:
    """
    Token mint and metadata state.

    mint_authority / freeze_authority: None means burned / disabled; a string is
    the active authority address.
    """

    name: str | None = None
    symbol: str | None = None
    supply: float | None = None
    decimals: int | None = None
    mint_authority: str | None = None
    freeze_authority: str | None = None
    description: str | None = None
    image: str | None = None
    metadata_uri: str | None = None
    creators: tuple[str, ...] = ()
    is_mutable: bool | None = None
    update_authority: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TokenMetadata:
        creators_raw = _pick(data, "creators", default=()) or ()
        creators: list[str] = []
        for c in creators_raw:
            addr = c.get("address") if isinstance(c, Mapping) else c
            if addr:
                creators.append(str(addr))
        supply = _pick(data, "supply", "totalSupply", "total_supply")
        decimals = _pick(data, "decimals")
        is_mutable = _pick(data, "is_mutable", "isMutable")
        return cls(
            name=_as_text(_pick(data, "name")),
            symbol=_as_text(_pick(data, "symbol")),
            supply=_as_float(supply) if supply is not None else None,
            decimals=_as_int(decimals) if decimals is not None else None,
            mint_authority=_as_text(_pick(data, "mint_authority", "mintAuthority")),
            freeze_authority=_as_text(_pick(data, "freeze_authority", "freezeAuthority")),
            description=_as_text(_pick(data, "description")),
            image=_as_text(_pick(data, "image", "logo", "logoUri", "logo_uri")),
            metadata_uri=_as_text(_pick(data, "metadata_uri", "metadataUri", "uri")),
            creators=tuple(creators),
            is_mutable=bool(is_mutable) if is_mutable is not None else None,
            update_authority=_as_text(_pick(data, "update_authority", "updateAuthority")),
        )


@dataclass(frozen=True)
class HolderBalance:
    address: str
    balance: float


@dataclass(frozen=True)
class HolderDistribution:
    """Holders ordered largest balance first."""

    accepts_sequence = True

    holders: tuple[HolderBalance, ...] = ()

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.holders, key=lambda h: h.balance, reverse=True))
        object.__setattr__(self, "holders", ordered)

    @property
    def total_observed(self) -> float:
        return sum(max(0.0, h.balance) for h in self.holders)

    def share_of_top(self, n: int) -> float:
        """Percentage of the observed total held by the top n holders; 0 when total is 0."""
        total = self.total_observed
        if total <= 0:
            return 0.0
        return sum(max(0.0, h.balance) for h in self.holders[:n]) / total * 100.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | Iterable[Any]) -> HolderDistribution:
        items = data.get("holders", ()) if isinstance(data, Mapping) else data
        holders = []
        for item in items or ():
            if isinstance(item, HolderBalance):
                holders.append(item)
            elif isinstance(item, Mapping):
                holders.append(
                    HolderBalance(
                        address=str(_pick(item, "address", "owner", default="")),
                        balance=_as_float(_pick(item, "balance", "uiAmount", "amount", "value")),
                    )
                )
        return cls(tuple(holders))


@dataclass(frozen=True)
class DexTrade:
    buyer: str
    seller: str
    amount: float
    venue: str
    timestamp: float | None = None


@dataclass(frozen=True)
class TradeActivity:
    accepts_sequence = True

    trades: tuple[DexTrade, ...] = ()

    @property
    def unique_participants(self) -> int:
        participants: set[str] = set()
        for t in self.trades:
            if t.buyer:
                participants.add(t.buyer)
            if t.seller:
                participants.add(t.seller)
        return len(participants)

    @property
    def venues(self) -> tuple[str, ...]:
        return tuple(sorted({t.venue for t in self.trades if t.venue}))

    @property
    def has_timestamps(self) -> bool:
        return any(t.timestamp is not None for t in self.trades)

    def trades_since(self, since: float) -> int:
        return sum(1 for t in self.trades if t.timestamp is not None and t.timestamp >= since)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | Iterable[Any]) -> TradeActivity:
        items = data.get("trades", ()) if isinstance(data, Mapping) else data
        trades = []
        for item in items or ():
            if isinstance(item, DexTrade):
                trades.append(item)
            elif isinstance(item, Mapping):
                trades.append(
                    DexTrade(
                        buyer=str(_pick(item, "buyer", default="")),
                        seller=str(_pick(item, "seller", default="")),
                        amount=_as_float(_pick(item, "amount")),
                        venue=str(_pick(item, "venue", "dex", default="")),
                        timestamp=to_timestamp(_pick(item, "timestamp", "time", "blockTime")),
                    )
                )
        return cls(tuple(trades))


@dataclass(frozen=True)
class CreatorHistory:
    """Origin history of a token creator or a wallet: age and recent similar creations."""

    first_seen_at: float | None = None
    recent_similar_creations: int = 0
    """Token mints (or repos) created in the trailing 30-day window."""
    transaction_count: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CreatorHistory:
        return cls(
            first_seen_at=to_timestamp(_pick(data, "first_seen_at", "firstSeenAt")),
            recent_similar_creations=_as_int(
                _pick(data, "recent_similar_creations", "recentSimilarCreations")
            ),
            transaction_count=_as_int(_pick(data, "transaction_count", "transactionCount")),
        )


@dataclass(frozen=True)
class WalletHoldings:
    sol_balance: float = 0.0
    token_accounts: int = 0
    transaction_count: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> WalletHoldings:
        return cls(
            sol_balance=_as_float(_pick(data, "sol_balance", "solBalance", "balance")),
            token_accounts=_as_int(_pick(data, "token_accounts", "tokenAccounts")),
            transaction_count=_as_int(_pick(data, "transaction_count", "transactionCount")),
        )


@dataclass(frozen=True)
class RepositoryStats:
    stars: int = 0
    contributors: int = 0
    open_issues: int = 0
    description: str | None = None
    license: str | None = None
    """SPDX identifier (e.g. "MIT"), or None when the repository has no license."""
    updated_at: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RepositoryStats:
        license_raw = _pick(data, "license")
        if isinstance(license_raw, Mapping):
            license_raw = _pick(license_raw, "spdx_id", "spdxId", "key", "name")
        return cls(
            stars=_as_int(_pick(data, "stars", "stargazers_count", "stargazersCount")),
            contributors=_as_int(_pick(data, "contributors", "contributors_count")),
            open_issues=_as_int(_pick(data, "open_issues", "openIssues", "open_issues_count")),
            description=_as_text(_pick(data, "description")),
            license=_as_text(license_raw),
            updated_at=to_timestamp(_pick(data, "updated_at", "updatedAt", "pushed_at")),
        )
