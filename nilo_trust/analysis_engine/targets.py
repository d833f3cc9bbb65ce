"""Analysis target validation: Solana base58 addresses and owner/name repositories."""

from __future__ import annotations

import re
from dataclasses import dataclass

from solders.pubkey import Pubkey

from nilo_trust.analysis_engine.models import TargetKind
from nilo_trust.core.exceptions import ValidationError

BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
# Name-service names look like addresses to a user but are not mints or wallets
NAME_SERVICE_SUFFIXES = (".sol", ".eth", ".bonk", ".abc", ".poor", ".glow")
_REPO_PART_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _is_pubkey(s: str) -> bool:
    """True if s decodes to a 32-byte ed25519 public key."""
    try:
        Pubkey.from_string(s)
    except ValueError:
        return False
    return True


def is_valid_solana_address(address: str) -> bool:
    """Return True if address is a Solana base58 public key (32-44 chars, 32 bytes)."""
    if not isinstance(address, str):
        return False
    s = address.strip()
    if not s or s.lower().startswith("0x"):
        return False
    if s.lower().endswith(NAME_SERVICE_SUFFIXES):
        return False
    return bool(BASE58_RE.match(s)) and _is_pubkey(s)


def _validate_address(address: object, kind: TargetKind) -> str:
    if not isinstance(address, str) or not address.strip():
        raise ValidationError(f"{kind.value} address must be a non-empty string")
    s = address.strip()
    if s.lower().startswith("0x"):
        raise ValidationError(f"Invalid Solana {kind.value} address: EVM-style 0x address")
    if s.lower().endswith(NAME_SERVICE_SUFFIXES):
        raise ValidationError(
            f"Invalid Solana {kind.value} address: name-service domain, resolve it first"
        )
    if not BASE58_RE.match(s):
        raise ValidationError(
            f"Invalid Solana {kind.value} address: expected 32-44 base58 characters"
        )
    if not _is_pubkey(s):
        raise ValidationError(
            f"Invalid Solana {kind.value} address: does not decode to a 32-byte public key"
        )
    return s


def _validate_repo_part(value: object, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Repository {label} must be non-empty")
    s = value.strip()
    if not _REPO_PART_RE.match(s):
        raise ValidationError(f"Invalid repository {label}: {s!r}")
    return s


@dataclass(frozen=True)
class AnalysisTarget:
    """
    Validated, immutable identifier of the token, wallet or repository to analyze.

    Build through the classmethods; they raise ValidationError on malformed input.
    """

    kind: TargetKind
    identifier: str

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.kind.value, self.identifier)

    @property
    def short_id(self) -> str:
        return self.identifier[:16] + "..." if len(self.identifier) > 16 else self.identifier

    @property
    def owner(self) -> str | None:
        if self.kind is not TargetKind.REPOSITORY:
            return None
        return self.identifier.split("/", 1)[0]

    @property
    def name(self) -> str | None:
        if self.kind is not TargetKind.REPOSITORY:
            return None
        return self.identifier.split("/", 1)[1]

    @classmethod
    def token(cls, address: str) -> AnalysisTarget:
        return cls(TargetKind.TOKEN, _validate_address(address, TargetKind.TOKEN))

    @classmethod
    def wallet(cls, address: str) -> AnalysisTarget:
        return cls(TargetKind.WALLET, _validate_address(address, TargetKind.WALLET))

    @classmethod
    def repository(cls, owner: str, name: str) -> AnalysisTarget:
        owner_s = _validate_repo_part(owner, "owner")
        name_s = _validate_repo_part(name, "name")
        if name_s.endswith(".git"):
            name_s = _validate_repo_part(name_s[: -len(".git")], "name")
        return cls(TargetKind.REPOSITORY, f"{owner_s}/{name_s}")

    @classmethod
    def parse(cls, kind: str | TargetKind, value: str) -> AnalysisTarget:
        """
        Build a target from a kind string and a raw value.

        Repository values are "owner/name"; token and wallet values are addresses.
        """
        try:
            target_kind = TargetKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown target kind: {kind!r}") from None
        if target_kind is TargetKind.REPOSITORY:
            if not isinstance(value, str) or value.count("/") != 1:
                raise ValidationError("Repository must be given as owner/name")
            owner, name = value.strip().split("/", 1)
            return cls.repository(owner, name)
        if target_kind is TargetKind.WALLET:
            return cls.wallet(value)
        return cls.token(value)
