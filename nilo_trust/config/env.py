"""
Environment variable loading for Nilo Trust.

- NILO_CACHE_TTL_SEC: result cache staleness window in seconds (default: 300)
- NILO_CACHE_MAX_ENTRIES: result cache capacity, oldest evicted first (default: 50)
- NILO_PROVIDER_TIMEOUT_SEC: per-provider call timeout in seconds (default: 10)
- NILO_TOKEN_SCALE / NILO_WALLET_SCALE / NILO_REPOSITORY_SCALE: percent | points
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is nilo_trust/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_CACHE_TTL_SEC = 300.0
DEFAULT_CACHE_MAX_ENTRIES = 50
DEFAULT_PROVIDER_TIMEOUT_SEC = 10.0

SCALE_PERCENT = "percent"
SCALE_POINTS = "points"
_SCALE_ALIASES = {
    "percent": SCALE_PERCENT,
    "percentage": SCALE_PERCENT,
    "100": SCALE_PERCENT,
    "points": SCALE_POINTS,
    "point": SCALE_POINTS,
    "10": SCALE_POINTS,
}


def load_nilo_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    from dotenv import load_dotenv

    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_cache_ttl_sec() -> float:
    """Return NILO_CACHE_TTL_SEC; non-positive or invalid values fall back to 300."""
    load_nilo_env()
    return _env_float("NILO_CACHE_TTL_SEC", DEFAULT_CACHE_TTL_SEC)


def get_cache_max_entries() -> int:
    """Return NILO_CACHE_MAX_ENTRIES; default 50."""
    load_nilo_env()
    return _env_int("NILO_CACHE_MAX_ENTRIES", DEFAULT_CACHE_MAX_ENTRIES)


def get_provider_timeout_sec() -> float:
    """Return NILO_PROVIDER_TIMEOUT_SEC; default 10 seconds."""
    load_nilo_env()
    return _env_float("NILO_PROVIDER_TIMEOUT_SEC", DEFAULT_PROVIDER_TIMEOUT_SEC)


def get_scale_name(kind: str, default: str) -> str:
    """
    Return the configured score scale for a target kind (NILO_<KIND>_SCALE).
    Unknown values fall back to the default for that kind.
    """
    load_nilo_env()
    raw = (os.getenv(f"NILO_{kind.upper()}_SCALE") or "").strip().lower()
    return _SCALE_ALIASES.get(raw, default)


def get_api_host() -> str:
    load_nilo_env()
    return (os.getenv("NILO_API_HOST") or "127.0.0.1").strip()


def get_api_port() -> int:
    load_nilo_env()
    return _env_int("NILO_API_PORT", 8000)


def get_disabled_evaluators() -> tuple[str, ...]:
    """Return NILO_DISABLED_EVALUATORS as names (comma separated); empty by default."""
    load_nilo_env()
    raw = os.getenv("NILO_DISABLED_EVALUATORS") or ""
    return tuple(name.strip() for name in raw.split(",") if name.strip())
