"""
Application settings.

Responsibilities:
- Collect engine configuration from environment variables and .env.
- Provide defaults for cache TTL/capacity, provider timeout and the score
  scale used per target kind.
- Name evaluators switched off in every profile that has them.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from nilo_trust.config import env


@dataclass(frozen=True)
class EngineSettings:
    """Typed engine settings; build with get_settings() or directly in tests."""

    cache_ttl_sec: float = env.DEFAULT_CACHE_TTL_SEC
    cache_max_entries: int = env.DEFAULT_CACHE_MAX_ENTRIES
    provider_timeout_sec: float = env.DEFAULT_PROVIDER_TIMEOUT_SEC
    token_scale: str = env.SCALE_PERCENT
    wallet_scale: str = env.SCALE_PERCENT
    repository_scale: str = env.SCALE_POINTS
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    disabled_evaluators: tuple[str, ...] = ()

    def scale_for(self, kind: str) -> str:
        return {
            "token": self.token_scale,
            "wallet": self.wallet_scale,
            "repository": self.repository_scale,
        }.get(kind, env.SCALE_PERCENT)


def load_settings() -> EngineSettings:
    """Read settings from the environment (uncached)."""
    return EngineSettings(
        cache_ttl_sec=env.get_cache_ttl_sec(),
        cache_max_entries=env.get_cache_max_entries(),
        provider_timeout_sec=env.get_provider_timeout_sec(),
        token_scale=env.get_scale_name("token", env.SCALE_PERCENT),
        wallet_scale=env.get_scale_name("wallet", env.SCALE_PERCENT),
        repository_scale=env.get_scale_name("repository", env.SCALE_POINTS),
        api_host=env.get_api_host(),
        api_port=env.get_api_port(),
        disabled_evaluators=env.get_disabled_evaluators(),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Return the process-wide settings, read once from the environment."""
    return load_settings()
