"""
Configuration management for Nilo Trust.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for engine configuration.
"""

from nilo_trust.config.settings import EngineSettings, get_settings  # noqa: F401

__all__ = ["EngineSettings", "get_settings"]
