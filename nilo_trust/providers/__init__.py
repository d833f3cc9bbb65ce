"""Signal providers: the contract, concurrent collection, and offline providers."""

from nilo_trust.providers.base import (
    ProviderOutcome,
    SignalProvider,
    call_provider,
    collect_signals,
)
from nilo_trust.providers.static import CallableProvider, StaticProvider

__all__ = [
    "CallableProvider",
    "ProviderOutcome",
    "SignalProvider",
    "StaticProvider",
    "call_provider",
    "collect_signals",
]
