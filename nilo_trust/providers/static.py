"""Providers that need no network: fixed payloads and adapted callables."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from nilo_trust.analysis_engine.targets import AnalysisTarget


class StaticProvider:
    """Returns the same payload for every target (offline scoring, tests)."""

    def __init__(self, bundle: str, payload: Any, name: str | None = None) -> None:
        self.bundle = bundle
        self.payload = payload
        self.name = name or f"static:{bundle}"

    async def fetch(self, target: AnalysisTarget) -> Any:
        return self.payload

    def __repr__(self) -> str:
        return f"StaticProvider(bundle={self.bundle!r}, name={self.name!r})"


class CallableProvider:
    """
    Adapts fn(target) into a provider. fn may be sync or async; sync functions
    run in the default executor so they do not block the event loop.
    """

    def __init__(
        self,
        bundle: str,
        fn: Callable[[AnalysisTarget], Any],
        name: str | None = None,
    ) -> None:
        self.bundle = bundle
        self.fn = fn
        self.name = name or getattr(fn, "__name__", bundle)

    async def fetch(self, target: AnalysisTarget) -> Any:
        if inspect.iscoroutinefunction(self.fn):
            return await self.fn(target)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.fn, target)
        if inspect.isawaitable(result):
            return await result
        return result

    def __repr__(self) -> str:
        return f"CallableProvider(bundle={self.bundle!r}, name={self.name!r})"
