"""
FastAPI/ASGI application entrypoint.

Build and configure the ASGI app; mount routes.
Run with: uvicorn nilo_trust.api_server.app:app --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

from fastapi import FastAPI

from nilo_trust import __version__
from nilo_trust.analysis_engine.engine import TrustEngine
from nilo_trust.api_server.routes import router
from nilo_trust.nilo_logging import get_logger

logger = get_logger(__name__)


def create_app(engine: TrustEngine | None = None) -> FastAPI:
    """
    Build the app around engine. Without one, the engine has no live providers
    and only requests carrying `signals` produce non-fallback scores.
    """
    app = FastAPI(
        title="Nilo Trust API",
        description="Composite trust scores for Solana tokens, wallets and code repositories.",
        version=__version__,
    )
    app.state.engine = engine or TrustEngine(providers={})
    app.include_router(router, tags=["Analysis"])
    logger.info("api_app_created", providers=sum(len(p) for p in app.state.engine.providers.values()))
    return app


app = create_app()

__all__ = ["app", "create_app"]
