"""
API route definitions: REST endpoints.

POST /analyze scores a token, wallet or repository; GET /health is the
liveness check; GET /profiles lists the evaluators behind each score.
Malformed targets return 422; every other outcome, including degraded and
fallback analyses, returns 200 with the composite.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from nilo_trust.analysis_engine.engine import TrustEngine
from nilo_trust.analysis_engine.models import CompositeScore
from nilo_trust.analysis_engine.targets import AnalysisTarget
from nilo_trust.core.exceptions import ValidationError
from nilo_trust.nilo_logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class AnalyzeRequest(BaseModel):
    """POST /analyze body."""

    kind: str = Field(..., description="token | wallet | repository")
    target: str = Field(..., min_length=1, max_length=256, description="Base58 address or owner/name")
    signals: dict[str, Any] | None = Field(
        None,
        description="Optional captured payloads by bundle name; scored without calling providers or the cache",
    )
    ttl_sec: float | None = Field(None, gt=0, description="Cache TTL override for this result")
    timeout_sec: float | None = Field(None, gt=0, description="Per-provider timeout override")


class SignalResultModel(BaseModel):
    name: str
    score: float
    max_score: float
    passed: bool
    risk_flags: list[str] = Field(default_factory=list)
    detail: str = ""
    severity: str = "info"


class AnalyzeResponse(BaseModel):
    """Composite score; `status`/`degraded` take precedence over the numeric score."""

    target_kind: str
    target_id: str
    profile: str
    overall_score: float
    overall_max: float
    normalized_score: int = Field(..., ge=0, le=100)
    scaled_score: float
    scale_max: float
    risk_level: str
    risk_label: str
    flags: list[str] = Field(default_factory=list)
    per_signal: list[SignalResultModel] = Field(default_factory=list)
    status: str
    degraded: bool
    summary: str = ""
    computed_at: float
    unavailable_signals: list[str] = Field(default_factory=list)

    @classmethod
    def from_composite(cls, composite: CompositeScore) -> AnalyzeResponse:
        return cls.model_validate(composite.to_dict())


def get_engine(request: Request) -> TrustEngine:
    return request.app.state.engine


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(body: AnalyzeRequest, request: Request) -> AnalyzeResponse:
    """
    Score a target. With `signals`, the given payloads are scored directly;
    otherwise the engine's providers are called (cached for the TTL).
    """
    engine = get_engine(request)
    try:
        target = AnalysisTarget.parse(body.kind.strip().lower(), body.target)
        if body.signals is not None:
            composite = await engine.score_signals(target, body.signals)
        else:
            composite = await engine.analyze(target, ttl=body.ttl_sec, timeout=body.timeout_sec)
    except ValidationError as e:
        logger.info("api_analyze_rejected", kind=body.kind, error=e.message)
        raise HTTPException(status_code=422, detail=e.to_dict()) from e
    return AnalyzeResponse.from_composite(composite)


@router.get("/health")
def health(request: Request) -> dict[str, Any]:
    """Liveness check: API is up; includes result cache stats."""
    engine = get_engine(request)
    return {"status": "ok", "cache": engine.cache.stats()}


@router.get("/profiles")
def profiles(request: Request) -> dict[str, Any]:
    """Scoring profile per target kind: scale, max total and evaluators (enabled or not)."""
    engine = get_engine(request)
    return {kind.value: profile.to_dict() for kind, profile in engine.profiles.items()}
