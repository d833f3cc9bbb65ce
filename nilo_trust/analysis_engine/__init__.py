"""
Analysis engine package: composite trust scoring.

Evaluators turn signal bundles into bounded sub-scores, profiles choose the
evaluators, weights and output scale per target kind, and the aggregator
reduces them to one CompositeScore. TrustEngine (analysis_engine.engine) adds
provider collection and the result cache on top.
"""

from nilo_trust.analysis_engine.models import (
    AnalysisStatus,
    CompositeScore,
    EvaluationResult,
    RiskLevel,
    Severity,
    SignalBundle,
    TargetKind,
    normalize_score,
)
from nilo_trust.analysis_engine.targets import AnalysisTarget, is_valid_solana_address
from nilo_trust.analysis_engine.evaluators import Evaluator, ScoreSheet
from nilo_trust.analysis_engine.profiles import (
    PERCENT_SCALE,
    POINT_SCALE,
    ScoreScale,
    ScoringProfile,
    build_profile,
    default_profiles,
)
from nilo_trust.analysis_engine.cache import CacheEntry, ResultCache

__all__ = [
    "AnalysisStatus",
    "AnalysisTarget",
    "CacheEntry",
    "CompositeScore",
    "EvaluationResult",
    "Evaluator",
    "PERCENT_SCALE",
    "POINT_SCALE",
    "ResultCache",
    "RiskLevel",
    "ScoreScale",
    "ScoreSheet",
    "ScoringProfile",
    "Severity",
    "SignalBundle",
    "TargetKind",
    "build_profile",
    "default_profiles",
    "is_valid_solana_address",
    "normalize_score",
]
