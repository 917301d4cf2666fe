"""Core Engine Module - record models and the four derived-statistic calculators."""

from .correlation import CorrelationResult, analyze_correlation, pair_samples
from .goals import GoalProgress, evaluate_goal, evaluate_goal_record
from .models import (
    CorrelationPoint,
    FacilityRef,
    GoalRecord,
    KPISample,
    PeerRecord,
    TrendPoint,
    trend_series_from_samples,
)
from .peer_rank import PeerRank, calculate_peer_rank, rank_peers
from .trend import TrailingStats, TrendResult, classify_trend, trailing_stats

__all__ = [
    "CorrelationPoint",
    "CorrelationResult",
    "FacilityRef",
    "GoalProgress",
    "GoalRecord",
    "KPISample",
    "PeerRank",
    "PeerRecord",
    "TrailingStats",
    "TrendPoint",
    "TrendResult",
    "analyze_correlation",
    "calculate_peer_rank",
    "classify_trend",
    "evaluate_goal",
    "evaluate_goal_record",
    "pair_samples",
    "rank_peers",
    "trailing_stats",
    "trend_series_from_samples",
]
