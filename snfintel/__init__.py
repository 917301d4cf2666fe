"""
SNF Intel v1.2

Derived statistics and a rule-based narrative engine for skilled-nursing
portfolio dashboards.
"""

from .__version__ import __version__

# Keep package init lightweight
# The narrative engine should be imported explicitly from snfintel.narrative

from .core.correlation import analyze_correlation
from .core.goals import evaluate_goal
from .core.peer_rank import calculate_peer_rank
from .core.trend import classify_trend

__all__ = [
    "__version__",
    "analyze_correlation",
    "calculate_peer_rank",
    "classify_trend",
    "evaluate_goal",
]
