# snfintel/core/trend.py

from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Optional, Sequence

import numpy as np

from .kpi_registry import get_contract, kpi_label
from .models import TrendPoint


TrendDirection = Literal["improving", "declining", "stable"]

MIN_POINTS = 3
WINDOW = 3

# Absolute band in the KPI's native unit (usually percentage points).
STABLE_BAND = 1.0

TRAILING = 12

# Coefficient of variation, percent.
HIGH_VOLATILITY = 25.0


@dataclass(frozen=True)
class TrendResult:
    direction: TrendDirection
    change: float


# =====================================================
# CLASSIFIER
# =====================================================

def classify_trend(series: Sequence[TrendPoint]) -> TrendResult:
    """
    Compare the mean of the latest three points against the mean of the
    three points before them.

    - Input must be chronological (most recent last).
    - Points with a null value are dropped, never read as zero.
    - Fewer than three usable points -> stable, change 0.
    - |change| exactly 1 is stable; the band is strict.
    """
    values = [p.value for p in series if p.value is not None]

    if len(values) < MIN_POINTS:
        return TrendResult(direction="stable", change=0.0)

    recent = values[-WINDOW:]
    older = values[-2 * WINDOW:-WINDOW] or recent

    change = float(np.mean(recent) - np.mean(older))

    if change > STABLE_BAND:
        direction: TrendDirection = "improving"
    elif change < -STABLE_BAND:
        direction = "declining"
    else:
        direction = "stable"

    return TrendResult(direction=direction, change=change)



# =====================================================
# TRAILING STATISTICS
# =====================================================

@dataclass(frozen=True)
class Extreme:
    value: float
    period_id: str


@dataclass(frozen=True)
class TrailingStats:
    current: float
    average: float
    low: Extreme
    high: Extreme
    std_dev: float
    volatility: float
    window_change: float
    mom_change: Optional[float]
    yoy_change: Optional[float]
    points: int

    @property
    def high_volatility(self) -> bool:
        return self.volatility > HIGH_VOLATILITY


def trailing_stats(series: Sequence[TrendPoint]) -> Optional[TrailingStats]:
    """
    Summary of the trailing twelve usable points of a chronological series.

    - Null values are dropped; no usable points -> None.
    - std_dev is the population standard deviation.
    - volatility = std_dev / |average| * 100 (0 when the average is 0).
    - Ties for low / high keep the earliest period.
    - mom_change needs two points; yoy_change is latest minus the first
      point of a full twelve-point window.
    """
    points = [p for p in series if p.value is not None][-TRAILING:]
    if not points:
        return None

    values = np.array([p.value for p in points], dtype=float)
    lo = int(np.argmin(values))
    hi = int(np.argmax(values))

    average = float(values.mean())
    std_dev = float(values.std())
    volatility = std_dev / abs(average) * 100 if average != 0 else 0.0

    window_change = float(values[-1] - values[0])

    return TrailingStats(
        current=float(values[-1]),
        average=average,
        low=Extreme(float(values[lo]), points[lo].period_id),
        high=Extreme(float(values[hi]), points[hi].period_id),
        std_dev=std_dev,
        volatility=volatility,
        window_change=window_change,
        mom_change=float(values[-1] - values[-2]) if len(values) >= 2 else None,
        yoy_change=window_change if len(values) == TRAILING else None,
        points=len(values),
    )


# =====================================================
# ROLL-UPS
# =====================================================

def performance_direction(kpi_id: str, result: TrendResult) -> TrendDirection:
    """
    Direction in business terms. A falling cost or agency share is an
    improvement even though classify_trend reports the value going down.
    """
    contract = get_contract(kpi_id)
    if result.direction == "stable" or contract is None or contract.higher_is_better:
        return result.direction
    return "declining" if result.direction == "improving" else "improving"


def summarize_trends(
    results: Iterable[TrendResult],
    stats: Iterable[TrailingStats] = (),
) -> Dict[str, int]:
    summary = {"improving": 0, "declining": 0, "stable": 0}
    for result in results:
        summary[result.direction] += 1
    summary["high_volatility"] = sum(1 for s in stats if s.high_volatility)
    return summary


def generate_trend_insights(
    metrics: Dict[str, TrendResult],
    stats: Optional[Dict[str, TrailingStats]] = None,
) -> List[Dict[str, object]]:
    """
    Turn per-KPI trend results into dashboard insight cards.

    metrics maps kpi_id -> TrendResult, stats optionally maps kpi_id ->
    TrailingStats. Improving / declining are judged per KPI direction, so
    rising contract labor is a warning. Output order: portfolio-wide
    trajectory, volatility, then one card per moving metric in input order.
    """
    insights: List[Dict[str, object]] = []
    stats = stats or {}

    judged = {k: performance_direction(k, r) for k, r in metrics.items()}
    improving = [k for k, d in judged.items() if d == "improving"]
    declining = [k for k, d in judged.items() if d == "declining"]

    if improving and len(improving) > len(declining) * 2:
        insights.append({
            "type": "strength",
            "title": "Strong Overall Performance Trajectory",
            "description": f"{len(improving)} of {len(metrics)} key metrics are improving",
            "related_kpis": improving,
            "priority": "high",
            "actionable": False,
        })
    elif declining and len(declining) > len(improving) * 2:
        insights.append({
            "type": "warning",
            "title": "Multiple Metrics Trending Down",
            "description": (
                f"{len(declining)} of {len(metrics)} key metrics are declining "
                "- review operational drivers"
            ),
            "related_kpis": declining,
            "priority": "high",
            "actionable": True,
        })

    volatile = [k for k, s in stats.items() if s.high_volatility]
    if volatile:
        insights.append({
            "type": "warning",
            "title": "High Metric Volatility Detected",
            "description": (
                f"{', '.join(kpi_label(k) for k in volatile)} show high "
                f"month-to-month variation (>{HIGH_VOLATILITY:.0f}%)"
            ),
            "related_kpis": volatile,
            "priority": "medium",
            "actionable": True,
        })

    for kpi_id, result in metrics.items():
        direction = judged[kpi_id]
        if direction == "stable":
            continue

        is_improving = direction == "improving"
        went_up = result.change > 0
        insights.append({
            "type": "strength" if is_improving else "warning",
            "title": f"{kpi_label(kpi_id)} {'Improving' if is_improving else 'Declining'}",
            "description": f"{'Up' if went_up else 'Down'} {abs(result.change):.1f} points versus the prior three periods",
            "related_kpis": [kpi_id],
            "priority": "high" if abs(result.change) > 5 else "medium",
            "actionable": not is_improving,
        })

    return insights
