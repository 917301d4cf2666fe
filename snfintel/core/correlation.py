# snfintel/core/correlation.py

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np

from .kpi_registry import (
    CONTRACT_LABOR,
    NURSING_COST_PPD,
    NURSING_HPPD,
    OCCUPANCY,
    OPERATING_MARGIN,
    REVENUE_PPD,
    SKILLED_MARGIN,
    SKILLED_MIX,
    THERAPY_COST_PSD,
)
from .models import CorrelationPoint, KPISample


Strength = Literal["strong", "moderate", "weak", "none"]
Direction = Literal["positive", "negative", "none"]


# =====================================================
# OUTPUT MODELS
# =====================================================

@dataclass(frozen=True)
class RegressionLine:
    start: Tuple[float, float]
    end: Tuple[float, float]


@dataclass(frozen=True)
class CorrelationResult:
    r: float
    strength: Strength
    direction: Direction
    slope: float
    intercept: float
    data_points: int
    line: Optional[RegressionLine] = None

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class CorrelationPair:
    x_kpi: str
    y_kpi: str
    x_label: str
    y_label: str
    business_question: str
    positive_insight: str
    negative_insight: str


# =====================================================
# CLASSIFICATION
# =====================================================

def classify_strength(r: float) -> Strength:
    abs_r = abs(r)
    if abs_r >= 0.7:
        return "strong"
    if abs_r >= 0.4:
        return "moderate"
    if abs_r >= 0.2:
        return "weak"
    return "none"


def classify_direction(r: float) -> Direction:
    if r > 0:
        return "positive"
    if r < 0:
        return "negative"
    return "none"


# =====================================================
# ANALYZER
# =====================================================

def analyze_correlation(points: Sequence[CorrelationPoint]) -> CorrelationResult:
    """
    Pearson r plus an ordinary least-squares fit of y on x.

    Degenerate input never raises:
    - no points -> r 0, slope 0, intercept 0, no line
    - zero variance in x or y -> r 0
    - zero variance in x -> slope 0, intercept mean(y)

    The fitted line always passes through (mean(x), mean(y)). Its
    endpoints at min(x) and max(x) are returned for line-segment
    rendering.
    """
    n = len(points)
    if n == 0:
        return CorrelationResult(
            r=0.0,
            strength="none",
            direction="none",
            slope=0.0,
            intercept=0.0,
            data_points=0,
            line=None,
        )

    x = np.array([p.x for p in points], dtype=float)
    y = np.array([p.y for p in points], dtype=float)

    x_mean = float(x.mean())
    y_mean = float(y.mean())
    dx = x - x_mean
    dy = y - y_mean

    sxy = float(np.sum(dx * dy))
    sxx = float(np.sum(dx * dx))
    syy = float(np.sum(dy * dy))

    # zero spread, not sxx == 0: identical floats can leave sxx at ~1e-35
    x_flat = float(np.ptp(x)) == 0.0
    y_flat = float(np.ptp(y)) == 0.0

    if x_flat or y_flat:
        r = 0.0
    else:
        r = sxy / float(np.sqrt(sxx * syy))
        r = float(np.clip(r, -1.0, 1.0))

    slope = 0.0 if x_flat else sxy / sxx
    intercept = y_mean - slope * x_mean

    x_min = float(x.min())
    x_max = float(x.max())
    line = RegressionLine(
        start=(x_min, slope * x_min + intercept),
        end=(x_max, slope * x_max + intercept),
    )

    return CorrelationResult(
        r=r,
        strength=classify_strength(r),
        direction=classify_direction(r),
        slope=slope,
        intercept=intercept,
        data_points=n,
        line=line,
    )


def pair_samples(
    x_samples: Sequence[KPISample],
    y_samples: Sequence[KPISample],
) -> List[CorrelationPoint]:
    """
    Join two KPI series on period. Periods where either side is missing
    or null are dropped. Output is chronological.
    """
    x_by_period: Dict[str, float] = {
        s.period_id: s.value for s in x_samples if s.value is not None
    }
    y_by_period: Dict[str, float] = {
        s.period_id: s.value for s in y_samples if s.value is not None
    }

    shared = sorted(set(x_by_period).intersection(y_by_period))
    return [
        CorrelationPoint(period_id=p, x=x_by_period[p], y=y_by_period[p])
        for p in shared
    ]


# =====================================================
# BUSINESS-QUESTION PAIRS
# =====================================================

CORRELATION_PAIRS: List[CorrelationPair] = [
    CorrelationPair(
        x_kpi=SKILLED_MIX,
        y_kpi=REVENUE_PPD,
        x_label="Skilled Mix %",
        y_label="Revenue PPD",
        business_question="Does higher skilled mix drive revenue?",
        positive_insight=(
            "When skilled mix goes up, revenue tends to go up too. "
            "More skilled patients bring in more money per day."
        ),
        negative_insight=(
            "Skilled mix and revenue are moving in opposite directions. "
            "This is unusual and worth looking into."
        ),
    ),
    CorrelationPair(
        x_kpi=SKILLED_MIX,
        y_kpi=OPERATING_MARGIN,
        x_label="Skilled Mix %",
        y_label="Operating Margin",
        business_question="Does payer mix impact profitability?",
        positive_insight=(
            "More skilled patients means better profits. "
            "The extra revenue from skilled care is paying off."
        ),
        negative_insight=(
            "More skilled patients but lower profits. "
            "The cost of caring for skilled patients may be too high."
        ),
    ),
    CorrelationPair(
        x_kpi=NURSING_HPPD,
        y_kpi=NURSING_COST_PPD,
        x_label="Nursing Hours PPD",
        y_label="Nursing Cost PPD",
        business_question="Hours to cost relationship efficiency",
        positive_insight=(
            "More nursing hours means higher costs, which is normal. "
            "Staffing costs are predictable."
        ),
        negative_insight=(
            "Nursing hours and costs are not moving together. Check if pay "
            "rates changed or if hours are being recorded correctly."
        ),
    ),
    CorrelationPair(
        x_kpi=CONTRACT_LABOR,
        y_kpi=OPERATING_MARGIN,
        x_label="Contract Labor %",
        y_label="Operating Margin",
        business_question="Agency labor impact on margins",
        positive_insight=(
            "Using more agency staff but profits are still good. "
            "This is uncommon but working here."
        ),
        negative_insight=(
            "More agency staff means lower profits. Agency nurses cost more, "
            "so hiring permanent staff could help."
        ),
    ),
    CorrelationPair(
        x_kpi=THERAPY_COST_PSD,
        y_kpi=SKILLED_MARGIN,
        x_label="Therapy Cost PSD",
        y_label="Skilled Margin",
        business_question="Therapy efficiency impact",
        positive_insight=(
            "Spending more on therapy is leading to better skilled profits. "
            "The investment is paying off."
        ),
        negative_insight=(
            "Therapy costs are eating into profits. "
            "Look at whether therapy is being used efficiently."
        ),
    ),
    CorrelationPair(
        x_kpi=OCCUPANCY,
        y_kpi=OPERATING_MARGIN,
        x_label="Occupancy %",
        y_label="Operating Margin",
        business_question="Volume impact on profitability",
        positive_insight=(
            "More beds filled means better profits. "
            "Growing census should be a priority."
        ),
        negative_insight=(
            "Filling more beds but not making more money. "
            "Costs may be rising faster than revenue."
        ),
    ),
]


def find_pair(x_kpi: str, y_kpi: str) -> Optional[CorrelationPair]:
    return next(
        (p for p in CORRELATION_PAIRS if p.x_kpi == x_kpi and p.y_kpi == y_kpi),
        None,
    )
