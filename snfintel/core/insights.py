# snfintel/core/insights.py

from typing import Any, Dict, List, Sequence, Tuple

from .correlation import CorrelationPair, CorrelationResult
from .kpi_registry import kpi_label


PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

_STRENGTH_DESCRIPTION = {
    "strong": "clear pattern",
    "moderate": "noticeable pattern",
    "weak": "slight pattern",
}


def _is_actionable(pair: CorrelationPair, is_positive: bool) -> bool:
    return (
        ("contract_labor" in pair.x_kpi and not is_positive)
        or ("skilled_mix" in pair.x_kpi and is_positive)
        or ("occupancy" in pair.x_kpi and is_positive)
    )


def _insight_title(pair: CorrelationPair, is_positive: bool) -> str:
    x_short = kpi_label(pair.x_kpi, short=True)
    y_short = kpi_label(pair.y_kpi, short=True)

    if is_positive:
        return f"{x_short} and {y_short} Move Together"
    return f"{x_short} Up, {y_short} Down"


# -------------------------------------------------
# PUBLIC API
# -------------------------------------------------
def generate_correlation_insights(
    results: Sequence[Tuple[CorrelationPair, CorrelationResult]],
) -> List[Dict[str, Any]]:
    """
    Plain-language insight cards for correlated KPI pairs.

    Rules:
    - pairs with no correlation are skipped
    - strong -> high priority, moderate -> medium, weak -> low
    - a strong link into a margin KPI is a strength (positive) or a
      warning (negative); everything else is a pattern
    - actionable, non-weak links are promoted to opportunity
    - output is ordered high -> low priority, stable within a level
    """
    insights: List[Dict[str, Any]] = []

    for pair, corr in results:
        if corr.strength == "none":
            continue

        is_positive = corr.direction == "positive"
        template = pair.positive_insight if is_positive else pair.negative_insight

        if corr.strength == "strong":
            priority = "high"
            if "margin" in pair.y_kpi:
                kind = "strength" if is_positive else "warning"
            else:
                kind = "pattern"
        elif corr.strength == "moderate":
            priority = "medium"
            kind = "pattern"
        else:
            priority = "low"
            kind = "pattern"

        actionable = _is_actionable(pair, is_positive)
        if actionable and corr.strength != "weak":
            kind = "opportunity"

        insights.append({
            "id": f"insight-{len(insights) + 1}",
            "type": kind,
            "title": _insight_title(pair, is_positive),
            "description": (
                f"{template} This is a {_STRENGTH_DESCRIPTION[corr.strength]} in the data."
            ),
            "related_kpis": [pair.x_kpi, pair.y_kpi],
            "priority": priority,
            "actionable": actionable,
            "r": round(corr.r, 3),
        })

    return sorted(insights, key=lambda i: PRIORITY_ORDER[i["priority"]])
