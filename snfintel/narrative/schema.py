# snfintel/narrative/schema.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from snfintel.core.correlation import (
    CorrelationPair,
    CorrelationResult,
    analyze_correlation,
    find_pair,
)
from snfintel.core.models import (
    CorrelationPoint,
    FacilityRef,
    GoalRecord,
    PeerRecord,
    TrendPoint,
    validate_period_id,
)

from .intents import Intent


@dataclass(frozen=True)
class NarrativeSnapshot:
    """
    One refresh worth of data for the assistant.

    peers holds every facility's KPI records for period_id (all KPIs, all
    settings); facility_kpis holds the selected facility's values.
    """
    period_id: str
    facility: Optional[FacilityRef] = None
    facility_kpis: Dict[str, Optional[float]] = field(default_factory=dict)
    peers: List[PeerRecord] = field(default_factory=list)
    margin_trend: List[TrendPoint] = field(default_factory=list)
    goals: List[GoalRecord] = field(default_factory=list)
    correlations: List[Tuple[CorrelationPair, CorrelationResult]] = field(default_factory=list)

    def kpi(self, kpi_id: str) -> Optional[float]:
        return self.facility_kpis.get(kpi_id)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NarrativeSnapshot":
        """
        Build a snapshot from the fetch layer's JSON. facilityKpis may be a
        mapping or a list of {kpiId, value} records. Correlations are given
        as precomputed point lists per KPI pair and analysed here.
        """
        raw_kpis = payload.get("facilityKpis", payload.get("facility_kpis", {})) or {}
        if isinstance(raw_kpis, list):
            facility_kpis = {
                r.get("kpiId", r.get("kpi_id")): r.get("value") for r in raw_kpis
            }
        else:
            facility_kpis = dict(raw_kpis)

        facility_raw = payload.get("facility")
        correlations = []
        for entry in payload.get("correlations", []) or []:
            pair = find_pair(
                entry.get("xKpi", entry.get("x_kpi")),
                entry.get("yKpi", entry.get("y_kpi")),
            )
            if pair is None:
                continue
            points = [CorrelationPoint.from_dict(p) for p in entry.get("points", [])]
            correlations.append((pair, analyze_correlation(points)))

        return cls(
            period_id=validate_period_id(payload.get("periodId", payload.get("period_id"))),
            facility=FacilityRef.from_dict(facility_raw) if facility_raw else None,
            facility_kpis={
                k: (float(v) if v is not None else None) for k, v in facility_kpis.items()
            },
            peers=[PeerRecord.from_dict(r) for r in payload.get("peers", []) or []],
            margin_trend=[
                TrendPoint.from_dict(r)
                for r in payload.get("marginTrend", payload.get("margin_trend", [])) or []
            ],
            goals=[GoalRecord.from_dict(r) for r in payload.get("goals", []) or []],
            correlations=correlations,
        )


@dataclass(frozen=True)
class NarrativeResult:
    intent: Intent
    level: str
    text: str
    ambiguous: bool = False
    alternatives: Tuple[Intent, ...] = ()
