# snfintel/narrative/context.py

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from snfintel.config.settings import NarrativeSettings
from snfintel.core import kpi_registry as K
from snfintel.core.goals import GoalProgress, evaluate_goal_record
from snfintel.core.models import GoalRecord, PeerRecord
from snfintel.core.peer_rank import PeerRank, calculate_peer_rank, rank_peers
from snfintel.core.trend import TrendResult, classify_trend

from .schema import NarrativeSnapshot


@dataclass(frozen=True)
class NarrativeContext:
    """
    Statistic outputs shared by every handler for one query.
    """
    snapshot: NarrativeSnapshot
    settings: NarrativeSettings
    trend: TrendResult
    margin_rank: Optional[PeerRank]
    goal_progress: List[Tuple[GoalRecord, GoalProgress]]

    # ---- selected facility KPIs ----
    @property
    def margin(self) -> Optional[float]:
        return self.snapshot.kpi(K.OPERATING_MARGIN)

    @property
    def skilled_mix(self) -> Optional[float]:
        return self.snapshot.kpi(K.SKILLED_MIX)

    @property
    def revenue_ppd(self) -> Optional[float]:
        return self.snapshot.kpi(K.REVENUE_PPD)

    @property
    def expense_ppd(self) -> Optional[float]:
        return self.snapshot.kpi(K.EXPENSE_PPD)

    @property
    def contract_labor(self) -> Optional[float]:
        return self.snapshot.kpi(K.CONTRACT_LABOR)

    # ---- peer views ----
    def ranked(self, kpi_id: str = K.OPERATING_MARGIN, same_setting: bool = True) -> List[PeerRecord]:
        facility = self.snapshot.facility
        setting = facility.setting if (same_setting and facility) else None
        return rank_peers(self.snapshot.peers, kpi_id, setting)

    def values_by_facility(self) -> Dict[str, Dict[str, Optional[float]]]:
        table: Dict[str, Dict[str, Optional[float]]] = {}
        for p in self.snapshot.peers:
            table.setdefault(p.facility_id, {})[p.kpi_id] = p.value
        return table

    def portfolio_average(self, kpi_id: str) -> Optional[float]:
        values = [p.value for p in self.snapshot.peers if p.kpi_id == kpi_id and p.value is not None]
        if not values:
            return None
        return float(np.mean(values))


def build_context(snapshot: NarrativeSnapshot, settings: NarrativeSettings) -> NarrativeContext:
    facility = snapshot.facility

    margin_rank = None
    if facility is not None:
        margin_rank = calculate_peer_rank(
            snapshot.peers,
            facility.facility_id,
            K.OPERATING_MARGIN,
            facility.setting,
        )

    goals: List[GoalRecord] = [
        g for g in snapshot.goals
        if facility is None or g.facility_id == facility.facility_id
    ]
    goal_progress = [(g, evaluate_goal_record(g)) for g in goals]

    return NarrativeContext(
        snapshot=snapshot,
        settings=settings,
        trend=classify_trend(snapshot.margin_trend),
        margin_rank=margin_rank,
        goal_progress=goal_progress,
    )

