# snfintel/core/peer_rank.py

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

from .models import PeerRecord


@dataclass(frozen=True)
class PeerRank:
    rank: int
    total: int
    percentile: int

    @property
    def found(self) -> bool:
        return self.rank > 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =====================================================
# RANKING
# =====================================================

def rank_peers(
    peers: Sequence[PeerRecord],
    kpi_id: str,
    setting: Optional[str] = None,
) -> List[PeerRecord]:
    """
    Comparable peers, best first.

    - Only records for kpi_id (and setting, when given) with a value.
    - Sorted by value descending; equal values fall back to facility_id
      ascending so the order never depends on fetch order.
    - setting=None ranks across the whole portfolio.
    """
    if not peers:
        return []

    df = pd.DataFrame(
        {
            "pos": range(len(peers)),
            "facility_id": [p.facility_id for p in peers],
            "kpi_id": [p.kpi_id for p in peers],
            "setting": [p.setting for p in peers],
            "value": [p.value for p in peers],
        }
    )

    mask = (df["kpi_id"] == kpi_id) & df["value"].notna()
    if setting is not None:
        mask &= df["setting"] == setting

    ranked = df.loc[mask].sort_values(
        by=["value", "facility_id"],
        ascending=[False, True],
        kind="mergesort",
    )

    return [peers[i] for i in ranked["pos"]]


def calculate_peer_rank(
    peers: Sequence[PeerRecord],
    facility_id: str,
    kpi_id: str,
    setting: str,
) -> PeerRank:
    """
    Rank and percentile of one facility within its like-kind peers.

    percentile = round((1 - index / total) * 100), rounded half up, so the
    top facility is always 100. A facility that is absent from the
    filtered set (no value, other setting, unknown id) gets rank -1 and
    percentile 0.
    """
    ranked = rank_peers(peers, kpi_id, setting)
    total = len(ranked)

    index = next(
        (i for i, p in enumerate(ranked) if p.facility_id == facility_id),
        -1,
    )

    if index < 0:
        return PeerRank(rank=-1, total=total, percentile=0)

    return PeerRank(
        rank=index + 1,
        total=total,
        percentile=_round_half_up((1 - index / total) * 100),
    )
