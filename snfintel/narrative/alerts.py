# snfintel/narrative/alerts.py

from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence

from snfintel.config.settings import AlertThresholds
from snfintel.core import kpi_registry as K
from snfintel.core.models import PeerRecord


@dataclass(frozen=True)
class AlertRule:
    category: str
    kpi_id: str
    threshold_name: str
    breach: Literal["below", "above"]


@dataclass(frozen=True)
class Alert:
    category: str
    facility_id: str
    facility_name: str
    state: str
    kpi_id: str
    value: float
    threshold: float
    breach: str

    @property
    def gap(self) -> float:
        return abs(self.value - self.threshold)


# Display order of the attention report.
ALERT_RULES: List[AlertRule] = [
    AlertRule("Margin Issues", K.OPERATING_MARGIN, "operating_margin", "below"),
    AlertRule("Staffing Red Flags", K.CONTRACT_LABOR, "contract_labor", "above"),
    AlertRule("Low Skilled Mix", K.SKILLED_MIX, "skilled_mix", "below"),
    AlertRule("Occupancy Concerns", K.OCCUPANCY, "occupancy", "below"),
    AlertRule("Low Revenue", K.REVENUE_PPD, "revenue_ppd", "below"),
    AlertRule("High Expenses", K.EXPENSE_PPD, "expense_ppd", "above"),
    AlertRule("Thin Nursing Coverage", K.NURSING_HPPD, "nursing_hprd", "below"),
    AlertRule("Agency Dependence", K.AGENCY_NURSING, "agency_nursing", "above"),
]


def check_threshold(value: Optional[float], threshold: float, breach: str) -> bool:
    if value is None:
        return False
    if breach == "below":
        return value < threshold
    return value > threshold


def evaluate_alerts(
    peers: Sequence[PeerRecord],
    thresholds: AlertThresholds,
) -> List[Alert]:
    """
    Every threshold breach in a period snapshot.

    Ordered by rule, then worst breach first, then facility_id. Records
    with no value never alert.
    """
    alerts: List[Alert] = []

    for rule in ALERT_RULES:
        threshold = getattr(thresholds, rule.threshold_name)
        breaches = [
            Alert(
                category=rule.category,
                facility_id=p.facility_id,
                facility_name=p.facility_name,
                state=p.state,
                kpi_id=p.kpi_id,
                value=p.value,
                threshold=threshold,
                breach=rule.breach,
            )
            for p in peers
            if p.kpi_id == rule.kpi_id and check_threshold(p.value, threshold, rule.breach)
        ]
        alerts.extend(sorted(breaches, key=lambda a: (-a.gap, a.facility_id)))

    return alerts
