# snfintel/core/models.py

"""
Record shapes delivered by the data-fetch layer.

All records are immutable snapshots. They are built fresh from each fetch,
read by the statistic modules, and discarded on the next refresh.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

_MISSING = object()


# =====================================================
# KEY HELPERS
# =====================================================

def _pick(record: Dict[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    """
    Return the first present key. The fetch layer emits both camelCase
    and snake_case payloads.
    """
    for key in keys:
        if key in record:
            return record[key]
    if default is _MISSING:
        raise KeyError(keys[0])
    return default


def _as_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def validate_period_id(period_id: str) -> str:
    if not isinstance(period_id, str) or not PERIOD_PATTERN.match(period_id):
        raise ValueError(f"Invalid period id (expected YYYY-MM): {period_id!r}")
    return period_id


# =====================================================
# RECORDS
# =====================================================

@dataclass(frozen=True)
class KPISample:
    kpi_id: str
    period_id: str
    value: Optional[float]
    numerator: Optional[float] = None
    denominator: Optional[float] = None
    scope: str = "facility"
    unit: Optional[str] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "KPISample":
        return cls(
            kpi_id=_pick(record, "kpiId", "kpi_id"),
            period_id=validate_period_id(_pick(record, "periodId", "period_id")),
            value=_as_number(_pick(record, "value", default=None)),
            numerator=_as_number(_pick(record, "numerator", default=None)),
            denominator=_as_number(_pick(record, "denominator", default=None)),
            scope=_pick(record, "scope", default="facility"),
            unit=_pick(record, "unit", default=None),
        )


@dataclass(frozen=True)
class TrendPoint:
    period_id: str
    value: Optional[float]

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "TrendPoint":
        return cls(
            period_id=validate_period_id(_pick(record, "periodId", "period_id")),
            value=_as_number(_pick(record, "value", default=None)),
        )


@dataclass(frozen=True)
class PeerRecord:
    facility_id: str
    facility_name: str
    state: str
    setting: str
    kpi_id: str
    value: Optional[float]

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "PeerRecord":
        return cls(
            facility_id=str(_pick(record, "facilityId", "facility_id")),
            facility_name=_pick(record, "facilityName", "facility_name", "name", default=""),
            state=_pick(record, "state", default=""),
            setting=_pick(record, "setting"),
            kpi_id=_pick(record, "kpiId", "kpi_id"),
            value=_as_number(_pick(record, "value", default=None)),
        )


@dataclass(frozen=True)
class CorrelationPoint:
    period_id: str
    x: float
    y: float

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "CorrelationPoint":
        return cls(
            period_id=validate_period_id(_pick(record, "periodId", "period_id", "period")),
            x=float(record["x"]),
            y=float(record["y"]),
        )


@dataclass(frozen=True)
class GoalRecord:
    facility_id: str
    kpi_id: str
    target_value: float
    higher_is_better: bool
    current_value: Optional[float] = None
    status: str = "pending"

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "GoalRecord":
        return cls(
            facility_id=str(_pick(record, "facilityId", "facility_id")),
            kpi_id=_pick(record, "kpiId", "kpi_id"),
            target_value=float(_pick(record, "targetValue", "target_value")),
            higher_is_better=bool(_pick(record, "higherIsBetter", "higher_is_better")),
            current_value=_as_number(_pick(record, "currentValue", "current_value", default=None)),
            status=_pick(record, "status", default="pending") or "pending",
        )


@dataclass(frozen=True)
class FacilityRef:
    facility_id: str
    name: str
    state: str
    setting: str

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "FacilityRef":
        return cls(
            facility_id=str(_pick(record, "facilityId", "facility_id")),
            name=_pick(record, "name", "facilityName", "facility_name", default=""),
            state=_pick(record, "state", default=""),
            setting=_pick(record, "setting"),
        )


# =====================================================
# SERIES BUILDERS
# =====================================================

def trend_series_from_samples(
    samples: Iterable[KPISample],
    kpi_id: str,
) -> List[TrendPoint]:
    """
    Chronological series for one KPI. "YYYY-MM" ids sort lexically in
    calendar order. Null values are kept; the classifier decides how to
    treat them.
    """
    points = [
        TrendPoint(period_id=s.period_id, value=s.value)
        for s in samples
        if s.kpi_id == kpi_id
    ]
    return sorted(points, key=lambda p: p.period_id)
