from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

from .defaults import DEFAULT_CONFIG


# -------------------------------------------------
# ALERT THRESHOLDS
# -------------------------------------------------
@dataclass(frozen=True)
class AlertThresholds:
    """
    User-adjustable alert thresholds.

    Passed explicitly to every alert / narrative call. There is no
    module-level instance.
    """
    operating_margin: float = 5.0
    contract_labor: float = 15.0
    skilled_mix: float = 15.0
    occupancy: float = 85.0
    revenue_ppd: float = 380.0
    expense_ppd: float = 400.0
    nursing_hprd: float = 3.5
    agency_nursing: float = 20.0

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "AlertThresholds":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown alert thresholds: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in values.items()})


# -------------------------------------------------
# BENCHMARKS
# -------------------------------------------------
@dataclass(frozen=True)
class Benchmarks:
    operating_margin: float = 8.0
    skilled_mix: float = 20.0
    revenue_ppd: float = 400.0
    expense_ppd: float = 350.0
    contract_labor: float = 10.0

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Benchmarks":
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in values.items() if k in known})


# -------------------------------------------------
# NARRATIVE SETTINGS
# -------------------------------------------------
@dataclass(frozen=True)
class NarrativeSettings:
    """
    Everything the narrative generator may read besides the data snapshot.
    """
    thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    benchmarks: Benchmarks = field(default_factory=Benchmarks)
    personality: str = "friendly"
    focus_areas: List[str] = field(
        default_factory=lambda: list(DEFAULT_CONFIG["narrative"]["focus_areas"])
    )
    sample_fallbacks: bool = False

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "NarrativeSettings":
        narrative = cfg.get("narrative", {}) or {}

        return cls(
            thresholds=AlertThresholds.from_dict(cfg.get("alerts", {}) or {}),
            benchmarks=Benchmarks.from_dict(cfg.get("benchmarks", {}) or {}),
            personality=narrative.get("personality", "friendly"),
            focus_areas=list(
                narrative.get("focus_areas", DEFAULT_CONFIG["narrative"]["focus_areas"])
            ),
            sample_fallbacks=bool(narrative.get("sample_fallbacks", False)),
        )
