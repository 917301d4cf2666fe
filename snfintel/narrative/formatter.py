# snfintel/narrative/formatter.py
from typing import Literal, Optional

from snfintel.core.kpi_registry import get_contract


ValueFormat = Literal["percentage", "currency", "number"]

PLACEHOLDER = "--"

_PERCENT_MARKERS = ("pct", "margin", "mix")
_CURRENCY_MARKERS = ("revenue", "cost", "ppd")


def value_format_for_kpi(kpi_id: str) -> ValueFormat:
    """
    Display format implied by the KPI id. Percentage markers win over
    currency markers.
    """
    kpi = kpi_id.lower()
    if any(m in kpi for m in _PERCENT_MARKERS):
        return "percentage"
    if any(m in kpi for m in _CURRENCY_MARKERS):
        return "currency"
    return "number"


def format_value(value: Optional[float], fmt: ValueFormat) -> str:
    if value is None:
        return PLACEHOLDER
    if fmt == "currency":
        return f"${value:.0f}"
    if fmt == "percentage":
        return f"{value:.1f}%"
    return f"{value:.2f}"


def format_kpi_value(kpi_id: str, value: Optional[float]) -> str:
    return format_value(value, value_format_for_kpi(kpi_id))


def pct(value: Optional[float]) -> str:
    return format_value(value, "percentage")


def usd(value: Optional[float]) -> str:
    return format_value(value, "currency")


def signed_pct(value: float) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}%"


def format_metric(kpi_id: str, value: Optional[float]) -> str:
    """
    Like format_kpi_value, but trusts the registered unit when the KPI is
    known. Hour metrics such as nursing HPPD would otherwise read as dollars.
    """
    contract = get_contract(kpi_id)
    if contract is None or value is None:
        return format_kpi_value(kpi_id, value)
    if contract.unit == "currency":
        return usd(value)
    if contract.unit == "percent":
        return pct(value)
    return f"{value:.2f}"
