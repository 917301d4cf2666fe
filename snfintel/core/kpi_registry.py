from typing import Dict, Optional

from .kpi_contracts import KPIContract


OPERATING_MARGIN = "snf_operating_margin_pct"
SKILLED_MARGIN = "snf_skilled_margin_pct"
SKILLED_MIX = "snf_skilled_mix_pct"
REVENUE_PPD = "snf_total_revenue_ppd"
EXPENSE_PPD = "snf_total_cost_ppd"
CONTRACT_LABOR = "snf_contract_labor_pct_nursing"
OCCUPANCY = "snf_occupancy_pct"
NURSING_HPPD = "snf_nursing_hppd"
NURSING_COST_PPD = "snf_nursing_cost_ppd"
THERAPY_COST_PSD = "snf_therapy_cost_psd"
AGENCY_NURSING = "snf_agency_nursing_pct"


KPI_REGISTRY: Dict[str, KPIContract] = {

    # ---------- Profitability ----------
    OPERATING_MARGIN: KPIContract(
        kpi_id=OPERATING_MARGIN,
        label="EBITDAR Margin",
        unit="percent",
        direction="higher_is_better",
        description="Operating (EBITDAR) margin as a percentage of revenue",
        short_label="Profits",
    ),

    SKILLED_MARGIN: KPIContract(
        kpi_id=SKILLED_MARGIN,
        label="Skilled Margin",
        unit="percent",
        direction="higher_is_better",
        description="Margin earned on skilled (Medicare A / managed care) days",
        short_label="Skilled Profits",
    ),

    # ---------- Revenue ----------
    SKILLED_MIX: KPIContract(
        kpi_id=SKILLED_MIX,
        label="Skilled Mix",
        unit="percent",
        direction="higher_is_better",
        description="Skilled patient days as a share of total patient days",
        short_label="Skilled Mix",
    ),

    REVENUE_PPD: KPIContract(
        kpi_id=REVENUE_PPD,
        label="Revenue PPD",
        unit="currency",
        direction="higher_is_better",
        description="Total revenue per patient day",
        short_label="Revenue",
    ),

    OCCUPANCY: KPIContract(
        kpi_id=OCCUPANCY,
        label="Occupancy",
        unit="percent",
        direction="higher_is_better",
        description="Occupied beds as a share of operational beds",
        short_label="Occupancy",
    ),

    # ---------- Cost ----------
    EXPENSE_PPD: KPIContract(
        kpi_id=EXPENSE_PPD,
        label="Expense PPD",
        unit="currency",
        direction="lower_is_better",
        description="Total operating cost per patient day",
        short_label="Expenses",
    ),

    NURSING_COST_PPD: KPIContract(
        kpi_id=NURSING_COST_PPD,
        label="Nursing Cost PPD",
        unit="currency",
        direction="lower_is_better",
        description="Nursing wages and agency cost per patient day",
        short_label="Nursing Cost",
    ),

    THERAPY_COST_PSD: KPIContract(
        kpi_id=THERAPY_COST_PSD,
        label="Therapy Cost PSD",
        unit="currency",
        direction="lower_is_better",
        description="Therapy cost per skilled day",
        short_label="Therapy Cost",
    ),

    # ---------- Labor ----------
    CONTRACT_LABOR: KPIContract(
        kpi_id=CONTRACT_LABOR,
        label="Contract Labor",
        unit="percent",
        direction="lower_is_better",
        description="Contract labor as a percentage of nursing labor cost",
        short_label="Agency Staff",
    ),

    AGENCY_NURSING: KPIContract(
        kpi_id=AGENCY_NURSING,
        label="Agency Nursing",
        unit="percent",
        direction="lower_is_better",
        description="Agency nursing hours as a percentage of total nursing hours",
        short_label="Agency Nursing",
    ),

    NURSING_HPPD: KPIContract(
        kpi_id=NURSING_HPPD,
        label="Nursing Hours PPD",
        unit="hours",
        direction="neutral",
        description="Nursing hours per patient day",
        short_label="Nursing Hours",
    ),
}


def get_contract(kpi_id: str) -> Optional[KPIContract]:
    return KPI_REGISTRY.get(kpi_id)


def kpi_label(kpi_id: str, short: bool = False) -> str:
    """
    Display label for a KPI id, falling back to a humanised id.
    """
    contract = KPI_REGISTRY.get(kpi_id)
    if contract is None:
        return kpi_id.replace("snf_", "").replace("_", " ").title()
    if short and contract.short_label:
        return contract.short_label
    return contract.label
