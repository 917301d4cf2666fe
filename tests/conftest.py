import pytest

from snfintel.config.settings import NarrativeSettings
from snfintel.core import kpi_registry as K
from snfintel.core.correlation import analyze_correlation, find_pair
from snfintel.core.models import (
    CorrelationPoint,
    FacilityRef,
    GoalRecord,
    PeerRecord,
    TrendPoint,
)
from snfintel.narrative.schema import NarrativeSnapshot


FACILITIES = [
    # id, name, state, setting, margin, skilled mix, contract labor, expense ppd, revenue ppd
    ("101", "Shaw", "ID", "SNF", 18.0, 24.0, 3.0, 310.0, 450.0),
    ("102", "Boise", "ID", "SNF", 15.2, 21.0, 4.0, 330.0, 430.0),
    ("103", "Canyon West", "ID", "SNF", 14.8, 19.0, 6.0, 340.0, 420.0),
    ("104", "Colfax", "WA", "SNF", 3.2, 12.0, 22.0, 395.0, 390.0),
    ("105", "Payette", "ID", "SNF", 1.8, 14.0, 15.0, 405.0, 370.0),
    ("106", "Creekside", "OR", "SNF", -2.3, 11.0, 18.0, 425.0, 360.0),
    ("201", "Garden Court", "WA", "ALF", 6.1, None, 5.0, 210.0, 230.0),
]


def _peer_records():
    records = []
    for fid, name, state, setting, margin, mix, labor, expense, revenue in FACILITIES:
        for kpi_id, value in (
            (K.OPERATING_MARGIN, margin),
            (K.SKILLED_MIX, mix),
            (K.CONTRACT_LABOR, labor),
            (K.EXPENSE_PPD, expense),
            (K.REVENUE_PPD, revenue),
        ):
            records.append(PeerRecord(fid, name, state, setting, kpi_id, value))
    return records


@pytest.fixture
def peers():
    """Seven buildings, six SNF and one ALF, for period 2024-06."""
    return _peer_records()


@pytest.fixture
def margin_trend():
    months = ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05", "2024-06"]
    return [TrendPoint(m, v) for m, v in zip(months, [5.0, 6.0, 7.0, 8.0, 9.0, 10.0])]


@pytest.fixture
def correlations():
    pair = find_pair(K.SKILLED_MIX, K.REVENUE_PPD)
    points = [
        CorrelationPoint("2024-01", 1.0, 3.0),
        CorrelationPoint("2024-02", 2.0, 5.0),
        CorrelationPoint("2024-03", 3.0, 7.0),
        CorrelationPoint("2024-04", 4.0, 9.0),
    ]
    return [(pair, analyze_correlation(points))]


@pytest.fixture
def facility_snapshot(peers, margin_trend, correlations):
    """Payette selected: a struggling SNF with an at-risk goal."""
    return NarrativeSnapshot(
        period_id="2024-06",
        facility=FacilityRef("105", "Payette", "ID", "SNF"),
        facility_kpis={
            K.OPERATING_MARGIN: 1.8,
            K.SKILLED_MIX: 14.0,
            K.CONTRACT_LABOR: 15.0,
            K.EXPENSE_PPD: 405.0,
            K.REVENUE_PPD: 370.0,
        },
        peers=peers,
        margin_trend=margin_trend,
        goals=[
            GoalRecord("105", K.SKILLED_MIX, 20.0, True, current_value=15.0),
            GoalRecord("101", K.SKILLED_MIX, 20.0, True, current_value=25.0),
        ],
        correlations=correlations,
    )


@pytest.fixture
def portfolio_snapshot(peers, margin_trend, correlations):
    return NarrativeSnapshot(
        period_id="2024-06",
        peers=peers,
        margin_trend=margin_trend,
        goals=[GoalRecord("101", K.SKILLED_MIX, 20.0, True, current_value=25.0)],
        correlations=correlations,
    )


@pytest.fixture
def empty_snapshot():
    return NarrativeSnapshot(period_id="2024-06")


@pytest.fixture
def settings():
    return NarrativeSettings()
