import pytest

from snfintel.core.models import GoalRecord, KPISample, PeerRecord, validate_period_id
from snfintel.narrative.schema import NarrativeSnapshot


def test_camel_and_snake_case_records():
    camel = PeerRecord.from_dict({
        "facilityId": 7, "facilityName": "Shaw", "state": "ID",
        "setting": "SNF", "kpiId": "snf_operating_margin_pct", "value": "18",
    })
    snake = PeerRecord.from_dict({
        "facility_id": "7", "facility_name": "Shaw", "state": "ID",
        "setting": "SNF", "kpi_id": "snf_operating_margin_pct", "value": 18.0,
    })

    assert camel == snake
    assert camel.facility_id == "7"


def test_null_value_survives():
    sample = KPISample.from_dict({"kpiId": "snf_skilled_mix_pct", "periodId": "2024-02", "value": None})
    assert sample.value is None


@pytest.mark.parametrize("period", ["2024-13", "2024-1", "24-01", "", None])
def test_bad_period_rejected(period):
    with pytest.raises(ValueError):
        validate_period_id(period)


def test_missing_required_key():
    with pytest.raises(KeyError):
        GoalRecord.from_dict({"facilityId": "1", "targetValue": 20, "higherIsBetter": True})


def test_goal_defaults():
    goal = GoalRecord.from_dict({
        "facilityId": "1", "kpiId": "snf_skilled_mix_pct",
        "targetValue": 20, "higherIsBetter": True,
    })
    assert (goal.current_value, goal.status) == (None, "pending")


def test_snapshot_from_payload():
    snapshot = NarrativeSnapshot.from_dict({
        "periodId": "2024-06",
        "facility": {"facilityId": "1", "name": "Shaw", "state": "ID", "setting": "SNF"},
        "facilityKpis": [{"kpiId": "snf_operating_margin_pct", "value": 18}],
        "marginTrend": [{"periodId": "2024-05", "value": 16.2}, {"periodId": "2024-06", "value": 18.0}],
        "correlations": [
            {
                "xKpi": "snf_skilled_mix_pct",
                "yKpi": "snf_total_revenue_ppd",
                "points": [
                    {"periodId": "2024-01", "x": 1, "y": 3},
                    {"periodId": "2024-02", "x": 2, "y": 5},
                ],
            },
            {"xKpi": "unknown", "yKpi": "pair", "points": []},
        ],
    })

    assert snapshot.facility.name == "Shaw"
    assert snapshot.kpi("snf_operating_margin_pct") == 18.0
    assert snapshot.kpi("snf_skilled_mix_pct") is None
    assert len(snapshot.margin_trend) == 2
    assert len(snapshot.correlations) == 1
    assert snapshot.correlations[0][1].slope == pytest.approx(2.0)


def test_snapshot_rejects_bad_period():
    with pytest.raises(ValueError):
        NarrativeSnapshot.from_dict({"periodId": "June"})
