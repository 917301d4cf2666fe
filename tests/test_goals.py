import pytest

from snfintel.core.goals import classify_progress, evaluate_goal, evaluate_goal_record
from snfintel.core.models import GoalRecord


def test_higher_is_better_partial_progress():
    result = evaluate_goal(15, 20, True)

    assert result.progress == pytest.approx(75.0)
    # 75 sits in the 50-80 band
    assert result.status == "at_risk"


def test_exactly_on_target_is_achieved():
    result = evaluate_goal(20, 20, True)
    assert (result.progress, result.status) == (100.0, "achieved")


def test_lower_is_better_beating_target():
    result = evaluate_goal(8, 10, False)

    assert result.progress == pytest.approx(100.0)
    assert result.status == "achieved"


def test_lower_is_better_over_target():
    result = evaluate_goal(12, 10, False)

    assert result.progress == pytest.approx(80.0)
    assert result.status == "on_track"


def test_lower_is_better_double_target_is_zero():
    assert evaluate_goal(25, 10, False).progress == 0.0


def test_progress_is_clamped():
    assert evaluate_goal(50, 20, True).progress == 100.0
    assert evaluate_goal(-5, 20, True).progress == 0.0


def test_zero_target_never_divides():
    assert evaluate_goal(3, 0, True).progress == 100.0
    assert evaluate_goal(-1, 0, True).progress == 0.0
    assert evaluate_goal(3, 0, False).progress == 0.0


def test_missing_reading_is_pending():
    result = evaluate_goal(None, 20, True)
    assert (result.progress, result.status) == (0.0, "pending")


def test_missing_reading_keeps_stored_status():
    goal = GoalRecord("101", "snf_skilled_mix_pct", 20.0, True, status="behind")

    assert evaluate_goal_record(goal).status == "behind"


@pytest.mark.parametrize(
    "progress, status",
    [(100, "achieved"), (80, "on_track"), (79.9, "at_risk"), (50, "at_risk"), (49.9, "behind")],
)
def test_status_boundaries(progress, status):
    assert classify_progress(progress) == status
