import pytest

from snfintel.core import kpi_registry as K
from snfintel.core.correlation import (
    CORRELATION_PAIRS,
    analyze_correlation,
    classify_direction,
    classify_strength,
    find_pair,
    pair_samples,
)
from snfintel.core.models import CorrelationPoint, KPISample


def points(xs, ys):
    return [
        CorrelationPoint(f"2024-{i + 1:02d}", x, y)
        for i, (x, y) in enumerate(zip(xs, ys))
    ]


def test_perfect_line():
    result = analyze_correlation(points([1, 2, 3, 4], [3, 5, 7, 9]))

    assert result.r == pytest.approx(1.0)
    assert result.slope == pytest.approx(2.0)
    assert result.intercept == pytest.approx(1.0)
    assert result.strength == "strong"
    assert result.direction == "positive"
    assert result.data_points == 4
    assert result.line.start == pytest.approx((1.0, 3.0))
    assert result.line.end == pytest.approx((4.0, 9.0))


def test_line_passes_through_means():
    xs = [2.0, 4.5, 1.0, 7.0, 3.3]
    ys = [10.0, 3.0, 8.0, 1.0, 6.5]

    result = analyze_correlation(points(xs, ys))

    assert result.predict(sum(xs) / len(xs)) == pytest.approx(sum(ys) / len(ys))
    assert result.direction == "negative"
    assert -1.0 <= result.r <= 1.0


def test_zero_variance_in_x():
    result = analyze_correlation(points([3, 3, 3], [1, 5, 9]))

    assert result.r == 0.0
    assert result.slope == 0.0
    assert result.intercept == pytest.approx(5.0)
    assert result.strength == "none"
    assert result.direction == "none"


def test_zero_variance_in_y():
    result = analyze_correlation(points([1, 2, 3], [4, 4, 4]))

    assert result.r == 0.0
    assert result.slope == pytest.approx(0.0)
    assert result.intercept == pytest.approx(4.0)


def test_single_point():
    result = analyze_correlation(points([2.5], [7.0]))

    assert result.r == 0.0
    assert result.slope == 0.0
    assert result.intercept == pytest.approx(7.0)
    assert result.data_points == 1


def test_no_points():
    result = analyze_correlation([])

    assert (result.r, result.slope, result.intercept, result.data_points) == (0.0, 0.0, 0.0, 0)
    assert result.line is None


@pytest.mark.parametrize(
    "r, strength",
    [(0.7, "strong"), (-0.85, "strong"), (0.4, "moderate"), (0.2, "weak"), (0.19, "none"), (0.0, "none")],
)
def test_strength_thresholds(r, strength):
    assert classify_strength(r) == strength


def test_direction_of_zero():
    assert classify_direction(0.0) == "none"


def test_pair_samples_joins_on_period():
    x = [
        KPISample(K.SKILLED_MIX, "2024-02", 18.0),
        KPISample(K.SKILLED_MIX, "2024-01", 17.0),
        KPISample(K.SKILLED_MIX, "2024-03", None),
    ]
    y = [
        KPISample(K.REVENUE_PPD, "2024-01", 400.0),
        KPISample(K.REVENUE_PPD, "2024-03", 420.0),
        KPISample(K.REVENUE_PPD, "2024-02", 410.0),
    ]

    joined = pair_samples(x, y)

    assert [(p.period_id, p.x, p.y) for p in joined] == [
        ("2024-01", 17.0, 400.0),
        ("2024-02", 18.0, 410.0),
    ]


def test_known_pairs():
    assert len(CORRELATION_PAIRS) == 6
    assert find_pair(K.CONTRACT_LABOR, K.OPERATING_MARGIN).x_label == "Contract Labor %"
    assert find_pair(K.OPERATING_MARGIN, K.CONTRACT_LABOR) is None
