import logging
from dataclasses import replace

import pytest

from snfintel.config.settings import NarrativeSettings
from snfintel.core import kpi_registry as K
from snfintel.core.models import PeerRecord, TrendPoint
from snfintel.narrative.engine import generate_narrative
from snfintel.narrative.intents import Intent
from snfintel.narrative.samples import SAMPLE_LABEL
from snfintel.narrative.schema import NarrativeSnapshot


# -------------------------------------------------
# FACILITY LEVEL
# -------------------------------------------------

def test_full_review(facility_snapshot):
    result = generate_narrative("Give me a full review", "facility", facility_snapshot)

    assert result.intent == Intent.FULL_REVIEW
    assert result.level == "facility"
    assert "**Full Performance Review: Payette**" in result.text
    assert "Ranked #5 of 6 SNF buildings (33th percentile)" in result.text
    assert "margin is **improving** (+3.0% change)" in result.text
    assert "Skilled Mix: 15.0% vs target 20.0% (75% progress) - ⚠️ At Risk" in result.text
    assert "Margin at 1.8% needs immediate attention" in result.text


def test_facility_trend(facility_snapshot):
    result = generate_narrative("show me the trend", "facility", facility_snapshot)

    assert result.intent == Intent.TREND
    assert "📈" in result.text
    assert "- High point: 10.0% (2024-06)" in result.text
    assert "- Low point: 5.0% (2024-01)" in result.text
    assert "- Net change: 5.0%" in result.text
    assert "- Month over month: +1.0%" in result.text
    assert "- Volatility:" not in result.text
    assert "Skilled Mix and Revenue Move Together" in result.text


def test_facility_peer_comparison(facility_snapshot):
    text = generate_narrative("compare to peers", "facility", facility_snapshot).text

    assert "1. Shaw (ID): 18.0%" in text
    assert "5. Payette (ID): 1.8% ⬅️ YOU" in text
    assert "6. Creekside (OR): -2.3%" in text
    assert "That's a 14.2% gap" in text


def test_facility_suggestions(facility_snapshot):
    text = generate_narrative("what do you recommend?", "facility", facility_snapshot).text

    assert "**TOP PRIORITY:**" in text
    assert "Skilled Mix Opportunity" in text
    assert "Contract Labor Reduction" in text
    assert "Goal Check-in (Skilled Mix)" in text
    assert "- Shaw (18.0% margin)" in text


def test_facility_email(facility_snapshot):
    result = generate_narrative("draft an email", "facility", facility_snapshot)

    assert result.intent == Intent.EMAIL_DRAFT
    assert result.level == "facility"
    assert "**Draft Email for Payette Leader**" in result.text
    assert "1.8% EBITDAR margin, which is okay but has room to grow" in result.text
    assert "Shaw is doing really well right now (18.0% margin)" in result.text


def test_facility_email_without_margin_uses_portfolio_email(facility_snapshot):
    snapshot = replace(facility_snapshot, facility_kpis={})

    result = generate_narrative("draft an email", "facility", snapshot)

    assert result.level == "portfolio"
    assert "**Draft Email for Leadership**" in result.text


def test_facility_benchmark(facility_snapshot):
    text = generate_narrative("industry benchmark", "facility", facility_snapshot).text

    assert "| EBITDAR Margin | 1.8% | 8.0% | 🔴 Below |" in text
    assert "| Expense PPD | $405 | $350 | 🔴 Above |" in text
    assert "- Margin: 6.2% below target" in text


def test_missing_facility_kpis_render_placeholder(facility_snapshot):
    snapshot = replace(facility_snapshot, facility_kpis={})

    text = generate_narrative("full review", "facility", snapshot).text

    assert "| EBITDAR Margin | -- | -- |" in text
    assert "| Contract Labor | -- | -- |" in text
    assert "Needs Attention" not in text
    assert "Below Target" not in text


def test_facility_trend_flags_volatile_margin(facility_snapshot):
    months = ["2024-01", "2024-02", "2024-03", "2024-04"]
    history = [TrendPoint(m, v) for m, v in zip(months, [2.0, 8.0, 1.0, 9.0])]
    snapshot = replace(facility_snapshot, margin_trend=history)

    text = generate_narrative("show me the trend", "facility", snapshot).text

    assert "- Average: 5.0%" in text
    assert "- Volatility: 71% (high month-to-month variation)" in text


# -------------------------------------------------
# PORTFOLIO LEVEL
# -------------------------------------------------

def test_portfolio_email(portfolio_snapshot):
    text = generate_narrative("Draft an email report for leadership", "portfolio", portfolio_snapshot).text

    assert "7 buildings, averaging 8.1% EBITDAR margin" in text
    assert "- Shaw (ID): 18.0% - leading the portfolio!" in text
    assert "Creekside being negative is concerning" in text


def test_portfolio_benchmark(portfolio_snapshot):
    text = generate_narrative("industry benchmarks", "portfolio", portfolio_snapshot).text

    assert "- Portfolio Average: 8.1%" in text
    assert "- Industry Benchmark (SNF): 8.0%" in text


def test_best_vs_worst(portfolio_snapshot):
    result = generate_narrative("compare the worst and best", "portfolio", portfolio_snapshot)

    assert result.intent == Intent.PEER_COMPARISON
    assert "- Creekside (OR): -2.3% margin" in result.text
    assert "top buildings average 21.3%, bottom ones 12.3%" in result.text


def test_portfolio_trend(portfolio_snapshot):
    text = generate_narrative("any opportunities?", "portfolio", portfolio_snapshot).text

    assert "- Direction: Improving (+3.0%)" in text
    assert "**Skilled Mix and Revenue Move Together** (opportunity, high priority)" in text


def test_top_performers(portfolio_snapshot):
    text = generate_narrative("top performers", "portfolio", portfolio_snapshot).text

    assert "**Shaw (ID) - 18.0% margin**" in text
    assert "Skilled mix 24.0%, contract labor 3.0%, expense PPD $310." in text


def test_attention_uses_thresholds(portfolio_snapshot):
    text = generate_narrative("what needs attention", "portfolio", portfolio_snapshot).text

    assert "**Margin Issues** (EBITDAR Margin below 5.0%):" in text
    assert "- Creekside (OR): -2.3%" in text
    assert "Creekside needs attention first - it trips 5 alerts" in text


def test_attention_single_breaches_start_with_the_widest_gap():
    snapshot = NarrativeSnapshot(
        period_id="2024-06",
        peers=[
            PeerRecord("1", "Alpha", "ID", "SNF", K.OPERATING_MARGIN, 4.9),
            PeerRecord("2", "Bravo", "ID", "SNF", K.OPERATING_MARGIN, -10.0),
        ],
    )

    text = generate_narrative("what needs attention", "portfolio", snapshot).text

    assert "- Bravo (ID): -10.0%\n- Alpha (ID): 4.9%" in text
    assert "My take: start with Bravo, the furthest from its threshold." in text


def test_attention_respects_custom_thresholds(portfolio_snapshot):
    settings = NarrativeSettings.from_config({"alerts": {"operating_margin": 0.0}})

    text = generate_narrative("alerts", "portfolio", portfolio_snapshot, settings).text

    assert "(EBITDAR Margin below 0.0%)" in text
    assert "- Payette (ID): 1.8%\n" not in text


def test_summary(portfolio_snapshot):
    text = generate_narrative("overview please", "portfolio", portfolio_snapshot).text

    assert "7 buildings, 3 states" in text
    assert "- ALF (1 buildings): 6.1% margin" in text
    assert "- SNF (6 buildings):" in text
    assert "- 1 building is underwater (negative margin)." in text
    assert "1 achieved" in text


def test_margin_distribution(portfolio_snapshot):
    text = generate_narrative("profitability", "portfolio", portfolio_snapshot).text

    assert "which is above your target threshold of 5.0%" in text
    assert "- Above 10%: 3 facilities (43%)" in text
    assert "- Below 0%: 1 facilities (14%)" in text


def test_help_lists_focus_areas(portfolio_snapshot):
    result = generate_narrative("what's for lunch", "portfolio", portfolio_snapshot)

    assert result.intent == Intent.HELP
    assert "Currently watching: margins, labor, revenue" in result.text


# -------------------------------------------------
# MISSING DATA / SAMPLE CONTENT
# -------------------------------------------------

@pytest.mark.parametrize(
    "query",
    ["top performers", "what needs attention", "summary", "margin", "compare worst and best", "trend", "email"],
)
def test_empty_snapshot_reports_insufficient_data(empty_snapshot, query):
    text = generate_narrative(query, "portfolio", empty_snapshot).text

    assert "Insufficient data for 2024-06" in text
    assert SAMPLE_LABEL not in text
    assert "Shaw" not in text


def test_sample_content_only_when_enabled(empty_snapshot):
    settings = NarrativeSettings(sample_fallbacks=True)

    text = generate_narrative("top performers", "portfolio", empty_snapshot, settings).text

    assert text.startswith(SAMPLE_LABEL)
    assert "Shaw (ID) - 18.0% margin" in text


def test_sample_content_never_replaces_real_data(portfolio_snapshot):
    settings = NarrativeSettings(sample_fallbacks=True)

    text = generate_narrative("top performers", "portfolio", portfolio_snapshot, settings).text

    assert SAMPLE_LABEL not in text


def test_email_has_no_sample_fallback(empty_snapshot):
    settings = NarrativeSettings(sample_fallbacks=True)

    text = generate_narrative("draft an email", "portfolio", empty_snapshot, settings).text

    assert "Insufficient data" in text


# -------------------------------------------------
# DISPATCH
# -------------------------------------------------

def test_facility_scope_without_facility_is_demoted(portfolio_snapshot):
    result = generate_narrative("full review of margin", "facility", portfolio_snapshot)

    assert result.intent == Intent.MARGIN
    assert result.level == "portfolio"


def test_ambiguity_is_reported_and_logged(portfolio_snapshot, caplog):
    with caplog.at_level(logging.INFO, logger="snfintel.narrative.engine"):
        result = generate_narrative("top margin trend", "portfolio", portfolio_snapshot)

    assert result.intent == Intent.TREND
    assert result.ambiguous
    assert result.alternatives == (Intent.TOP_PERFORMERS, Intent.MARGIN)
    assert "also matched" in caplog.text


def test_output_is_deterministic(facility_snapshot, settings):
    first = generate_narrative("full review", "facility", facility_snapshot, settings)
    second = generate_narrative("full review", "facility", facility_snapshot, settings)

    assert first == second
