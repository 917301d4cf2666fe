# snfintel/narrative/samples.py

"""
Illustrative narrative blocks for demos and onboarding.

None of the names or figures here come from a snapshot. They are only
rendered when narrative.sample_fallbacks is enabled AND the real data
needed for an answer is missing, and every block starts with
SAMPLE_LABEL so readers can never mistake them for their own numbers.
"""

from typing import Callable, Dict

from snfintel.config.settings import AlertThresholds

from .intents import Intent


SAMPLE_LABEL = "> _Sample content: illustrative figures, not drawn from your data._"


def _labelled(body: str) -> str:
    return f"{SAMPLE_LABEL}\n\n{body}"


# =====================================================
# SAMPLE BLOCKS
# =====================================================

def sample_peer_comparison(period_id: str, thresholds: AlertThresholds) -> str:
    return _labelled(
        "OK here's an honest look at the gap between our best and struggling buildings:\n"
        "\n"
        "**The struggling ones:**\n"
        "- Creekside (OR): -2.3% margin, 11% skilled mix, 18% contract labor\n"
        "- Payette (ID): 1.8% margin, 14% skilled mix, 15% contract labor\n"
        "- Colfax (WA): 3.2% margin, 12% skilled mix, 22% contract labor\n"
        "\n"
        "**The ones crushing it:**\n"
        "- Shaw (ID): 18.0% margin, 24% skilled mix, 3% contract labor\n"
        "- Boise (ID): 15.2% margin, 21% skilled mix, 4% contract labor\n"
        "- Canyon West (ID): 14.8% margin, 19% skilled mix, 6% contract labor\n"
        "\n"
        "**What jumps out:**\n"
        "The skilled mix gap is massive. Top buildings are at 21% average, bottom ones at 12%. "
        "Contract labor tells a story too. Top performers average 4%, bottom ones 18%.\n"
        "\n"
        "Want me to set up some intro emails between these teams?"
    )


def sample_trend(period_id: str, thresholds: AlertThresholds) -> str:
    return _labelled(
        f"**Comprehensive Trend Analysis for {period_id}:**\n"
        "\n"
        "**Operating Margin Trend:**\n"
        "- 6 months ago: 6.8%\n"
        "- 3 months ago: 7.2%\n"
        "- Current: 7.8%\n"
        "- Direction: Improving (+1.0% over 6 months)\n"
        "\n"
        "**SEASONAL PATTERNS:**\n"
        "- Q4 typically sees 2-3% margin compression (flu season, holidays)\n"
        "- Skilled mix peaks in Jan-Feb (post-hospital surge)\n"
        "- Contract labor increases Nov-Dec (holiday coverage)\n"
        "\n"
        "Would you like me to dive deeper into any of these trends?"
    )


def sample_attention(period_id: str, thresholds: AlertThresholds) -> str:
    return _labelled(
        f"Here's what's popping up based on your thresholds for {period_id}:\n"
        "\n"
        f"**Margin Issues** (below {thresholds.operating_margin:.1f}%):\n"
        "- Creekside (OR): -2.3% - this one's been struggling for a few months now\n"
        "- Payette (ID): 1.8% - down from 4% last month, worth a check-in\n"
        "\n"
        f"**Staffing Red Flags** (contract labor above {thresholds.contract_labor:.1f}%):\n"
        "- Hudson Bay (WA): 22% - seems stuck here, what's going on with recruiting?\n"
        "\n"
        f"**Occupancy Concerns** (below {thresholds.occupancy:.1f}%):\n"
        "- Riverside (OR): 78% - census has been soft all quarter\n"
        "\n"
        f"**High Expenses** (PPD above ${thresholds.expense_ppd:.0f}):\n"
        "- Meadowbrook (ID): $425 PPD - what's driving this? Supply costs?"
    )


def sample_top_performers(period_id: str, thresholds: AlertThresholds) -> str:
    return _labelled(
        f"Here are your rockstars for {period_id}:\n"
        "\n"
        "**Shaw (ID) - 18.0% margin**\n"
        "Skilled mix at 24% and expense PPD at $310.\n"
        "\n"
        "**Boise (ID) - 15.2% margin**\n"
        "Contract labor is only 4%.\n"
        "\n"
        "**Canyon West (ID) - 14.8% margin**\n"
        "The turnaround story. Up from 10% two months ago."
    )


def sample_summary(period_id: str, thresholds: AlertThresholds) -> str:
    return _labelled(
        f"Quick snapshot for {period_id}:\n"
        "\n"
        "**The big picture:**\n"
        "59 buildings, 5 states. Portfolio margin is sitting at 7.8%.\n"
        "\n"
        "**By setting type:**\n"
        "- SNF (42 buildings): 8.2% margin\n"
        "- ALF (4 buildings): 6.1% margin\n"
        "- ILF (5 buildings): 9.4% margin\n"
        "\n"
        "**What I'm watching:**\n"
        "- 6 buildings are underwater (negative margin)."
    )


def sample_margin(period_id: str, thresholds: AlertThresholds) -> str:
    position = "above" if thresholds.operating_margin <= 7.8 else "below"
    return _labelled(
        f"**Margin Analysis for {period_id}:**\n"
        "\n"
        f"The portfolio average operating margin is 7.8%, which is {position} your "
        f"target threshold of {thresholds.operating_margin:.1f}%.\n"
        "\n"
        "**Margin Distribution:**\n"
        "- Above 10%: 18 facilities (30%)\n"
        "- 5-10%: 24 facilities (41%)\n"
        "- 0-5%: 11 facilities (19%)\n"
        "- Below 0%: 6 facilities (10%)"
    )


SAMPLE_BLOCKS: Dict[Intent, Callable[[str, AlertThresholds], str]] = {
    Intent.PEER_COMPARISON: sample_peer_comparison,
    Intent.TREND: sample_trend,
    Intent.ATTENTION: sample_attention,
    Intent.TOP_PERFORMERS: sample_top_performers,
    Intent.SUMMARY: sample_summary,
    Intent.MARGIN: sample_margin,
}
