# snfintel/narrative/portfolio.py

"""
Handlers for portfolio-wide questions.

Every answer is computed from the snapshot's peer records. A handler
returns None when the snapshot lacks the data it needs; the engine then
decides between an insufficient-data message and a labelled sample block.
"""

from collections import Counter
from itertools import groupby
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from snfintel.core import kpi_registry as K
from snfintel.core.insights import generate_correlation_insights
from snfintel.core.models import PeerRecord

from .alerts import Alert, evaluate_alerts
from .context import NarrativeContext
from .formatter import format_metric, pct, signed_pct, usd
from .intents import Intent


def _mean(values: Sequence[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(np.mean(present))


def _directory(ctx: NarrativeContext) -> Dict[str, PeerRecord]:
    directory: Dict[str, PeerRecord] = {}
    for p in ctx.snapshot.peers:
        directory.setdefault(p.facility_id, p)
    return directory


def _group_average(ctx: NarrativeContext, group: Sequence[PeerRecord], kpi_id: str) -> Optional[float]:
    table = ctx.values_by_facility()
    return _mean([table.get(p.facility_id, {}).get(kpi_id) for p in group])


def _driver_line(ctx: NarrativeContext, facility_id: str) -> str:
    row = ctx.values_by_facility().get(facility_id, {})
    bits = [
        f"{label} {format_metric(kpi, row[kpi])}"
        for kpi, label in (
            (K.SKILLED_MIX, "skilled mix"),
            (K.CONTRACT_LABOR, "contract labor"),
            (K.EXPENSE_PPD, "expense PPD"),
        )
        if row.get(kpi) is not None
    ]
    return ", ".join(bits)


# =====================================================
# EMAIL (LEADERSHIP)
# =====================================================

def email_draft(ctx: NarrativeContext) -> Optional[str]:
    ranked = ctx.ranked(same_setting=False)
    if not ranked:
        return None

    top = ranked[:3]
    bottom = list(reversed(ranked[-3:]))
    avg_margin = _mean([p.value for p in ranked])

    parts: List[str] = [
        "**Draft Email for Leadership**",
        "",
        "---",
        "",
        f"Subject: Quick {ctx.snapshot.period_id} update + a few thoughts",
        "",
        "Hey team,",
        "",
        "Hope everyone's week is going well. Wanted to share some observations "
        "from this month's numbers while they're fresh.",
        "",
        f"**Portfolio snapshot:** {len(ranked)} buildings, averaging {pct(avg_margin)} EBITDAR margin.",
        "",
        "**Shoutouts:**",
    ]
    parts.extend(
        f"- {p.facility_name} ({p.state}): {pct(p.value)} - "
        f"{'leading the portfolio!' if i == 0 else 'strong performer'}"
        for i, p in enumerate(top)
    )
    parts.extend([
        "",
        f"I'd love to understand what {top[0].facility_name} is doing differently. "
        "Have we talked to their ED recently about what's working?",
        "",
        "**Needs attention:**",
    ])
    parts.extend(f"- {p.facility_name} ({p.state}): {pct(p.value)}" for p in bottom)

    if bottom[0].value < 0:
        parts.extend([
            "",
            f"{bottom[0].facility_name} being negative is concerning. Do we know what's "
            "driving that? Staffing? Census? Rate issues?",
        ])

    parts.extend([
        "",
        "**Questions on my mind:**",
        "- What would it take to get our bottom 3 to portfolio average?",
        "- Are there peer learning opportunities between our top and struggling buildings?",
        "- Any regional patterns we should be concerned about?",
        "",
        "Happy to dig into any of this further. Let me know what would be most helpful.",
        "",
        "Talk soon,",
        "[Your name]",
        "",
        "---",
        "",
        "*Feel free to adjust tone/detail as needed*",
    ])
    return "\n".join(parts)


# =====================================================
# BENCHMARK (PORTFOLIO)
# =====================================================

def benchmark_report(ctx: NarrativeContext) -> Optional[str]:
    b = ctx.settings.benchmarks
    avg_margin = ctx.portfolio_average(K.OPERATING_MARGIN)
    avg_skilled = ctx.portfolio_average(K.SKILLED_MIX)
    avg_revenue = ctx.portfolio_average(K.REVENUE_PPD)
    avg_expense = ctx.portfolio_average(K.EXPENSE_PPD)
    avg_contract = ctx.portfolio_average(K.CONTRACT_LABOR)

    if all(v is None for v in (avg_margin, avg_skilled, avg_revenue, avg_expense, avg_contract)):
        return None

    def meets(value: Optional[float], target: float, higher_is_better: bool = True) -> bool:
        if value is None:
            return False
        return value >= target if higher_is_better else value <= target

    if avg_skilled is not None and avg_skilled < b.skilled_mix:
        skilled_status = f"⚠️ {pct(b.skilled_mix - avg_skilled)} below benchmark"
    else:
        skilled_status = "✅ Meeting benchmark" if avg_skilled is not None else "-- No data"

    if meets(avg_margin, b.operating_margin) and meets(avg_skilled, b.skilled_mix):
        verdict = "Portfolio is performing well across key metrics!"
    elif avg_skilled is not None and avg_skilled < b.skilled_mix - 2:
        verdict = "Focus on skilled mix optimization to close the gap."
    else:
        verdict = "Opportunity to improve margin through cost management."

    parts: List[str] = [
        f"**Portfolio vs Industry Benchmarks for {ctx.snapshot.period_id}:**",
        "",
        "**Operating Margin**",
        f"- Portfolio Average: {pct(avg_margin)}",
        f"- Industry Benchmark (SNF): {pct(b.operating_margin)}",
        f"- Status: {'✅ Meeting benchmark' if meets(avg_margin, b.operating_margin) else '⚠️ Below benchmark'}",
        "",
        "**Skilled Mix**",
        f"- Portfolio Average: {pct(avg_skilled)}",
        f"- Industry Benchmark: {pct(b.skilled_mix)}",
        f"- Status: {skilled_status}",
        "",
        "**Revenue Per Patient Day**",
        f"- Portfolio Average: {usd(avg_revenue)}",
        f"- Industry Benchmark: {usd(b.revenue_ppd)}",
        f"- Status: {'✅ ABOVE benchmark' if meets(avg_revenue, b.revenue_ppd) else '⚠️ Below benchmark'}",
        "",
        "**Expense Per Patient Day**",
        f"- Portfolio Average: {usd(avg_expense)}",
        f"- Industry Benchmark: {usd(b.expense_ppd)}",
        f"- Status: "
        f"{'✅ BELOW benchmark (good!)' if meets(avg_expense, b.expense_ppd, False) else '⚠️ Above benchmark'}",
        "",
        "**Contract Labor % of Nursing**",
        f"- Portfolio Average: {pct(avg_contract)}",
        f"- Industry Benchmark: {pct(b.contract_labor)}",
        f"- Status: "
        f"{'✅ BELOW benchmark (good!)' if meets(avg_contract, b.contract_labor, False) else '⚠️ Above benchmark'}",
        "",
        f"**Summary:** {verdict}",
    ]
    return "\n".join(parts)


# =====================================================
# BEST VS WORST
# =====================================================

def peer_comparison(ctx: NarrativeContext) -> Optional[str]:
    ranked = ctx.ranked(same_setting=False)
    top = ranked[:3]
    top_ids = {p.facility_id for p in top}
    bottom = [p for p in reversed(ranked[-3:]) if p.facility_id not in top_ids]
    if not top or not bottom:
        return None

    def row(p: PeerRecord) -> str:
        drivers = _driver_line(ctx, p.facility_id)
        suffix = f", {drivers}" if drivers else ""
        return f"- {p.facility_name} ({p.state}): {pct(p.value)} margin{suffix}"

    parts: List[str] = [
        "OK here's an honest look at the gap between our best and struggling buildings:",
        "",
        "**The struggling ones:**",
        *(row(p) for p in bottom),
        "",
        "**The ones crushing it:**",
        *(row(p) for p in top),
        "",
        "**What jumps out:**",
    ]

    observations: List[str] = []
    top_mix = _group_average(ctx, top, K.SKILLED_MIX)
    bottom_mix = _group_average(ctx, bottom, K.SKILLED_MIX)
    if top_mix is not None and bottom_mix is not None:
        observations.append(
            f"Skilled mix: top buildings average {pct(top_mix)}, bottom ones {pct(bottom_mix)}"
            + (
                ". Why aren't the bottom buildings getting skilled referrals?"
                if top_mix > bottom_mix
                else ". Skilled mix is not what separates these groups."
            )
        )

    top_labor = _group_average(ctx, top, K.CONTRACT_LABOR)
    bottom_labor = _group_average(ctx, bottom, K.CONTRACT_LABOR)
    if top_labor is not None and bottom_labor is not None:
        observations.append(
            f"Contract labor: top performers average {pct(top_labor)}, bottom ones {pct(bottom_labor)}"
            + (
                ". What would it take to close that gap?"
                if bottom_labor > top_labor
                else ". Agency use is not the differentiator here."
            )
        )

    margin_gap = _mean([p.value for p in top]) - _mean([p.value for p in bottom])
    observations.append(f"Margin spread between the two groups: {pct(margin_gap)}.")

    parts.extend(observations)
    parts.extend([
        "",
        f"Pairing {bottom[0].facility_name} with {top[0].facility_name} is where I'd start. "
        "Sometimes it's literally just how they're answering intake calls.",
        "",
        "Want me to set up some intro emails between these teams?",
    ])
    return "\n".join(parts)


# =====================================================
# TREND ANALYSIS
# =====================================================

def trend_report(ctx: NarrativeContext) -> Optional[str]:
    history = ctx.snapshot.margin_trend
    values = [t.value for t in history if t.value is not None]
    insights = generate_correlation_insights(ctx.snapshot.correlations)

    if not values and not insights:
        return None

    trend = ctx.trend
    parts: List[str] = [f"**Comprehensive Trend Analysis for {ctx.snapshot.period_id}:**", ""]

    if values:
        recent = values[-3:]
        older = values[-6:-3]
        parts.extend([
            "**Operating Margin Trend:**",
            f"- Current: {pct(values[-1])}",
            f"- Recent 3-month average: {pct(_mean(recent))}",
        ])
        if older:
            parts.append(f"- Prior 3-month average: {pct(_mean(older))}")
        parts.append(
            f"- Direction: {trend.direction.capitalize()} ({signed_pct(trend.change)})"
        )
        parts.append("")

    if insights:
        parts.append("**PATTERNS IN THE DATA:**")
        parts.extend(
            f"{i}. **{card['title']}** ({card['type']}, {card['priority']} priority): {card['description']}"
            for i, card in enumerate(insights, start=1)
        )
        parts.append("")

        opportunities = [c for c in insights if c["actionable"]]
        if opportunities:
            parts.append("**WHERE TO ACT:**")
            parts.extend(f"- {c['title']}" for c in opportunities)
            parts.append("")

    parts.append("Would you like me to dive deeper into any of these trends or prepare specific action plans?")
    return "\n".join(parts)


# =====================================================
# TOP PERFORMERS
# =====================================================

def top_performers(ctx: NarrativeContext) -> Optional[str]:
    ranked = ctx.ranked(same_setting=False)
    if not ranked:
        return None

    top = ranked[:3]
    parts: List[str] = [f"Here are your rockstars for {ctx.snapshot.period_id}:", ""]

    for p in top:
        parts.append(f"**{p.facility_name} ({p.state}) - {pct(p.value)} margin**")
        drivers = _driver_line(ctx, p.facility_id)
        if drivers:
            parts.append(f"{drivers[0].upper()}{drivers[1:]}.")
        parts.append("")

    common: List[str] = []
    top_mix = _group_average(ctx, top, K.SKILLED_MIX)
    all_mix = ctx.portfolio_average(K.SKILLED_MIX)
    if top_mix is not None and all_mix is not None:
        common.append(f"- Skilled mix averaging {pct(top_mix)} (portfolio: {pct(all_mix)})")

    top_labor = _group_average(ctx, top, K.CONTRACT_LABOR)
    all_labor = ctx.portfolio_average(K.CONTRACT_LABOR)
    if top_labor is not None and all_labor is not None:
        common.append(f"- Contract labor averaging {pct(top_labor)} (portfolio: {pct(all_labor)})")

    if common:
        parts.extend(["What these buildings have in common:", *common, ""])

    parts.append(
        f"{top[0].facility_name} especially deserves some recognition. "
        "Maybe a shoutout in the next company call?"
    )
    return "\n".join(parts)


# =====================================================
# ATTENTION
# =====================================================

def _relative_gap(alert: Alert) -> float:
    # thresholds mix units (percent, dollars, hours)
    if alert.threshold == 0:
        return alert.gap
    return alert.gap / abs(alert.threshold)


def attention(ctx: NarrativeContext) -> Optional[str]:
    if not ctx.snapshot.peers:
        return None

    period_id = ctx.snapshot.period_id
    alerts = evaluate_alerts(ctx.snapshot.peers, ctx.settings.thresholds)
    if not alerts:
        return (
            f"Good news for {period_id}: no building breaches your alert thresholds right now.\n\n"
            "Want me to pull up the top performers instead?"
        )

    parts: List[str] = [f"Here's what's popping up based on your thresholds for {period_id}:", ""]
    for category, group in groupby(alerts, key=lambda a: a.category):
        group = list(group)
        first = group[0]
        parts.append(
            f"**{category}** ({K.kpi_label(first.kpi_id)} {first.breach} "
            f"{format_metric(first.kpi_id, first.threshold)}):"
        )
        parts.extend(
            f"- {a.facility_name} ({a.state}): {format_metric(a.kpi_id, a.value)}" for a in group
        )
        parts.append("")

    counts = Counter(a.facility_id for a in alerts)
    worst_id, worst_count = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]
    worst = next(a for a in alerts if a.facility_id == worst_id)
    if worst_count > 1:
        parts.append(
            f"My take: {worst.facility_name} needs attention first - it trips {worst_count} "
            "alerts at once, and those problems tend to compound."
        )
    else:
        furthest = min(alerts, key=lambda a: (-_relative_gap(a), a.facility_id))
        parts.append(f"My take: start with {furthest.facility_name}, the furthest from its threshold.")

    parts.extend(["", "Want me to draft some check-in emails? Or pull together a peer comparison for any of these?"])
    return "\n".join(parts)


# =====================================================
# SUMMARY
# =====================================================

def summary(ctx: NarrativeContext) -> Optional[str]:
    margins = [p for p in ctx.snapshot.peers if p.kpi_id == K.OPERATING_MARGIN and p.value is not None]
    if not margins:
        return None

    directory = _directory(ctx)
    states = {p.state for p in directory.values()}
    frame = pd.DataFrame({"setting": [p.setting for p in margins], "value": [p.value for p in margins]})
    by_setting = frame.groupby("setting", sort=True)["value"].agg(["count", "mean"])
    negative = sum(1 for p in margins if p.value < 0)
    alerts = evaluate_alerts(ctx.snapshot.peers, ctx.settings.thresholds)

    parts: List[str] = [
        f"Quick snapshot for {ctx.snapshot.period_id}:",
        "",
        "**The big picture:**",
        f"{len(directory)} buildings, {len(states)} states. "
        f"Portfolio margin is sitting at {pct(float(frame['value'].mean()))}.",
        "",
        "**By setting type:**",
    ]
    parts.extend(
        f"- {setting} ({int(row['count'])} buildings): {pct(float(row['mean']))} margin"
        for setting, row in by_setting.iterrows()
    )

    parts.extend(["", "**What I'm watching:**"])
    watching = []
    if negative:
        watching.append(f"- {negative} building{'s are' if negative != 1 else ' is'} underwater (negative margin).")
    if alerts:
        flagged = len({a.facility_id for a in alerts})
        watching.append(f"- {len(alerts)} threshold alerts across {flagged} buildings.")
    parts.extend(watching or ["- Nothing is breaching your thresholds this month."])

    if ctx.goal_progress:
        statuses = Counter(p.status for _, p in ctx.goal_progress)
        parts.extend([
            "",
            "**Goals:**",
            ", ".join(f"{count} {status.replace('_', ' ')}" for status, count in sorted(statuses.items())),
        ])

    parts.extend(["", "Want me to pull up details on the struggling buildings? Or draft something for leadership?"])
    return "\n".join(parts)


# =====================================================
# MARGIN
# =====================================================

MARGIN_BUCKETS = (
    ("Above 10%", lambda v: v > 10),
    ("5-10%", lambda v: 5 <= v <= 10),
    ("0-5%", lambda v: 0 <= v < 5),
    ("Below 0%", lambda v: v < 0),
)


def margin_report(ctx: NarrativeContext) -> Optional[str]:
    values = [p.value for p in ctx.ranked(same_setting=False)]
    if not values:
        return None

    avg = float(np.mean(values))
    threshold = ctx.settings.thresholds.operating_margin
    b = ctx.settings.benchmarks
    total = len(values)

    parts: List[str] = [
        f"**Margin Analysis for {ctx.snapshot.period_id}:**",
        "",
        f"The portfolio average operating margin is {pct(avg)}, which is "
        f"{'above' if avg >= threshold else 'below'} your target threshold of {pct(threshold)}.",
        "",
        "**Margin Distribution:**",
    ]
    for label, test in MARGIN_BUCKETS:
        count = sum(1 for v in values if test(v))
        parts.append(f"- {label}: {count} facilities ({round(count / total * 100)}%)")

    parts.extend([
        "",
        "**Margin Drivers:**",
        f"1. Revenue PPD: {usd(ctx.portfolio_average(K.REVENUE_PPD))} average (benchmark: {usd(b.revenue_ppd)})",
        f"2. Expense PPD: {usd(ctx.portfolio_average(K.EXPENSE_PPD))} average (benchmark: {usd(b.expense_ppd)})",
        f"3. Skilled Mix: {pct(ctx.portfolio_average(K.SKILLED_MIX))} average (target: {pct(b.skilled_mix)}+)",
        "",
        "Would you like me to drill into any specific facility or cost category?",
    ])
    return "\n".join(parts)


# =====================================================
# HELP / NO DATA
# =====================================================

def help_text(query: str, focus_areas: Sequence[str]) -> str:
    return "\n".join([
        f'Hmm, let me think about "{query}"...',
        "",
        "I don't have a specific answer for that, but here's what I can help with:",
        "",
        "**Quick things:**",
        "- Draft an email to leadership or a facility leader",
        "- Pull up which buildings need attention right now",
        "- Show you who's performing best (and what they're doing right)",
        "- Compare your struggling buildings to your top performers",
        "",
        "**Deeper analysis:**",
        "- How you're trending over time",
        "- How you stack up against industry benchmarks",
        "- A portfolio summary or margin breakdown",
        "",
        "**With a building selected:**",
        "- A full review, trend history, peer comparison or improvement suggestions",
        "",
        'Just ask in plain English - "who needs attention?", "draft an email", "show me the top performers".',
        "",
        f"Currently watching: {', '.join(focus_areas)}",
    ])


INSUFFICIENT_DATA = {
    Intent.EMAIL_DRAFT: "a leadership email",
    Intent.BENCHMARK: "a benchmark comparison",
    Intent.PEER_COMPARISON: "a best-versus-worst comparison",
    Intent.TREND: "a trend analysis",
    Intent.TOP_PERFORMERS: "a top-performer list",
    Intent.ATTENTION: "an alert review",
    Intent.SUMMARY: "a portfolio summary",
    Intent.MARGIN: "a margin analysis",
}


def insufficient_data(intent: Intent, period_id: str) -> str:
    what = INSUFFICIENT_DATA.get(intent, "this answer")
    return (
        f"**Insufficient data for {period_id}**\n\n"
        f"I don't have enough reported figures to put together {what} yet. "
        "Once this period's KPIs finish loading, ask again."
    )
