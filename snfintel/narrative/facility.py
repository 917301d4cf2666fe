# snfintel/narrative/facility.py

"""
Handlers for questions about one selected building.

Every handler takes a NarrativeContext and returns markdown-like text.
Callers guarantee ctx.snapshot.facility is set.
"""

from typing import List, Optional

from snfintel.core import kpi_registry as K
from snfintel.core.insights import generate_correlation_insights
from snfintel.core.trend import trailing_stats

from .context import NarrativeContext
from .formatter import PLACEHOLDER, format_kpi_value, pct, signed_pct, usd


TREND_EMOJI = {"improving": "📈", "declining": "📉", "stable": "➡️"}

GOAL_STATUS_LABEL = {
    "achieved": "✅ Achieved",
    "on_track": "🟢 On Track",
    "at_risk": "⚠️ At Risk",
    "behind": "🔴 Behind",
    "pending": "⏳ Pending",
}

SKILLED_MIX_TARGET = 18.0


def _you(record_id: str, facility_id: str) -> str:
    return " ⬅️ YOU" if record_id == facility_id else ""


def _status(value: Optional[float], good: bool, good_label: str, bad_label: str) -> str:
    if value is None:
        return PLACEHOLDER
    return good_label if good else bad_label


def _rank_line(ctx: NarrativeContext) -> Optional[str]:
    rank = ctx.margin_rank
    facility = ctx.snapshot.facility
    if rank is None or not rank.found:
        return None
    return (
        f"Ranked #{rank.rank} of {rank.total} {facility.setting} buildings "
        f"({rank.percentile}th percentile)"
    )


def _goal_lines(ctx: NarrativeContext) -> List[str]:
    lines = []
    for goal, progress in ctx.goal_progress:
        lines.append(
            f"- {K.kpi_label(goal.kpi_id)}: {format_kpi_value(goal.kpi_id, goal.current_value)} "
            f"vs target {format_kpi_value(goal.kpi_id, goal.target_value)} "
            f"({progress.progress:.0f}% progress) - {GOAL_STATUS_LABEL.get(progress.status, progress.status)}"
        )
    return lines


def _pattern_lines(ctx: NarrativeContext, limit: int = 3) -> List[str]:
    insights = generate_correlation_insights(ctx.snapshot.correlations)
    return [f"- **{i['title']}:** {i['description']}" for i in insights[:limit]]


# =====================================================
# FULL REVIEW
# =====================================================

def full_review(ctx: NarrativeContext) -> str:
    snap = ctx.snapshot
    facility = snap.facility
    margin = ctx.margin
    skilled_mix = ctx.skilled_mix
    revenue_ppd = ctx.revenue_ppd
    expense_ppd = ctx.expense_ppd
    contract_labor = ctx.contract_labor
    trend = ctx.trend

    if margin is None:
        margin_status = "unknown"
    elif margin >= 8:
        margin_status = "strong"
    elif margin >= 0:
        margin_status = "moderate"
    else:
        margin_status = "concerning"

    margin_badge = {
        "strong": "✅ Strong",
        "moderate": "⚠️ Monitor",
        "concerning": "🔴 Needs Attention",
    }.get(margin_status, PLACEHOLDER)

    top_performers = ctx.ranked()[:3]

    parts: List[str] = [
        f"**Full Performance Review: {facility.name}**",
        "",
        f"**Location:** {facility.state} | **Setting:** {facility.setting}",
        "",
        "---",
        "",
        f"**CURRENT PERFORMANCE ({snap.period_id}):**",
        "",
        "| Metric | Value | Status |",
        "|--------|-------|--------|",
        f"| EBITDAR Margin | {pct(margin)} | {margin_badge} |",
        f"| Skilled Mix | {pct(skilled_mix)} | "
        f"{_status(skilled_mix, skilled_mix is not None and skilled_mix >= SKILLED_MIX_TARGET, '✅ Good', '⚠️ Below Target')} |",
        f"| Revenue PPD | {usd(revenue_ppd)} | "
        f"{_status(revenue_ppd, revenue_ppd is not None and revenue_ppd >= 400, '✅ Above Benchmark', '⚠️ Below Benchmark')} |",
        f"| Expense PPD | {usd(expense_ppd)} | "
        f"{_status(expense_ppd, expense_ppd is not None and expense_ppd <= 350, '✅ Well Controlled', '⚠️ Review Needed')} |",
        f"| Contract Labor | {pct(contract_labor)} | "
        f"{_status(contract_labor, contract_labor is not None and contract_labor <= 10, '✅ Low', '🔴 High')} |",
        "",
        "**PEER RANKING:**",
        _rank_line(ctx) or "Insufficient data for ranking",
        "",
        f"**TREND ANALYSIS:** {TREND_EMOJI[trend.direction]}",
    ]

    history = snap.margin_trend
    if history:
        parts.append(
            f"Over the past {len(history)} months, margin is **{trend.direction}** "
            f"({signed_pct(trend.change)} change)"
        )
    else:
        parts.append("Not enough historical data for trend analysis")

    if len(history) >= 3:
        parts.append("")
        parts.append("Recent history:")
        parts.extend(f"- {t.period_id}: {pct(t.value)}" for t in history[-6:])

    parts.extend(["", f"**TOP {facility.setting} PERFORMERS FOR COMPARISON:**"])
    parts.extend(
        f"{i}. {p.facility_name}: {pct(p.value)} margin"
        for i, p in enumerate(top_performers, start=1)
    )

    goal_lines = _goal_lines(ctx)
    if goal_lines:
        parts.extend(["", "**GOAL PROGRESS:**", *goal_lines])

    patterns = _pattern_lines(ctx, limit=2)
    if patterns:
        parts.extend(["", "**PATTERNS WORTH KNOWING:**", *patterns])

    observations: List[str] = []
    if margin is not None and margin < 5:
        observations.append(f"• Margin at {pct(margin)} needs immediate attention")
    if skilled_mix is not None and skilled_mix < SKILLED_MIX_TARGET:
        observations.append(
            f"• Skilled mix at {pct(skilled_mix)} is below the 18% target - opportunity for revenue growth"
        )
    if contract_labor is not None and contract_labor > 12:
        observations.append(f"• Contract labor at {pct(contract_labor)} is eating into margin")
    if margin is not None and margin >= 10:
        observations.append("• Great work! This building is outperforming most peers")

    parts.extend(["", "**KEY OBSERVATIONS:**", *observations])
    parts.extend([
        "",
        "Would you like me to draft an email to the leader, suggest improvements, "
        "or compare to specific buildings?",
    ])
    return "\n".join(parts)


# =====================================================
# TREND
# =====================================================

def trend_report(ctx: NarrativeContext) -> str:
    facility = ctx.snapshot.facility
    history = ctx.snapshot.margin_trend
    trend = ctx.trend

    stats = trailing_stats(history)
    if stats is None:
        return (
            f"I don't have enough historical data for {facility.name} yet. This might be "
            "a new building in the system or data is still being loaded."
        )

    if trend.direction == "improving":
        reading = (
            f"This building is on an upward trajectory! The margin has improved by "
            f"{pct(trend.change)} over the past few months. Whatever they're doing is working."
        )
    elif trend.direction == "declining":
        reading = (
            f"There's a concerning downward trend here. Margin has dropped "
            f"{pct(abs(trend.change))} recently. Worth digging into what's changed - "
            "is it census? payer mix? labor costs?"
        )
    else:
        reading = (
            "The margin has been relatively stable. Not necessarily bad, but might "
            "indicate opportunity to push for improvement."
        )

    parts: List[str] = [
        f"**Performance Trends: {facility.name}** {TREND_EMOJI[trend.direction]}",
        "",
        f"Looking at the past {len(history)} months of data for this building:",
        "",
        "**MARGIN TREND:**",
        *(f"{t.period_id}: {pct(t.value)}" for t in history[-12:]),
        "",
        "**KEY STATS:**",
        f"- Current: {pct(stats.current)}",
        f"- Average: {pct(stats.average)}",
        f"- High point: {pct(stats.high.value)} ({stats.high.period_id})",
        f"- Low point: {pct(stats.low.value)} ({stats.low.period_id})",
        f"- Net change: {pct(stats.window_change)}",
    ]
    if stats.mom_change is not None:
        parts.append(f"- Month over month: {signed_pct(stats.mom_change)}")
    if stats.high_volatility:
        parts.append(f"- Volatility: {stats.volatility:.0f}% (high month-to-month variation)")
    parts.extend([
        "",
        "**WHAT I'M SEEING:**",
        reading,
    ])

    patterns = _pattern_lines(ctx)
    if patterns:
        parts.extend(["", "**RELATED PATTERNS:**", *patterns])

    parts.extend([
        "",
        "**QUESTIONS TO EXPLORE:**",
        "- Any staffing changes that correlate with the trend?",
        "- Hospital relationship changes affecting referrals?",
        "- Payer contract renewals impacting rates?",
        "- Seasonal patterns we should account for?",
        "",
        "Want me to compare this trend to peer buildings or suggest some focus areas?",
    ])
    return "\n".join(parts)


# =====================================================
# PEER COMPARISON
# =====================================================

def peer_comparison(ctx: NarrativeContext) -> str:
    facility = ctx.snapshot.facility
    peers = ctx.ranked()
    fid = facility.facility_id

    if not peers:
        return (
            f"**Peer Comparison: {facility.name}**\n\n"
            f"No {facility.setting} buildings have a reported margin for "
            f"{ctx.snapshot.period_id}, so there is nothing to compare against yet."
        )

    top = peers[:5]
    bottom = list(reversed(peers[-5:]))
    state_peers = [p for p in peers if p.state == facility.state]
    rank = ctx.margin_rank

    parts: List[str] = [
        f"**Peer Comparison: {facility.name}**",
        "",
        "**Current Performance:**",
        f"- EBITDAR Margin: {pct(ctx.margin)}",
    ]
    if rank is not None and rank.found:
        parts.append(f"- Ranking: #{rank.rank} of {rank.total} {facility.setting} buildings")
    else:
        parts.append(f"- Ranking: not ranked among {len(peers)} {facility.setting} buildings")

    parts.extend(["", f"**TOP 5 {facility.setting} PERFORMERS:**"])
    parts.extend(
        f"{i}. {p.facility_name} ({p.state}): {pct(p.value)}{_you(p.facility_id, fid)}"
        for i, p in enumerate(top, start=1)
    )

    parts.extend(["", f"**BOTTOM 5 {facility.setting} BUILDINGS:**"])
    parts.extend(
        f"{len(peers) - i}. {p.facility_name} ({p.state}): {pct(p.value)}{_you(p.facility_id, fid)}"
        for i, p in enumerate(bottom)
    )

    parts.extend(["", f"**{facility.state} PEERS:**"])
    if state_peers:
        parts.extend(
            f"{i}. {p.facility_name}: {pct(p.value)}{_you(p.facility_id, fid)}"
            for i, p in enumerate(state_peers[:5], start=1)
        )
    else:
        parts.append("No other buildings in this state")

    parts.extend(["", "**GAP ANALYSIS:**"])
    if rank is not None and rank.found and ctx.margin is not None:
        leaders = peers[:3]
        top_avg = sum(p.value for p in leaders) / len(leaders)
        gap = top_avg - ctx.margin
        parts.extend([
            f"The top {len(leaders)} performers average {pct(top_avg)}. "
            f"That's a {pct(gap)} gap from where you are now.",
            "",
            "What would closing half that gap mean?",
            f"- At your current census, improving margin by {pct(gap / 2)} could add "
            "significant dollars to the bottom line",
        ])
    else:
        parts.append("Insufficient data for gap analysis")

    parts.extend(["", "Want me to dig into what specifically the top performers are doing differently?"])
    return "\n".join(parts)


# =====================================================
# SUGGESTIONS
# =====================================================

def suggestions(ctx: NarrativeContext) -> str:
    facility = ctx.snapshot.facility
    margin = ctx.margin
    skilled_mix = ctx.skilled_mix
    revenue_ppd = ctx.revenue_ppd
    expense_ppd = ctx.expense_ppd
    contract_labor = ctx.contract_labor

    priorities: List[str] = []
    ideas: List[str] = []

    if margin is not None and margin < 5:
        priorities.append(
            "**EBITDAR Margin** - This is critical. Every point of margin improvement "
            "matters significantly at this level."
        )

    if skilled_mix is not None and skilled_mix < SKILLED_MIX_TARGET:
        ideas.append(
            f"**Skilled Mix Opportunity:** Currently at {pct(skilled_mix)}, below the 18% target. Consider:\n"
            "   - Reviewing hospital liaison activities - are you visible at the key discharge planning meetings?\n"
            "   - Auditing intake processes - how quickly are you responding to referrals?\n"
            "   - Clinical capabilities - any specialty programs that could attract skilled patients?"
        )

    if contract_labor is not None and contract_labor > 10:
        ideas.append(
            f"**Contract Labor Reduction:** At {pct(contract_labor)}, this is eating into margin. Ideas:\n"
            "   - What's driving turnover? Exit interviews revealing anything?\n"
            "   - Competitive wage analysis - are you paying market rate?\n"
            "   - Retention bonuses or incentive programs?"
        )

    if revenue_ppd is not None and revenue_ppd < 400:
        ideas.append(
            f"**Revenue Enhancement:** Revenue PPD at {usd(revenue_ppd)} is below benchmark. Consider:\n"
            "   - Payer mix optimization - MA contracts may need renegotiation\n"
            "   - Ancillary services - therapy intensity appropriate?\n"
            "   - Rate analysis vs competitors in your market"
        )

    if expense_ppd is not None and expense_ppd > 360:
        ideas.append(
            f"**Expense Management:** Expense PPD at {usd(expense_ppd)} is high. Look at:\n"
            "   - Supply chain - any group purchasing opportunities?\n"
            "   - Overtime patterns - is there a scheduling issue?\n"
            "   - Vendor contracts due for renegotiation?"
        )

    behind_goals = [
        (g, p) for g, p in ctx.goal_progress if p.status in ("behind", "at_risk")
    ]
    for goal, progress in behind_goals:
        ideas.append(
            f"**Goal Check-in ({K.kpi_label(goal.kpi_id)}):** {progress.progress:.0f}% of the way to "
            f"{format_kpi_value(goal.kpi_id, goal.target_value)}. Worth revisiting the plan behind this target."
        )

    if not ideas:
        ideas.append(
            "This building is performing well on most metrics. Focus areas for continued excellence:\n"
            "   - Maintaining current staffing levels and culture\n"
            "   - Documenting what's working to share with other buildings\n"
            "   - Looking for incremental improvements in skilled mix or MA penetration"
        )

    parts: List[str] = [f"**Improvement Suggestions: {facility.name}**", ""]
    if priorities:
        parts.extend(["**TOP PRIORITY:**", *priorities, ""])

    parts.extend(["**SPECIFIC RECOMMENDATIONS:**", "", "\n\n".join(ideas), "", "**PEER LEARNING OPPORTUNITIES:**"])

    mentors = [p for p in ctx.ranked() if p.facility_id != facility.facility_id][:2]
    if mentors:
        parts.append("Consider connecting with:")
        parts.extend(
            f"- {p.facility_name} ({pct(p.value)} margin) - what's their secret?" for p in mentors
        )
    else:
        parts.append("No clear peer learning targets identified")

    parts.extend([
        "",
        "**QUICK WINS TO CONSIDER:**",
        "1. Weekly intake call reviews to improve conversion",
        "2. Monthly labor cost variance reviews",
        "3. Quarterly payer contract assessments",
        "",
        "Want me to draft an email to the leader with these suggestions?",
    ])
    return "\n".join(parts)


# =====================================================
# EMAIL (FACILITY LEADER)
# =====================================================

def email_draft(ctx: NarrativeContext) -> str:
    snap = ctx.snapshot
    facility = snap.facility
    margin = ctx.margin
    skilled_mix = ctx.skilled_mix
    contract_labor = ctx.contract_labor
    revenue_ppd = ctx.revenue_ppd
    trend = ctx.trend

    if margin >= 8:
        margin_status = "solid"
    elif margin >= 0:
        margin_status = "okay but has room to grow"
    else:
        margin_status = "concerning and needs attention"

    trend_note = {
        "improving": "which is great to see",
        "declining": "which we should discuss",
    }.get(trend.direction, "")

    top_peer = next(
        (p for p in ctx.ranked() if p.facility_id != facility.facility_id),
        None,
    )

    opening = (
        f"Looking at {snap.period_id}, I see the building is running at {pct(margin)} "
        f"EBITDAR margin, which is {margin_status}"
    )
    if trend_note:
        opening += f" - the trend lately has been {trend.direction}, {trend_note}"
    opening += "."

    body: List[str] = []
    if skilled_mix is not None:
        if skilled_mix >= SKILLED_MIX_TARGET:
            note = "That's solid - whatever you're doing with referral sources seems to be working."
        elif top_peer is not None:
            note = (
                f"Our target is 18%+, and {top_peer.facility_name} is hitting {pct(top_peer.value)} "
                "margin with a higher skilled mix. Have you connected with their team?"
            )
        else:
            note = "Our target is 18%+, and there might be opportunity here."
        body.append(f"**Skilled Mix:** You're at {pct(skilled_mix)}. {note}")

    if contract_labor is not None:
        if contract_labor <= 8:
            note = "Great job keeping this low - that's a real competitive advantage."
        else:
            note = (
                "I know the market is tough, but this is higher than we'd like. "
                "What's the biggest barrier to permanent hires right now?"
            )
        body.append(f"**Contract Labor:** Currently at {pct(contract_labor)}. {note}")

    if revenue_ppd is not None:
        note = (
            "above benchmark, nice work!"
            if revenue_ppd >= 420
            else "a bit below where we'd like to see it. Any MA contracts up for renewal we should strategize on?"
        )
        body.append(f"**Revenue PPD:** {usd(revenue_ppd)} - {note}")

    history = snap.margin_trend
    if len(history) >= 3:
        closing = {
            "improving": "Love seeing this upward movement. What's clicking?",
            "declining": "The trend here is something I'd like to understand better. What's changed?",
        }.get(trend.direction, "Pretty steady. Any opportunities you see to push things higher?")
        body.append(
            "Looking back at the past few months:\n"
            + "\n".join(f"- {t.period_id}: {pct(t.value)}" for t in history[-4:])
            + f"\n\n{closing}"
        )

    parts: List[str] = [
        f"**Draft Email for {facility.name} Leader**",
        "",
        "---",
        "",
        f"Subject: Checking in on {snap.period_id} results + a few thoughts",
        "",
        "Hey [Name],",
        "",
        "Hope you're doing well! Wanted to reach out after looking at this month's numbers. "
        "Got a few minutes to chat sometime this week?",
        "",
        opening,
        "",
        "A few things caught my eye:",
        "",
        "\n\n".join(body),
        "",
        "Not trying to pile on - genuinely want to help and understand what's happening on the ground. "
        "Sometimes the numbers don't tell the whole story.",
    ]

    if top_peer is not None:
        parts.extend([
            "",
            f"Quick thought - {top_peer.facility_name} is doing really well right now "
            f"({pct(top_peer.value)} margin). Might be worth a quick call with their ED to compare notes?",
        ])

    parts.extend([
        "",
        "Let me know when works for a quick chat.",
        "",
        "[Your name]",
        "",
        "P.S. - "
        + (
            "Seriously, great job this month. Make sure you're recognizing the team."
            if margin >= 10
            else "Happy to pull together more data or connect you with other EDs who've navigated similar situations."
        ),
        "",
        "---",
        "",
        "*Adjust names and specific numbers as needed before sending*",
    ])
    return "\n".join(parts)


# =====================================================
# BENCHMARK (FACILITY)
# =====================================================

def _band(value: Optional[float], good: float, near: float, higher_is_better: bool = True) -> str:
    if value is None:
        return "🔴 Below" if higher_is_better else "🔴 Above"
    if higher_is_better:
        if value >= good:
            return "✅ Above"
        if value >= near:
            return "⚠️ Near"
        return "🔴 Below"
    if value <= good:
        return "✅ Below (Good)"
    if value <= near:
        return "⚠️ Near"
    return "🔴 Above"


def benchmark_report(ctx: NarrativeContext) -> str:
    snap = ctx.snapshot
    facility = snap.facility
    b = ctx.settings.benchmarks
    margin = ctx.margin
    skilled_mix = ctx.skilled_mix
    contract_labor = ctx.contract_labor

    parts: List[str] = [
        f"**{facility.name} vs Industry Benchmarks ({snap.period_id}):**",
        "",
        "| Metric | Your Value | Benchmark | Status |",
        "|--------|-----------|-----------|--------|",
        f"| EBITDAR Margin | {pct(margin)} | {pct(b.operating_margin)} | "
        f"{_band(margin, b.operating_margin, b.operating_margin - 3)} |",
        f"| Skilled Mix | {pct(skilled_mix)} | {pct(b.skilled_mix)} | "
        f"{_band(skilled_mix, b.skilled_mix, b.skilled_mix - 5)} |",
        f"| Revenue PPD | {usd(ctx.revenue_ppd)} | {usd(b.revenue_ppd)} | "
        f"{_band(ctx.revenue_ppd, b.revenue_ppd, b.revenue_ppd * 0.9)} |",
        f"| Expense PPD | {usd(ctx.expense_ppd)} | {usd(b.expense_ppd)} | "
        f"{_band(ctx.expense_ppd, b.expense_ppd, b.expense_ppd + 30, higher_is_better=False)} |",
        f"| Contract Labor | {pct(contract_labor)} | {pct(b.contract_labor)} | "
        f"{_band(contract_labor, b.contract_labor, b.contract_labor + 5, higher_is_better=False)} |",
        "",
        "**BIGGEST GAPS:**",
    ]

    gaps: List[str] = []
    if margin is not None and margin < b.operating_margin:
        gaps.append(f"- Margin: {pct(b.operating_margin - margin)} below target")
    if skilled_mix is not None and skilled_mix < b.skilled_mix:
        gaps.append(f"- Skilled Mix: {pct(b.skilled_mix - skilled_mix)} below target")
    if contract_labor is not None and contract_labor > b.contract_labor:
        gaps.append(f"- Contract Labor: {pct(contract_labor - b.contract_labor)} above target")
    parts.extend(gaps or ["- Looking good across the board!"])

    rank_line = _rank_line(ctx)
    if rank_line:
        parts.extend(["", "**PEER CONTEXT:**", f"You're {rank_line[0].lower()}{rank_line[1:]}"])

    parts.extend(["", "Want me to suggest specific improvements to close these gaps?"])
    return "\n".join(parts)
