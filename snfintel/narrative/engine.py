# snfintel/narrative/engine.py

import logging
from typing import Callable, Dict, Optional, Tuple

from snfintel.config.settings import NarrativeSettings

from . import facility, portfolio
from .context import NarrativeContext, build_context
from .intents import Intent, classify_intent
from .samples import SAMPLE_BLOCKS
from .schema import NarrativeResult, NarrativeSnapshot


logger = logging.getLogger(__name__)

Handler = Callable[[NarrativeContext], Optional[str]]


# =====================================================
# HANDLER TABLE
# =====================================================

HANDLERS: Dict[Tuple[Intent, str], Handler] = {
    (Intent.FULL_REVIEW, "facility"): facility.full_review,
    (Intent.TREND, "facility"): facility.trend_report,
    (Intent.PEER_COMPARISON, "facility"): facility.peer_comparison,
    (Intent.SUGGESTIONS, "facility"): facility.suggestions,
    (Intent.EMAIL_DRAFT, "facility"): facility.email_draft,
    (Intent.BENCHMARK, "facility"): facility.benchmark_report,

    (Intent.EMAIL_DRAFT, "portfolio"): portfolio.email_draft,
    (Intent.BENCHMARK, "portfolio"): portfolio.benchmark_report,
    (Intent.PEER_COMPARISON, "portfolio"): portfolio.peer_comparison,
    (Intent.TREND, "portfolio"): portfolio.trend_report,
    (Intent.TOP_PERFORMERS, "portfolio"): portfolio.top_performers,
    (Intent.ATTENTION, "portfolio"): portfolio.attention,
    (Intent.SUMMARY, "portfolio"): portfolio.summary,
    (Intent.MARGIN, "portfolio"): portfolio.margin_report,
}

# Facility answers that need the building's own margin; without it the
# portfolio version of the same intent is rendered.
_NEEDS_FACILITY_MARGIN = {Intent.EMAIL_DRAFT, Intent.BENCHMARK}


def _fallback(intent: Intent, ctx: NarrativeContext) -> str:
    sample = SAMPLE_BLOCKS.get(intent)
    if ctx.settings.sample_fallbacks and sample is not None:
        logger.info("Rendering sample content for %s (snapshot lacks data)", intent.value)
        return sample(ctx.snapshot.period_id, ctx.settings.thresholds)
    return portfolio.insufficient_data(intent, ctx.snapshot.period_id)


# =====================================================
# PUBLIC API
# =====================================================

def generate_narrative(
    query: str,
    scope: str,
    snapshot: NarrativeSnapshot,
    settings: Optional[NarrativeSettings] = None,
) -> NarrativeResult:
    """
    Answer a free-text question with a templated narrative.

    Rules:
    - Exactly one intent is chosen; competing matches are reported
    - Facility handlers run only when a facility is in the snapshot
    - Missing data renders "--" or an insufficient-data message
    - Sample content only when settings.sample_fallbacks is on
    """
    settings = settings or NarrativeSettings()

    match = classify_intent(query, scope, has_facility=snapshot.facility is not None)
    logger.debug(
        "Intent %s (%s) at priority %d via %s",
        match.intent.value,
        match.level,
        match.priority,
        match.keywords,
    )
    if match.ambiguous:
        logger.info(
            "Query %r also matched %s; using %s",
            query,
            [i.value for i in match.alternatives],
            match.intent.value,
        )

    ctx = build_context(snapshot, settings)
    level = match.level

    if match.intent == Intent.HELP:
        text = portfolio.help_text(query, settings.focus_areas)
    else:
        if level == "facility" and match.intent in _NEEDS_FACILITY_MARGIN and ctx.margin is None:
            level = "portfolio"

        text = HANDLERS[(match.intent, level)](ctx)
        if text is None:
            text = _fallback(match.intent, ctx)

    return NarrativeResult(
        intent=match.intent,
        level=level,
        text=text,
        ambiguous=match.ambiguous,
        alternatives=match.alternatives,
    )
