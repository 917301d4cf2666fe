# snfintel/narrative/intents.py

"""
Intent classification for free-text assistant queries.

The rule table below IS the priority order. The first rule that matches
wins; every other matching intent is reported back so callers and tests
can see when a query was ambiguous.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Literal, Optional, Tuple


Scope = Literal["facility", "portfolio"]


class Intent(str, Enum):
    FULL_REVIEW = "full_review"
    TREND = "trend"
    PEER_COMPARISON = "peer_comparison"
    SUGGESTIONS = "suggestions"
    EMAIL_DRAFT = "email_draft"
    BENCHMARK = "benchmark"
    TOP_PERFORMERS = "top_performers"
    ATTENTION = "attention"
    SUMMARY = "summary"
    MARGIN = "margin"
    HELP = "help"


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    level: Scope
    any_of: Tuple[str, ...] = ()
    all_of: Tuple[str, ...] = ()
    scopes: FrozenSet[str] = frozenset({"facility", "portfolio"})

    def matches(self, text: str, scope: str) -> Tuple[str, ...]:
        """Return the keywords that fired, or () when the rule does not apply."""
        if scope not in self.scopes:
            return ()

        hits = tuple(k for k in self.any_of if k in text)
        if hits:
            return hits

        if self.all_of and all(k in text for k in self.all_of):
            return self.all_of

        return ()


@dataclass(frozen=True)
class IntentMatch:
    intent: Intent
    level: Scope
    priority: int
    keywords: Tuple[str, ...] = ()
    alternatives: Tuple[Intent, ...] = field(default_factory=tuple)

    @property
    def ambiguous(self) -> bool:
        return bool(self.alternatives)


_FACILITY_ONLY = frozenset({"facility"})


# =====================================================
# RULE TABLE (PRIORITY ORDER)
# =====================================================

INTENT_RULES: List[IntentRule] = [
    # ---- facility deep-dives ----
    IntentRule(Intent.FULL_REVIEW, "facility", any_of=("review", "full", "complete"), scopes=_FACILITY_ONLY),
    IntentRule(Intent.TREND, "facility", any_of=("trend", "history", "past"), scopes=_FACILITY_ONLY),
    IntentRule(Intent.PEER_COMPARISON, "facility", any_of=("peer", "compare"), scopes=_FACILITY_ONLY),
    IntentRule(Intent.SUGGESTIONS, "facility", any_of=("suggest", "improve", "recommend"), scopes=_FACILITY_ONLY),

    # ---- either scope ----
    IntentRule(Intent.EMAIL_DRAFT, "portfolio", any_of=("email", "draft")),
    IntentRule(Intent.BENCHMARK, "portfolio", any_of=("benchmark", "industry")),

    # ---- portfolio views ----
    IntentRule(Intent.PEER_COMPARISON, "portfolio", any_of=("peer", "compare"), all_of=("worst", "best")),
    IntentRule(Intent.TREND, "portfolio", any_of=("trend", "analysis", "opportunit")),
    IntentRule(Intent.TOP_PERFORMERS, "portfolio", any_of=("top", "best", "performer")),
    IntentRule(Intent.ATTENTION, "portfolio", any_of=("attention", "alert", "concern")),
    IntentRule(Intent.SUMMARY, "portfolio", any_of=("summary", "overview")),
    IntentRule(Intent.MARGIN, "portfolio", any_of=("margin", "profitability")),
]


def classify_intent(query: str, scope: str, has_facility: Optional[bool] = None) -> IntentMatch:
    """
    Resolve a query to exactly one intent.

    scope is "facility" when the user is looking at one building. Pass
    has_facility=False to demote facility scope when no facility record
    is available; facility-only rules are then skipped.
    """
    text = (query or "").lower()
    effective_scope = scope
    if scope == "facility" and has_facility is False:
        effective_scope = "portfolio"

    winner: Optional[Tuple[int, IntentRule, Tuple[str, ...]]] = None
    alternatives: List[Intent] = []

    for priority, rule in enumerate(INTENT_RULES):
        hits = rule.matches(text, effective_scope)
        if not hits:
            continue
        if winner is None:
            winner = (priority, rule, hits)
        elif rule.intent != winner[1].intent and rule.intent not in alternatives:
            alternatives.append(rule.intent)

    if winner is None:
        return IntentMatch(
            intent=Intent.HELP,
            level="portfolio",
            priority=len(INTENT_RULES),
        )

    priority, rule, hits = winner
    level: Scope = rule.level
    if rule.level == "portfolio" and effective_scope == "facility" and rule.intent in (
        Intent.EMAIL_DRAFT,
        Intent.BENCHMARK,
    ):
        level = "facility"

    return IntentMatch(
        intent=rule.intent,
        level=level,
        priority=priority,
        keywords=hits,
        alternatives=tuple(alternatives),
    )
