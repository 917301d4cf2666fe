"""Intent classification and templated narratives over a period snapshot."""

from .alerts import Alert, evaluate_alerts
from .engine import generate_narrative
from .formatter import format_kpi_value
from .intents import Intent, IntentMatch, classify_intent
from .schema import NarrativeResult, NarrativeSnapshot

__all__ = [
    "Alert",
    "Intent",
    "IntentMatch",
    "NarrativeResult",
    "NarrativeSnapshot",
    "classify_intent",
    "evaluate_alerts",
    "format_kpi_value",
    "generate_narrative",
]
