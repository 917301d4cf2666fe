from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class KPIContract:
    kpi_id: str
    label: str
    unit: Literal["currency", "percent", "ratio", "hours"]
    direction: Literal["higher_is_better", "lower_is_better", "neutral"]
    description: str
    short_label: Optional[str] = None

    @property
    def higher_is_better(self) -> bool:
        return self.direction != "lower_is_better"
